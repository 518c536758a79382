"""
Database package for Pongbot.
"""

from .connection import DatabaseManager
from .memory import MemoryChallengeStore, MemoryPlayerStore
from .models import Challenge, ChallengeState, ChallengeType, Player
from .operations import ChallengeOps, PlayerOps

__all__ = [
    "DatabaseManager",
    "Challenge",
    "ChallengeState",
    "ChallengeType",
    "Player",
    "ChallengeOps",
    "PlayerOps",
    "MemoryChallengeStore",
    "MemoryPlayerStore"
]
