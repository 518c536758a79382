"""
Challenge management package for Pongbot.
"""

from .manager import ChallengeCoordinator
from .state_machine import ChallengeStateMachine

__all__ = [
    "ChallengeCoordinator",
    "ChallengeStateMachine"
]
