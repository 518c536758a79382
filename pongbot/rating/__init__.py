"""
Rating package for Pongbot.
"""

from .elo import RatingEngine, RatingSettings, WIN, LOSS

__all__ = [
    "RatingEngine",
    "RatingSettings",
    "WIN",
    "LOSS"
]
