"""
Pongbot: ping pong challenges and ratings for a chat community.
"""

from .results import Failure, Notice, Result, Success
from .service import PongService

__version__ = "0.1.0"

__all__ = [
    "PongService",
    "Result",
    "Success",
    "Notice",
    "Failure"
]
