"""
Utilities for Pongbot.
"""

from .gifs import GifFetcher
from .logging import command_context, setup_logging

__all__ = [
    "GifFetcher",
    "command_context",
    "setup_logging"
]
