"""
Domain errors for Pongbot.

Every error carries a one-line message suitable for posting straight back to
the chat channel. Storage errors are not wrapped: they propagate as raised by
pymongo.
"""

from enum import Enum


class ErrorKind(str, Enum):
    PLAYER_NOT_FOUND = "player_not_found"
    DUPLICATE_PLAYER = "duplicate_player"
    NO_ACTIVE_CHALLENGE = "no_active_challenge"
    CHALLENGE_ALREADY_ACTIVE = "challenge_already_active"
    INVALID_CHALLENGE = "invalid_challenge"
    INVALID_CHALLENGE_STATE = "invalid_challenge_state"
    CHALLENGE_MISMATCH = "challenge_mismatch"


class PongError(Exception):
    """Base class for all domain errors."""
    kind: ErrorKind

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class PlayerNotFound(PongError):
    kind = ErrorKind.PLAYER_NOT_FOUND

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"User '{name}' does not exist.")


class DuplicatePlayer(PongError):
    kind = ErrorKind.DUPLICATE_PLAYER

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"User '{name}' already exists.")


class NoActiveChallenge(PongError):
    kind = ErrorKind.NO_ACTIVE_CHALLENGE

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No challenge for {name}.")


class ChallengeAlreadyActive(PongError):
    kind = ErrorKind.CHALLENGE_ALREADY_ACTIVE

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"There's already an active challenge for {name}")


class InvalidChallenge(PongError):
    """The challenge request itself is malformed (self-challenge, repeated names)."""
    kind = ErrorKind.INVALID_CHALLENGE


class InvalidChallengeState(PongError):
    """The requested transition is not allowed from the challenge's current state."""
    kind = ErrorKind.INVALID_CHALLENGE_STATE


class ChallengeMismatch(PongError):
    kind = ErrorKind.CHALLENGE_MISMATCH

    def __init__(self):
        super().__init__("Players in this challenge no longer agree on it.")
