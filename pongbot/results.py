"""
Tagged results returned by the Pongbot service.

``Success`` carries a payload, ``Notice`` a payload plus confirmation text for
the channel, and ``Failure`` an error kind plus the line to show the user.
"""

from typing import Any, Literal, Union
from pydantic import BaseModel, ConfigDict

from .exceptions import ErrorKind, PongError


class Success(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    tag: Literal["success"] = "success"
    payload: Any = None

    @property
    def ok(self) -> bool:
        return True


class Notice(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    tag: Literal["notice"] = "notice"
    message: str
    payload: Any = None

    @property
    def ok(self) -> bool:
        return True


class Failure(BaseModel):
    model_config = ConfigDict(frozen=True)

    tag: Literal["failure"] = "failure"
    kind: ErrorKind
    message: str

    @property
    def ok(self) -> bool:
        return False

    @classmethod
    def from_error(cls, error: PongError) -> "Failure":
        return cls(kind=error.kind, message=error.message)


Result = Union[Success, Notice, Failure]


def render(result: Result) -> str:
    """Single line for the chat channel."""
    if isinstance(result, (Notice, Failure)):
        return result.message
    payload = result.payload
    if payload is None:
        return "Done."
    if isinstance(payload, str):
        return payload
    if isinstance(payload, list):
        return "\n".join(_describe(item) for item in payload) or "Nobody yet."
    return _describe(payload)


def _describe(item: Any) -> str:
    # Player-like records
    if hasattr(item, "wins") and hasattr(item, "elo"):
        return f"{item.name}: {item.wins} wins {item.losses} losses (elo: {round(item.elo)})"
    if hasattr(item, "challenger") and hasattr(item, "state"):
        return (
            f"{item.type.value} challenge {item.state.value}: "
            f"{' and '.join(item.challenger)} vs {' and '.join(item.challenged)}"
        )
    return str(item)
