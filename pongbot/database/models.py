"""
Database models for Pongbot.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, model_validator
from bson import ObjectId


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChallengeType(str, Enum):
    """Challenge type enumeration."""
    SINGLE = "Single"
    DOUBLE = "Double"

    @property
    def team_size(self) -> int:
        return 1 if self is ChallengeType.SINGLE else 2


class ChallengeState(str, Enum):
    """Challenge state enumeration."""
    PROPOSED = "Proposed"
    ACCEPTED = "Accepted"
    DECLINED = "Declined"
    COMPLETED = "Completed"


class Player(BaseModel):
    """Player model."""

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: ObjectId = Field(default_factory=ObjectId, alias="_id")
    name: str = Field(..., min_length=1, description="Unique, case-sensitive player name")

    # Statistics
    wins: int = Field(default=0, ge=0, description="Number of wins")
    losses: int = Field(default=0, ge=0, description="Number of losses")
    elo: float = Field(default=0.0, description="Current rating")
    tau: float = Field(default=0.0, ge=0, description="Rating volatility")

    current_challenge: Optional[ObjectId] = Field(None, description="Active challenge ID")

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)

    def is_challenged(self) -> bool:
        return self.current_challenge is not None


class Challenge(BaseModel):
    """Challenge model."""

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: ObjectId = Field(default_factory=ObjectId, alias="_id")
    type: ChallengeType = Field(..., description="Single or Double")
    state: ChallengeState = Field(default=ChallengeState.PROPOSED)
    date: datetime = Field(default_factory=utcnow, description="When the challenge was made")

    # Teams, by player name
    challenger: List[str] = Field(default_factory=list)
    challenged: List[str] = Field(default_factory=list)
    winners: List[str] = Field(default_factory=list)

    updated_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def _check_teams(self):
        # Empty teams are allowed for hand-built records
        if not self.challenger and not self.challenged:
            return self
        size = self.type.team_size
        if len(self.challenger) != size or len(self.challenged) != size:
            raise ValueError(f"A {self.type.value} challenge needs {size} player(s) per team")
        if set(self.challenger) & set(self.challenged):
            raise ValueError("Teams must not share players")
        return self

    def to_document(self) -> dict:
        document = self.model_dump(by_alias=True)
        document["type"] = self.type.value
        document["state"] = self.state.value
        return document

    @property
    def participants(self) -> List[str]:
        return self.challenger + self.challenged

    def team_of(self, name: str) -> Optional[List[str]]:
        """Return the team containing ``name``, or None."""
        if name in self.challenger:
            return self.challenger
        if name in self.challenged:
            return self.challenged
        return None

    def opponents_of(self, name: str) -> Optional[List[str]]:
        if name in self.challenger:
            return self.challenged
        if name in self.challenged:
            return self.challenger
        return None

    def is_active(self) -> bool:
        return self.state in (ChallengeState.PROPOSED, ChallengeState.ACCEPTED)
