"""
In-process player and challenge stores.

Same interface as the MongoDB operations; records are copied in and out so a
caller only sees its changes after ``save``. Used for local runs and tests.
"""

from typing import Dict, List, Optional
from bson import ObjectId

from .models import Challenge, Player, utcnow
from ..exceptions import DuplicatePlayer


class MemoryPlayerStore:

    def __init__(self):
        self._players: Dict[str, Player] = {}

    async def create(self, name: str) -> Player:
        if name in self._players:
            raise DuplicatePlayer(name)
        player = Player(name=name)
        self._players[name] = player.model_copy(deep=True)
        return player

    async def find_one(self, name: str) -> Optional[Player]:
        player = self._players.get(name)
        return player.model_copy(deep=True) if player else None

    async def save(self, player: Player) -> None:
        player.updated_at = utcnow()
        self._players[player.name] = player.model_copy(deep=True)

    async def list_all(self) -> List[Player]:
        return [p.model_copy(deep=True) for p in self._players.values()]

    async def leaderboard(self, limit: int = 10) -> List[Player]:
        ranked = sorted(self._players.values(), key=lambda p: (p.elo, p.wins), reverse=True)
        return [p.model_copy(deep=True) for p in ranked[:limit]]


class MemoryChallengeStore:

    def __init__(self):
        self._challenges: Dict[ObjectId, Challenge] = {}

    async def create(self, challenge: Challenge) -> Challenge:
        self._challenges[challenge.id] = challenge.model_copy(deep=True)
        return challenge

    async def find_one(self, challenge_id: ObjectId) -> Optional[Challenge]:
        challenge = self._challenges.get(challenge_id)
        return challenge.model_copy(deep=True) if challenge else None

    async def save(self, challenge: Challenge) -> None:
        challenge.updated_at = utcnow()
        self._challenges[challenge.id] = challenge.model_copy(deep=True)

    async def delete(self, challenge_id: ObjectId) -> None:
        self._challenges.pop(challenge_id, None)

    def __len__(self) -> int:
        return len(self._challenges)
