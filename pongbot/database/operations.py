"""
Database operations for Pongbot.

``PlayerOps`` and ``ChallengeOps`` are the MongoDB-backed player and challenge
stores. Storage errors are logged and re-raised unchanged.
"""

from typing import Optional, List
from motor.motor_asyncio import AsyncIOMotorDatabase
from bson import ObjectId
from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError
import structlog

from .models import Challenge, Player, utcnow
from ..config import DatabaseSettings, get_db_config
from ..exceptions import DuplicatePlayer

logger = structlog.get_logger(__name__)


class BaseOperations:
    """Base operations class."""

    collection_name: str

    def __init__(self, database: AsyncIOMotorDatabase,
                 db_config: Optional[DatabaseSettings] = None):
        self.database = database
        self.db_config = db_config or get_db_config()

    @property
    def collection(self):
        return self.database[getattr(self.db_config, self.collection_name)]


class PlayerOps(BaseOperations):
    """Player database operations."""

    collection_name = "players_collection"

    async def create(self, name: str) -> Player:
        """Create a new player with zero stats."""
        player = Player(name=name)
        try:
            await self.collection.insert_one(player.to_document())
        except DuplicateKeyError:
            logger.warning("Player already exists", player=name)
            raise DuplicatePlayer(name) from None
        except PyMongoError as e:
            logger.error("Failed to create player", error=str(e), player=name)
            raise

        logger.info("Player created", player=name, player_id=str(player.id))
        return player

    async def find_one(self, name: str) -> Optional[Player]:
        try:
            data = await self.collection.find_one({"name": name})
        except PyMongoError as e:
            logger.error("Failed to get player", error=str(e), player=name)
            raise
        return Player(**data) if data else None

    async def save(self, player: Player) -> None:
        player.updated_at = utcnow()
        document = player.to_document()
        try:
            await self.collection.replace_one({"_id": player.id}, document)
        except PyMongoError as e:
            logger.error("Failed to save player", error=str(e), player=player.name)
            raise

    async def list_all(self) -> List[Player]:
        try:
            return [Player(**data) async for data in self.collection.find({})]
        except PyMongoError as e:
            logger.error("Failed to list players", error=str(e))
            raise

    async def leaderboard(self, limit: int = 10) -> List[Player]:
        """Players ordered by rating, best first."""
        try:
            cursor = self.collection.find({}).sort(
                [("elo", DESCENDING), ("wins", DESCENDING)]
            ).limit(limit)
            return [Player(**data) async for data in cursor]
        except PyMongoError as e:
            logger.error("Failed to get leaderboard", error=str(e))
            raise


class ChallengeOps(BaseOperations):
    """Challenge database operations."""

    collection_name = "challenges_collection"

    async def create(self, challenge: Challenge) -> Challenge:
        try:
            await self.collection.insert_one(challenge.to_document())
        except PyMongoError as e:
            logger.error("Failed to create challenge", error=str(e))
            raise

        logger.info("Challenge created", challenge_id=str(challenge.id),
                    type=challenge.type.value)
        return challenge

    async def find_one(self, challenge_id: ObjectId) -> Optional[Challenge]:
        try:
            data = await self.collection.find_one({"_id": challenge_id})
        except PyMongoError as e:
            logger.error("Failed to get challenge", error=str(e),
                         challenge_id=str(challenge_id))
            raise
        return Challenge(**data) if data else None

    async def save(self, challenge: Challenge) -> None:
        challenge.updated_at = utcnow()
        try:
            await self.collection.replace_one({"_id": challenge.id}, challenge.to_document())
        except PyMongoError as e:
            logger.error("Failed to save challenge", error=str(e),
                         challenge_id=str(challenge.id))
            raise

    async def delete(self, challenge_id: ObjectId) -> None:
        try:
            await self.collection.delete_one({"_id": challenge_id})
        except PyMongoError as e:
            logger.error("Failed to delete challenge", error=str(e),
                         challenge_id=str(challenge_id))
            raise
