"""
Database connection management for Pongbot.
"""

from typing import Optional
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure, PyMongoError
import structlog

from ..config import Settings, DatabaseSettings, get_config, get_db_config

logger = structlog.get_logger(__name__)


class DatabaseManager:
    """Database connection manager."""

    def __init__(self, config: Optional[Settings] = None,
                 db_config: Optional[DatabaseSettings] = None):
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None
        self.config = config or get_config()
        self.db_config = db_config or get_db_config()

    async def connect(self) -> AsyncIOMotorDatabase:
        """Connect to MongoDB, raising ConnectionFailure if the server is unreachable."""
        self.client = AsyncIOMotorClient(
            self.config.mongodb_url,
            serverSelectionTimeoutMS=self.db_config.connection_timeout * 1000
        )

        try:
            await self.client.admin.command('ping')
        except ConnectionFailure as e:
            logger.error("Failed to connect to MongoDB", error=str(e))
            self.client.close()
            self.client = None
            raise

        self.database = self.client[self.config.database_name]

        if self.db_config.enable_indexes:
            await self._create_indexes()

        logger.info("Connected to MongoDB", database=self.config.database_name)
        return self.database

    async def disconnect(self):
        """Disconnect from MongoDB database."""
        if self.client:
            self.client.close()
            self.client = None
            self.database = None
            logger.info("Disconnected from MongoDB")

    async def _create_indexes(self):
        if self.database is None:
            return

        try:
            players = self.database[self.db_config.players_collection]
            await players.create_index("name", unique=True)
            await players.create_index([("elo", -1), ("wins", -1)])
            await players.create_index("current_challenge")

            challenges = self.database[self.db_config.challenges_collection]
            await challenges.create_index("state")
            await challenges.create_index("date")

            logger.info("Database indexes created successfully")

        except PyMongoError as e:
            # Unique name index is what turns duplicate registrations into errors
            logger.error("Failed to create database indexes", error=str(e))
            raise
