"""
MongoDB connection and query functions.
"""
import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from pymongo import MongoClient
from pymongo.errors import PyMongoError
from motor.motor_asyncio import AsyncIOMotorClient

from select_start.config import MONGODB_URI, MONGODB_DB_NAME, STORE_TIMEOUT_SECONDS
from select_start.services.errors import SourceUnavailableError

# Set up logging
logger = logging.getLogger(__name__)

USER_FIELDS = {
    "raUsername": 1,
    "discordId": 1,
    "monthlyChallenges": 1,
    "shadowChallenges": 1,
    "communityAwards": 1,
    "nominations": 1,
}

# Global store instance
mongo_store = None


class MongoStore:
    """Read-only access to the bot's users and challenges collections."""

    def __init__(self, async_db, timeout: float = STORE_TIMEOUT_SECONDS):
        self.db = async_db
        self.timeout = timeout

    async def _bounded(self, what: str, coro):
        try:
            return await asyncio.wait_for(coro, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"MongoDB {what} timed out after {self.timeout}s")
            raise SourceUnavailableError(f"Database timed out while loading {what}") from e
        except PyMongoError as e:
            logger.error(f"MongoDB {what} failed: {e}")
            raise SourceUnavailableError(f"Database error while loading {what}") from e

    async def find_challenge(self, start: datetime, end: datetime) -> Optional[Dict[str, Any]]:
        """First challenge dated in [start, end), or None."""
        return await self._bounded(
            "challenge",
            self.db.challenges.find_one({"date": {"$gte": start, "$lt": end}}, sort=[("date", 1)]),
        )

    async def find_challenges(self, start: datetime, end: datetime) -> List[Dict[str, Any]]:
        """All challenges dated in [start, end), oldest first."""
        cursor = self.db.challenges.find({"date": {"$gte": start, "$lt": end}}).sort("date", 1)
        return await self._bounded("challenges", cursor.to_list(length=None))

    async def find_all_users(self) -> List[Dict[str, Any]]:
        cursor = self.db.users.find({}, USER_FIELDS)
        users = await self._bounded("users", cursor.to_list(length=None))
        logger.info(f"Retrieved {len(users)} users from MongoDB")
        return users


def init_mongodb() -> bool:
    """Initialize MongoDB connections."""
    global mongo_store

    timeout_ms = int(STORE_TIMEOUT_SECONDS * 1000)
    try:
        # Synchronous client only to check the connection at startup
        with MongoClient(MONGODB_URI, serverSelectionTimeoutMS=timeout_ms) as client:
            db_info = client.server_info()
            logger.info(f"Connected to MongoDB: {db_info.get('version')}")

            collection_names = client[MONGODB_DB_NAME].list_collection_names()
            for name in ("users", "challenges"):
                if name not in collection_names:
                    logger.warning(f"{name} collection not found in MongoDB")

        async_client = AsyncIOMotorClient(
            MONGODB_URI,
            tz_aware=True,
            serverSelectionTimeoutMS=timeout_ms,
            socketTimeoutMS=timeout_ms,
        )
        mongo_store = MongoStore(async_client[MONGODB_DB_NAME])
        return True
    except PyMongoError as e:
        logger.error(f"MongoDB connection error: {str(e)}")
        mongo_store = None
        return False


def close_mongodb():
    """Close the MongoDB connection."""
    global mongo_store
    if mongo_store is not None:
        mongo_store.db.client.close()
        mongo_store = None
        logger.info("MongoDB connection closed")
