import logging
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from cart_service.core.config import settings
from cart_service.services.store import MongoStore

logger = logging.getLogger(__name__)

# Global MongoDB client
_client: AsyncIOMotorClient = None
_database: AsyncIOMotorDatabase = None


async def connect_to_mongo():
    """Connect to MongoDB and make sure the uniqueness indexes exist."""
    global _client, _database
    _client = AsyncIOMotorClient(settings.MONGODB_URI)
    _database = _client[settings.MONGODB_DB_NAME]
    logger.info(f"Connected to MongoDB: {settings.MONGODB_DB_NAME}")
    await MongoStore(_database, timeout=settings.STORE_TIMEOUT_SECONDS).ensure_indexes()


async def close_mongo_connection():
    """Close MongoDB connection."""
    global _client
    if _client:
        _client.close()
        logger.info("Closed MongoDB connection")


def get_database() -> AsyncIOMotorDatabase:
    """Get MongoDB database instance."""
    return _database
