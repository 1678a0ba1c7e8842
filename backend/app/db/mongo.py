# backend/app/db/mongo.py
import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from app.core.config import settings

logger = logging.getLogger(__name__)

client: AsyncIOMotorClient | None = None
db: AsyncIOMotorDatabase | None = None

# Indexes carried over from the original feedback schema
FEEDBACK_INDEXES = [
    [("email", ASCENDING)],
    [("product", ASCENDING)],
    [("createdAt", DESCENDING)],
    [("sentiment", ASCENDING)],
    [("rating", ASCENDING)],
    [("nps", ASCENDING)],
]


async def connect_to_mongo():
    global client, db
    client = AsyncIOMotorClient(settings.MONGO_URI)
    db = client[settings.MONGO_DB_NAME]
    logger.info("MongoDB connected (db=%s)", settings.MONGO_DB_NAME)


async def close_mongo_connection():
    global client, db
    if client:
        client.close()
        logger.info("MongoDB connection closed")
    client = None
    db = None


def get_db() -> AsyncIOMotorDatabase:
    if db is None:
        raise RuntimeError("MongoDB not initialized. Did you call connect_to_mongo()?")
    return db


async def ensure_indexes(database: AsyncIOMotorDatabase) -> None:
    collection = database[settings.FEEDBACK_COLLECTION]
    for keys in FEEDBACK_INDEXES:
        await collection.create_index(keys)
    logger.info("Ensured %d indexes on %s", len(FEEDBACK_INDEXES), settings.FEEDBACK_COLLECTION)
