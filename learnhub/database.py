import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from learnhub import config

logger = logging.getLogger(__name__)

_client: Optional[AsyncIOMotorClient] = None


def get_client() -> AsyncIOMotorClient:
    """Create the motor client on first use"""
    global _client
    if _client is None:
        _client = AsyncIOMotorClient(config.MONGO_URL)
    return _client


def get_db_instance() -> AsyncIOMotorDatabase:
    return get_client()[config.DATABASE_NAME]


# ==================== DEPENDENCY FUNCTIONS ====================

async def get_db() -> AsyncIOMotorDatabase:
    """Database dependency"""
    return get_db_instance()


def close_client():
    global _client
    if _client is not None:
        _client.close()
        _client = None
        logger.info("MongoDB client closed")


# ==================== HELPERS ====================

def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_id(prefix: str, length: int = 12) -> str:
    """Generate unique ID with prefix, e.g. COURSE_3F9A1C0B7D2E"""
    return f"{prefix}_{uuid.uuid4().hex[:length].upper()}"


def strip_mongo_id(doc: Optional[dict]) -> Optional[dict]:
    if doc is None:
        return None
    doc.pop("_id", None)
    return doc


def strip_many(docs: List[dict]) -> List[dict]:
    return [strip_mongo_id(doc) for doc in docs]


# ==================== DATABASE INDEXES ====================

async def create_indexes(db: AsyncIOMotorDatabase):
    """Create MongoDB indexes used by the course and progress queries"""
    # Users
    await db.users.create_index("user_id", unique=True)
    await db.users.create_index("email", unique=True)

    # Courses
    await db.courses.create_index("course_id", unique=True)
    await db.courses.create_index("teacher_id")
    await db.courses.create_index([("created_at", -1)])

    # Progress: one record per (user, course) comes from upserts, not from this index
    await db.progress.create_index([("user_id", 1), ("course_id", 1)])

    logger.info("LearnHub indexes created")
