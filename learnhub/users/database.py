import logging
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from learnhub.auth.credentials import hash_password
from learnhub.database import generate_id, strip_many, strip_mongo_id, utcnow
from learnhub.errors import DuplicateEmailError

logger = logging.getLogger(__name__)

# ==================== USER CRUD ====================

def public_user(user: Optional[dict]) -> Optional[dict]:
    """User document without the Mongo _id and the password hash"""
    if user is None:
        return None
    user = strip_mongo_id(dict(user))
    user.pop("password", None)
    return user


async def create_user(db: AsyncIOMotorDatabase, user_data: dict) -> dict:
    """
    Create user with a hashed credential and an empty enrolled-course set

    Raises:
        DuplicateEmailError: email already registered
    """
    email = user_data["email"]
    if await find_user_by_email(db, email):
        raise DuplicateEmailError(email)

    now = utcnow()
    user = {
        "user_id": generate_id("USER"),
        "name": user_data["name"],
        "email": email,
        "password": hash_password(user_data["password"]),
        "role": user_data["role"],
        "enrolled_courses": [],
        "created_at": now,
        "updated_at": now,
    }

    try:
        await db.users.insert_one(user)
    except DuplicateKeyError:
        # Lost a race with another registration of the same email
        raise DuplicateEmailError(email)

    logger.info("Registered %s %s", user["role"], user["user_id"])
    return public_user(user)


async def find_user_by_email(db: AsyncIOMotorDatabase, email: str) -> Optional[dict]:
    """Point lookup; includes the password hash for credential checks"""
    return strip_mongo_id(await db.users.find_one({"email": email}))


async def find_user_by_id(db: AsyncIOMotorDatabase, user_id: str) -> Optional[dict]:
    return public_user(await db.users.find_one({"user_id": user_id}))


async def update_user(db: AsyncIOMotorDatabase, user_id: str, updates: dict) -> Optional[dict]:
    """Set profile fields; returns the updated user or None if missing"""
    updates = {k: v for k, v in updates.items() if v is not None}
    updates["updated_at"] = utcnow()
    user = await db.users.find_one_and_update(
        {"user_id": user_id},
        {"$set": updates},
        return_document=ReturnDocument.AFTER,
    )
    return public_user(user)


async def add_course_to_user(
    db: AsyncIOMotorDatabase, user_id: str, course_id: str, session=None
) -> bool:
    """
    Idempotent set-add of course_id to the user's enrolled courses.
    Returns False when the user is missing or already enrolled.
    """
    result = await db.users.update_one(
        {"user_id": user_id, "enrolled_courses": {"$ne": course_id}},
        {
            "$addToSet": {"enrolled_courses": course_id},
            "$set": {"updated_at": utcnow()},
        },
        session=session,
    )
    return result.modified_count > 0


async def get_all_users(db: AsyncIOMotorDatabase) -> List[dict]:
    cursor = db.users.find({}, {"_id": 0, "password": 0}).sort("created_at", -1)
    return strip_many(await cursor.to_list(length=None))
