"""
Per (user, course) lesson completion tracking.

Progress is recomputed on every write against the lesson count the caller
passes in, i.e. the course as it is now. A teacher adding a lesson after a
student finished lowers that student's percentage on their next toggle, and
removing lessons could push it past 100.

Two concurrent toggles for the same pair both read the old set and the last
write wins. A single user is assumed not to race against themselves.
"""

import logging
from typing import Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from learnhub.database import generate_id, strip_many, strip_mongo_id, utcnow

logger = logging.getLogger(__name__)


def calculate_progress(completed_count: int, total_lessons: int) -> float:
    """Completion percentage; a course without lessons is 0%"""
    if total_lessons <= 0:
        return 0.0
    return (completed_count / total_lessons) * 100


def toggle_lesson(completed_lessons: List[str], lesson_id: str) -> List[str]:
    """Remove lesson_id if present, append it otherwise"""
    if lesson_id in completed_lessons:
        return [lid for lid in completed_lessons if lid != lesson_id]
    return completed_lessons + [lesson_id]


async def get_progress_by_user_and_course(
    db: AsyncIOMotorDatabase, user_id: str, course_id: str
) -> Optional[dict]:
    """None means not started"""
    return strip_mongo_id(
        await db.progress.find_one({"user_id": user_id, "course_id": course_id})
    )


async def get_progress_by_user(db: AsyncIOMotorDatabase, user_id: str) -> List[dict]:
    cursor = db.progress.find({"user_id": user_id}).sort("last_accessed", -1)
    return strip_many(await cursor.to_list(length=None))


async def _upsert_progress(
    db: AsyncIOMotorDatabase,
    user_id: str,
    course_id: str,
    completed_lessons: List[str],
    progress: float,
) -> Dict:
    now = utcnow()
    result = await db.progress.update_one(
        {"user_id": user_id, "course_id": course_id},
        {
            "$set": {
                "completed_lessons": completed_lessons,
                "progress": progress,
                "last_accessed": now,
                "updated_at": now,
            },
            "$setOnInsert": {
                "progress_id": generate_id("PROG"),
                "created_at": now,
            },
        },
        upsert=True,
    )
    if result.upserted_id is not None:
        logger.info("Progress record created for %s in %s", user_id, course_id)

    return await get_progress_by_user_and_course(db, user_id, course_id)


async def update_progress(
    db: AsyncIOMotorDatabase,
    user_id: str,
    course_id: str,
    completed_lessons: List[str],
    total_lessons: int,
) -> Dict:
    """Replace the completed set (duplicates dropped, order kept) and recompute"""
    unique_lessons = list(dict.fromkeys(completed_lessons))
    progress = calculate_progress(len(unique_lessons), total_lessons)
    return await _upsert_progress(db, user_id, course_id, unique_lessons, progress)


async def toggle_lesson_complete(
    db: AsyncIOMotorDatabase,
    user_id: str,
    course_id: str,
    lesson_id: str,
    total_lessons: int,
) -> Dict:
    """
    Flip one lesson's completion and upsert the (user, course) record.
    Calling it twice with the same lesson restores the previous state.

    Returns:
        The stored progress record
    """
    current = await get_progress_by_user_and_course(db, user_id, course_id)
    completed = list(current.get("completed_lessons", [])) if current else []

    completed = toggle_lesson(completed, lesson_id)
    progress = calculate_progress(len(completed), total_lessons)

    return await _upsert_progress(db, user_id, course_id, completed, progress)
