import logging
import re
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from learnhub import config
from learnhub.courses.models import LessonType
from learnhub.database import generate_id, strip_many, strip_mongo_id, utcnow
from learnhub.errors import LessonOrderConflictError

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "all"

# ==================== HELPERS ====================

def course_total_duration(course: dict) -> int:
    """Sum of lesson durations in minutes; lessons without one count as 0"""
    return sum(lesson.get("duration") or 0 for lesson in course.get("lessons", []))


async def _teacher_name(db: AsyncIOMotorDatabase, teacher_id: str) -> str:
    teacher = await db.users.find_one({"user_id": teacher_id}, {"name": 1})
    if teacher and teacher.get("name"):
        return teacher["name"]
    return config.UNKNOWN_TEACHER_NAME


async def annotate_course(db: AsyncIOMotorDatabase, course: dict, teacher_name: str = None) -> dict:
    course = strip_mongo_id(course)
    if teacher_name is None:
        teacher_name = await _teacher_name(db, course.get("teacher_id"))
    course["teacher_name"] = teacher_name
    course["total_duration"] = course_total_duration(course)
    return course


async def annotate_many(db: AsyncIOMotorDatabase, courses: List[dict]) -> List[dict]:
    """One teacher lookup per course"""
    return [await annotate_course(db, course) for course in courses]

# ==================== COURSE CRUD ====================

async def create_course(db: AsyncIOMotorDatabase, course_data: dict, teacher_id: str) -> dict:
    """Create course with empty lesson and enrollment lists"""
    now = utcnow()
    course = {
        "course_id": generate_id("COURSE"),
        "title": course_data["title"],
        "description": course_data.get("description", ""),
        "category": course_data["category"],
        "thumbnail": course_data.get("thumbnail") or config.DEFAULT_THUMBNAIL,
        "teacher_id": teacher_id,
        "lessons": [],
        "lesson_seq": 0,
        "enrolled_students": [],
        "created_at": now,
        "updated_at": now,
    }

    await db.courses.insert_one(course)
    logger.info("Course %s created by %s", course["course_id"], teacher_id)
    return strip_mongo_id(course)


async def get_course(db: AsyncIOMotorDatabase, course_id: str) -> Optional[dict]:
    """Raw course document, no annotation"""
    return strip_mongo_id(await db.courses.find_one({"course_id": course_id}))


async def course_exists(db: AsyncIOMotorDatabase, course_id: str, session=None) -> bool:
    count = await db.courses.count_documents({"course_id": course_id}, limit=1, session=session)
    return count > 0


async def get_course_by_id(db: AsyncIOMotorDatabase, course_id: str) -> Optional[dict]:
    """Point lookup annotated with the teacher name; None if missing"""
    course = await db.courses.find_one({"course_id": course_id})
    if not course:
        return None
    return await annotate_course(db, course)


async def get_all_courses(db: AsyncIOMotorDatabase) -> List[dict]:
    """Every course, newest first"""
    cursor = db.courses.find({}).sort("created_at", -1)
    return await annotate_many(db, await cursor.to_list(length=None))


async def get_courses_by_teacher(db: AsyncIOMotorDatabase, teacher_id: str) -> List[dict]:
    cursor = db.courses.find({"teacher_id": teacher_id}).sort("created_at", -1)
    courses = await cursor.to_list(length=None)
    # All courses share one owner, so a single lookup covers them
    name = await _teacher_name(db, teacher_id)
    return [await annotate_course(db, course, teacher_name=name) for course in courses]


async def get_enrolled_courses(db: AsyncIOMotorDatabase, user_id: str) -> List[dict]:
    """Courses listed in the user's enrolled_courses"""
    user = await db.users.find_one({"user_id": user_id}, {"enrolled_courses": 1})
    if not user or not user.get("enrolled_courses"):
        return []

    cursor = db.courses.find({"course_id": {"$in": user["enrolled_courses"]}}).sort("created_at", -1)
    return await annotate_many(db, await cursor.to_list(length=None))


def build_search_filter(query: Optional[str], category: Optional[str]) -> dict:
    """
    Case-insensitive substring on title OR description, exact category.
    Both filters are ANDed; empty query and category "all" match everything.
    """
    search_filter = {}
    if query:
        pattern = {"$regex": re.escape(query), "$options": "i"}
        search_filter["$or"] = [{"title": pattern}, {"description": pattern}]
    if category and category != ALL_CATEGORIES:
        search_filter["category"] = category
    return search_filter


async def search_courses(
    db: AsyncIOMotorDatabase, query: Optional[str] = "", category: Optional[str] = ALL_CATEGORIES
) -> List[dict]:
    cursor = db.courses.find(build_search_filter(query, category)).sort("created_at", -1)
    return await annotate_many(db, await cursor.to_list(length=None))

# ==================== ENROLLMENT SIDE ====================

async def add_student_to_course(
    db: AsyncIOMotorDatabase, course_id: str, user_id: str, session=None
) -> bool:
    """
    Idempotent set-add of user_id to the course roster.
    Returns False when the course is missing or the student is already in it.
    """
    result = await db.courses.update_one(
        {"course_id": course_id, "enrolled_students": {"$ne": user_id}},
        {
            "$addToSet": {"enrolled_students": user_id},
            "$set": {"updated_at": utcnow()},
        },
        session=session,
    )
    return result.modified_count > 0

# ==================== LESSONS ====================

async def add_lesson(db: AsyncIOMotorDatabase, course_id: str, lesson_data: dict) -> Optional[dict]:
    """
    Append a lesson with order = lesson_seq + 1.

    The push and the counter bump are one write guarded on the lesson_seq
    value we read, so two concurrent appends can never share an order. A lost
    guard is retried against a fresh read.

    Returns:
        The stored lesson, or None if the course does not exist

    Raises:
        LessonOrderConflictError: every attempt lost the guard
    """
    attempts = config.LESSON_APPEND_MAX_RETRIES
    for attempt in range(1, attempts + 1):
        course = await db.courses.find_one(
            {"course_id": course_id}, {"lessons": 1, "lesson_seq": 1}
        )
        if not course:
            return None

        seq = course.get("lesson_seq")
        if seq is None:
            # Written before the counter existed
            current = len(course.get("lessons", []))
            guard = {"course_id": course_id, "lesson_seq": {"$exists": False}}
        else:
            current = seq
            guard = {"course_id": course_id, "lesson_seq": seq}

        order = current + 1
        lesson = {
            "lesson_id": generate_id("LESSON", 10),
            "title": lesson_data["title"],
            "type": LessonType(lesson_data.get("type") or LessonType.VIDEO).value,
            "content": lesson_data.get("content", ""),
            "duration": lesson_data.get("duration"),
            "order": order,
        }

        result = await db.courses.update_one(
            guard,
            {
                "$push": {"lessons": lesson},
                "$set": {"lesson_seq": order, "updated_at": utcnow()},
            },
        )
        if result.modified_count > 0:
            logger.info("Lesson %s appended to %s at order %d", lesson["lesson_id"], course_id, order)
            return lesson

        logger.warning(
            "Lesson order guard lost for %s (attempt %d/%d), retrying", course_id, attempt, attempts
        )

    raise LessonOrderConflictError(course_id, attempts)
