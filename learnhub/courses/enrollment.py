"""
Enrollment coordination between the course roster and the user's course list.

Both sides are mirrored set fields on different documents:
    courses.enrolled_students  <->  users.enrolled_courses

Without transactions the two writes are independent. If the user-side write
fails after the course-side write committed, the student sits in the roster
but not in their own list until reconcile_enrollments() repairs it.
"""

import logging
from typing import Dict

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from learnhub import config
from learnhub.courses.database import add_student_to_course, course_exists
from learnhub.database import utcnow
from learnhub.errors import EnrollmentConsistencyError
from learnhub.users.database import add_course_to_user

logger = logging.getLogger(__name__)


async def enroll(db: AsyncIOMotorDatabase, course_id: str, user_id: str) -> Dict[str, bool]:
    """
    Enroll user_id in course_id on both documents.

    Re-enrolling and missing targets are no-ops reported as False, never errors.
    A missing course leaves the user untouched.

    Returns:
        {"course_updated": bool, "user_updated": bool}

    Raises:
        EnrollmentConsistencyError: course roster written, user list failed
        PyMongoError: the first write (or the transaction) failed
    """
    if config.ENROLLMENT_USE_TRANSACTIONS:
        return await _enroll_in_transaction(db, course_id, user_id)

    course_updated = await add_student_to_course(db, course_id, user_id)
    if not course_updated and not await course_exists(db, course_id):
        return {"course_updated": False, "user_updated": False}

    try:
        user_updated = await add_course_to_user(db, user_id, course_id)
    except PyMongoError as e:
        logger.error(
            "Enrollment of %s in %s is one-sided: roster updated, user list failed: %s",
            user_id, course_id, e,
        )
        raise EnrollmentConsistencyError(course_id, user_id) from e

    if course_updated or user_updated:
        logger.info("Enrolled %s in %s", user_id, course_id)
    return {"course_updated": course_updated, "user_updated": user_updated}


async def _enroll_in_transaction(db: AsyncIOMotorDatabase, course_id: str, user_id: str) -> Dict[str, bool]:
    """Both writes commit together or not at all"""
    async with await db.client.start_session() as session:
        async with session.start_transaction():
            course_updated = await add_student_to_course(db, course_id, user_id, session=session)
            if not course_updated and not await course_exists(db, course_id, session=session):
                return {"course_updated": False, "user_updated": False}
            user_updated = await add_course_to_user(db, user_id, course_id, session=session)

    if course_updated or user_updated:
        logger.info("Enrolled %s in %s (transaction)", user_id, course_id)
    return {"course_updated": course_updated, "user_updated": user_updated}


async def is_enrolled(db: AsyncIOMotorDatabase, course_id: str, user_id: str) -> bool:
    """Roster-side check"""
    count = await db.courses.count_documents(
        {"course_id": course_id, "enrolled_students": user_id}
    )
    return count > 0


async def reconcile_enrollments(db: AsyncIOMotorDatabase) -> Dict[str, int]:
    """
    Repair one-sided enrollments in both directions.

    Only adds the missing side when the other document exists; dangling ids
    pointing at missing users or courses are left alone.
    """
    users_repaired = 0
    courses_repaired = 0

    user_ids = set(await db.users.distinct("user_id"))
    course_ids = set(await db.courses.distinct("course_id"))

    # Roster entries missing from the user's list
    cursor = db.courses.find({}, {"course_id": 1, "enrolled_students": 1})
    for course in await cursor.to_list(length=None):
        for student_id in course.get("enrolled_students", []):
            if student_id not in user_ids:
                continue
            result = await db.users.update_one(
                {"user_id": student_id, "enrolled_courses": {"$ne": course["course_id"]}},
                {
                    "$addToSet": {"enrolled_courses": course["course_id"]},
                    "$set": {"updated_at": utcnow()},
                },
            )
            users_repaired += result.modified_count

    # User list entries missing from the roster
    cursor = db.users.find({}, {"user_id": 1, "enrolled_courses": 1})
    for user in await cursor.to_list(length=None):
        for enrolled_course_id in user.get("enrolled_courses", []):
            if enrolled_course_id not in course_ids:
                continue
            result = await db.courses.update_one(
                {"course_id": enrolled_course_id, "enrolled_students": {"$ne": user["user_id"]}},
                {
                    "$addToSet": {"enrolled_students": user["user_id"]},
                    "$set": {"updated_at": utcnow()},
                },
            )
            courses_repaired += result.modified_count

    if users_repaired or courses_repaired:
        logger.warning(
            "Reconciliation repaired %d user lists and %d course rosters",
            users_repaired, courses_repaired,
        )
    else:
        logger.info("Reconciliation found no one-sided enrollments")

    return {"users_repaired": users_repaired, "courses_repaired": courses_repaired}
