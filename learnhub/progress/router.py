from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from learnhub.auth.identity import Identity, get_current_identity
from learnhub.courses.database import get_course
from learnhub.database import get_db
from learnhub.progress.stats import get_dashboard_summary
from learnhub.progress.tracker import (
    get_progress_by_user, get_progress_by_user_and_course, toggle_lesson_complete
)

router = APIRouter(tags=["Progress"])


async def verify_enrollment(db: AsyncIOMotorDatabase, course_id: str, identity: Identity) -> dict:
    """Course document if the caller is on its roster"""
    course = await get_course(db, course_id)
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")

    if identity.user_id not in course.get("enrolled_students", []):
        raise HTTPException(
            status_code=403,
            detail="Not enrolled in this course. Please enroll first."
        )
    return course


@router.get("/progress")
async def get_my_progress(
    db: AsyncIOMotorDatabase = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    records = await get_progress_by_user(db, identity.user_id)
    return {"progress": records, "count": len(records)}


@router.get("/progress/{course_id}")
async def get_course_progress(
    course_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    """progress is null when the user has not started the course"""
    record = await get_progress_by_user_and_course(db, identity.user_id, course_id)
    return {"course_id": course_id, "progress": record}


@router.post("/progress/{course_id}/lessons/{lesson_id}/toggle")
async def toggle_lesson_endpoint(
    course_id: str,
    lesson_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    course = await verify_enrollment(db, course_id, identity)

    lessons = course.get("lessons", [])
    if not any(lesson["lesson_id"] == lesson_id for lesson in lessons):
        raise HTTPException(status_code=404, detail="Lesson not found in this course")

    record = await toggle_lesson_complete(
        db, identity.user_id, course_id, lesson_id, total_lessons=len(lessons)
    )
    return {
        "course_id": course_id,
        "lesson_id": lesson_id,
        "completed": lesson_id in record["completed_lessons"],
        "completed_lessons": record["completed_lessons"],
        "progress": record["progress"],
    }


@router.get("/dashboard")
async def dashboard(
    db: AsyncIOMotorDatabase = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    return await get_dashboard_summary(db, identity.user_id)
