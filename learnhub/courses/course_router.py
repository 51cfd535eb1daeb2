from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from learnhub.auth.identity import Identity, require_roles
from learnhub.courses.database import (
    ALL_CATEGORIES, add_lesson, create_course, get_all_courses, get_course,
    get_course_by_id, get_courses_by_teacher, search_courses
)
from learnhub.courses.models import CourseCreate, LessonCreate
from learnhub.database import get_db
from learnhub.errors import LessonOrderConflictError
from learnhub.progress.stats import summarize_teaching
from learnhub.users.models import UserRole

router = APIRouter(tags=["Course Management"])

require_instructor = require_roles(UserRole.TEACHER, UserRole.ADMIN)


async def verify_course_owner(db: AsyncIOMotorDatabase, course_id: str, identity: Identity) -> dict:
    course = await get_course(db, course_id)
    if not course:
        raise HTTPException(404, "Course not found")

    if course["teacher_id"] != identity.user_id and not identity.is_admin:
        raise HTTPException(403, "Not authorized")

    return course


async def _instructor_courses(db: AsyncIOMotorDatabase, identity: Identity):
    # Admins see every course, teachers only their own
    if identity.is_admin:
        return await get_all_courses(db)
    return await get_courses_by_teacher(db, identity.user_id)


@router.get("/list")
async def list_courses_endpoint(db: AsyncIOMotorDatabase = Depends(get_db)):
    """All courses, newest first"""
    courses = await get_all_courses(db)
    return {"courses": courses, "count": len(courses)}


@router.get("/search")
async def search_courses_endpoint(
    q: str = "",
    category: str = ALL_CATEGORIES,
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    courses = await search_courses(db, q, category)
    return {"courses": courses, "count": len(courses), "query": q, "category": category}


@router.get("/my")
async def list_my_courses(
    db: AsyncIOMotorDatabase = Depends(get_db),
    identity: Identity = Depends(require_instructor),
):
    courses = await _instructor_courses(db, identity)
    return {"courses": courses, "count": len(courses)}


@router.get("/my/summary")
async def my_teaching_summary(
    db: AsyncIOMotorDatabase = Depends(get_db),
    identity: Identity = Depends(require_instructor),
):
    return summarize_teaching(await _instructor_courses(db, identity))


@router.post("/create")
async def create_course_endpoint(
    course: CourseCreate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    identity: Identity = Depends(require_instructor),
):
    """Create new course (teacher/admin only)"""
    created = await create_course(db, course.model_dump(), identity.user_id)
    return {
        "success": True,
        "course_id": created["course_id"],
        "message": "Course created successfully",
    }


@router.get("/{course_id}")
async def get_course_endpoint(course_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    course = await get_course_by_id(db, course_id)
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    return course


@router.post("/{course_id}/lessons")
async def add_lesson_endpoint(
    course_id: str,
    payload: LessonCreate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    identity: Identity = Depends(require_instructor),
):
    """Append a lesson (course owner or admin)"""
    await verify_course_owner(db, course_id, identity)

    try:
        lesson = await add_lesson(db, course_id, payload.model_dump(mode="json"))
    except LessonOrderConflictError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    if lesson is None:
        raise HTTPException(status_code=404, detail="Course not found")
    return {"success": True, "lesson": lesson}
