from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from learnhub.auth.identity import Identity, get_current_identity, require_roles
from learnhub.courses.database import get_course, get_enrolled_courses
from learnhub.courses.enrollment import enroll, reconcile_enrollments
from learnhub.database import get_db
from learnhub.errors import EnrollmentConsistencyError
from learnhub.users.models import UserRole

router = APIRouter(tags=["Enrollments"])
admin_router = APIRouter(tags=["Admin"])


# ==================== ENROLLMENT ENDPOINTS ====================

@router.get("/enrolled")
async def get_my_courses(
    db: AsyncIOMotorDatabase = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    """Courses the current user is enrolled in"""
    courses = await get_enrolled_courses(db, identity.user_id)
    return {"courses": courses, "count": len(courses)}


@router.post("/{course_id}/enroll")
async def enroll_endpoint(
    course_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    course = await get_course(db, course_id)
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")

    try:
        result = await enroll(db, course_id, identity.user_id)
    except EnrollmentConsistencyError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    already_enrolled = not (result["course_updated"] or result["user_updated"])
    return {
        "success": True,
        "course_id": course_id,
        "already_enrolled": already_enrolled,
        "message": "Already enrolled in this course" if already_enrolled else "Enrolled successfully",
        **result,
    }


# ==================== ADMIN ====================

@admin_router.post("/enrollments/reconcile")
async def reconcile_endpoint(
    db: AsyncIOMotorDatabase = Depends(get_db),
    identity: Identity = Depends(require_roles(UserRole.ADMIN)),
):
    """Repair one-sided enrollments left by partial failures"""
    return {"success": True, **(await reconcile_enrollments(db))}
