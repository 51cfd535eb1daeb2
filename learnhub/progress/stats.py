from typing import Dict, List

from motor.motor_asyncio import AsyncIOMotorDatabase

from learnhub.courses.database import course_total_duration, get_enrolled_courses
from learnhub.progress.tracker import get_progress_by_user


def summarize_learning(courses: List[dict], progress_records: List[dict]) -> Dict:
    completed_lessons = sum(len(p.get("completed_lessons", [])) for p in progress_records)
    study_minutes = sum(course_total_duration(c) for c in courses)
    if progress_records:
        average_progress = sum(p.get("progress", 0) for p in progress_records) / len(progress_records)
    else:
        average_progress = 0.0

    return {
        "enrolled_courses": len(courses),
        "completed_lessons": completed_lessons,
        "study_minutes": study_minutes,
        "average_progress": average_progress,
    }


def summarize_teaching(courses: List[dict]) -> Dict:
    return {
        "course_count": len(courses),
        "total_students": sum(len(c.get("enrolled_students", [])) for c in courses),
        "total_lessons": sum(len(c.get("lessons", [])) for c in courses),
    }


async def get_dashboard_summary(db: AsyncIOMotorDatabase, user_id: str) -> Dict:
    """Student dashboard numbers"""
    courses = await get_enrolled_courses(db, user_id)
    progress_records = await get_progress_by_user(db, user_id)
    return summarize_learning(courses, progress_records)
