"""
Seed demo users and courses.

    python -m learnhub.seed

Skips when any user already exists. Lessons go through add_lesson so their
order values come from the same counter the API uses.
"""

import asyncio
import logging

from motor.motor_asyncio import AsyncIOMotorDatabase

from learnhub.courses.database import add_lesson, create_course
from learnhub.database import close_client, create_indexes, get_db_instance
from learnhub.users.database import create_user

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"

DEMO_USERS = [
    {"name": "Jane Teacher", "email": "teacher@example.com", "role": "teacher"},
    {"name": "John Student", "email": "student@example.com", "role": "student"},
    {"name": "Admin User", "email": "admin@example.com", "role": "admin"},
]

DEMO_COURSES = [
    {
        "title": "Introduction to React",
        "description": "Learn the fundamentals of React including components, props, state, and hooks.",
        "category": "Programming",
        "thumbnail": "/placeholder.svg?height=200&width=300&text=React+Course",
        "lessons": [
            {"title": "What is React?", "type": "video",
             "content": "Introduction to React framework and its benefits.", "duration": 15},
            {"title": "Components and JSX", "type": "reading",
             "content": "Understanding React components and JSX syntax."},
            {"title": "Props and State", "type": "video",
             "content": "Learn about props and state management in React.", "duration": 20},
        ],
    },
    {
        "title": "JavaScript Fundamentals",
        "description": "Master the core concepts of JavaScript programming language.",
        "category": "Programming",
        "thumbnail": "/placeholder.svg?height=200&width=300&text=JavaScript+Course",
        "lessons": [
            {"title": "Variables and Data Types", "type": "video",
             "content": "Learn about JavaScript variables and different data types.", "duration": 12},
            {"title": "Functions and Scope", "type": "reading",
             "content": "Understanding functions and variable scope in JavaScript."},
            {"title": "JavaScript Quiz", "type": "quiz",
             "content": "Test your knowledge of JavaScript fundamentals."},
        ],
    },
    {
        "title": "Design Basics",
        "description": "Color, typography and layout principles for interfaces.",
        "category": "Design",
        "thumbnail": "/placeholder.svg?height=200&width=300&text=Design+Course",
        "lessons": [
            {"title": "Color Theory", "type": "video",
             "content": "How colors work together.", "duration": 18},
            {"title": "Typography", "type": "reading",
             "content": "Choosing and pairing typefaces."},
        ],
    },
]


async def seed_database(db: AsyncIOMotorDatabase) -> bool:
    """Returns False when the database already had users"""
    if await db.users.count_documents({}) > 0:
        logger.info("Users already exist, skipping seed")
        return False

    users = {}
    for user_data in DEMO_USERS:
        user = await create_user(db, {**user_data, "password": DEMO_PASSWORD})
        users[user["role"]] = user

    teacher_id = users["teacher"]["user_id"]
    for course_data in DEMO_COURSES:
        course = await create_course(db, course_data, teacher_id)
        for lesson_data in course_data["lessons"]:
            await add_lesson(db, course["course_id"], lesson_data)

    logger.info("Seeded %d users and %d courses", len(DEMO_USERS), len(DEMO_COURSES))
    return True


async def main():
    db = get_db_instance()
    try:
        await create_indexes(db)
        await seed_database(db)
    finally:
        close_client()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s [%(name)s] %(message)s")
    asyncio.run(main())
