import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from learnhub import config
from learnhub.courses.course_router import router as course_router
from learnhub.courses.enrollment_router import (
    admin_router as enrollment_admin_router, router as enrollment_router
)
from learnhub.database import close_client, create_indexes, get_db_instance
from learnhub.progress.router import router as progress_router
from learnhub.system.health_router import router as health_router
from learnhub.users.auth_router import admin_router as users_admin_router, router as auth_router

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="LearnHub Course API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    await create_indexes(get_db_instance())
    logger.info("LearnHub started (version %s)", config.VERSION or "unknown")


@app.on_event("shutdown")
async def shutdown_event():
    close_client()


# ==================== ROUTER REGISTRATION ====================
app.include_router(auth_router, prefix="/auth")
# Before course_router so /courses/enrolled is not taken as a course id
app.include_router(enrollment_router, prefix="/courses")
app.include_router(course_router, prefix="/courses")
app.include_router(progress_router)
app.include_router(users_admin_router, prefix="/admin")
app.include_router(enrollment_admin_router, prefix="/admin")
app.include_router(health_router)
# ============================================================


if __name__ == "__main__":
    import os
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
