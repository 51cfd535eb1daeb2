import logging

from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from learnhub import config
from learnhub.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["System"])


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/health/db")
async def database_health(db: AsyncIOMotorDatabase = Depends(get_db)):
    try:
        await db.command("ping")
    except PyMongoError as e:
        logger.error("Database ping failed: %s", e)
        raise HTTPException(status_code=503, detail="Database unavailable")
    return {"status": "ok", "database": config.DATABASE_NAME}


@router.get("/version")
def get_version():
    return {"version": config.VERSION or "unknown", "status": "stable"}
