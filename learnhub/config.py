"""
LearnHub Configuration
Database, token and consistency settings
"""

import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(key: str, default: str = "false") -> bool:
    return os.getenv(key, default).strip().lower() in ("1", "true", "yes", "on")


# MongoDB
MONGO_URL = os.getenv("MONGO_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "learnhub_db")

# Session tokens
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "your-secret-key")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
TOKEN_EXPIRE_DAYS = int(os.getenv("TOKEN_EXPIRE_DAYS", "7"))
TOKEN_COOKIE_NAME = os.getenv("TOKEN_COOKIE_NAME", "token")
COOKIE_SECURE = _env_flag("COOKIE_SECURE")

# Credentials
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

# Consistency
LESSON_APPEND_MAX_RETRIES = int(os.getenv("LESSON_APPEND_MAX_RETRIES", "5"))
# Needs a replica set; standalone servers reject multi-document transactions
ENROLLMENT_USE_TRANSACTIONS = _env_flag("ENROLLMENT_USE_TRANSACTIONS")

# Service
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
VERSION = os.getenv("VERSION")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

UNKNOWN_TEACHER_NAME = "Unknown Teacher"
DEFAULT_THUMBNAIL = "/placeholder.svg?height=200&width=300&text=Course"
