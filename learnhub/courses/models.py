from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

# ==================== ENUMS ====================

class LessonType(str, Enum):
    VIDEO = "video"
    READING = "reading"
    QUIZ = "quiz"

# ==================== COURSE MODELS ====================

class CourseCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    category: str = Field(..., min_length=1, max_length=80)
    thumbnail: Optional[str] = None

# ==================== LESSON MODELS ====================

class LessonCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    type: LessonType = LessonType.VIDEO
    content: str = ""
    # Minutes; absent lessons count as 0 towards course duration
    duration: Optional[int] = Field(None, ge=0)
