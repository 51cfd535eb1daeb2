from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

# bcrypt only reads the first 72 bytes and the library refuses anything longer
MAX_PASSWORD_BYTES = 72

# ==================== ENUMS ====================

class UserRole(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"

    @classmethod
    def values(cls) -> List[str]:
        return [role.value for role in cls]


def normalize_email(v: str) -> str:
    v = v.strip()
    if "@" not in v:
        raise ValueError("Email must contain '@'")
    return v

# ==================== REQUEST MODELS ====================

class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=6, max_length=72)
    # Admins are created by seeding only
    role: UserRole = UserRole.STUDENT

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return normalize_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return v

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        if v == UserRole.ADMIN:
            raise ValueError("Role must be student or teacher")
        return v


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return normalize_email(v)


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
