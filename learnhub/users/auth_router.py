from fastapi import APIRouter, Depends, HTTPException, Response
from motor.motor_asyncio import AsyncIOMotorDatabase

from learnhub import config
from learnhub.auth.credentials import verify_password
from learnhub.auth.identity import Identity, create_access_token, get_current_identity, require_roles
from learnhub.database import get_db
from learnhub.errors import DuplicateEmailError
from learnhub.users.database import (
    create_user, find_user_by_email, find_user_by_id, get_all_users, public_user, update_user
)
from learnhub.users.models import LoginRequest, RegisterRequest, UserRole, UserUpdate

router = APIRouter(tags=["Auth"])
admin_router = APIRouter(tags=["Admin"])


def _start_session(response: Response, user: dict) -> dict:
    token = create_access_token(user["user_id"], user["email"], user["role"])
    response.set_cookie(
        key=config.TOKEN_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=config.COOKIE_SECURE,
        max_age=60 * 60 * 24 * config.TOKEN_EXPIRE_DAYS,
        samesite="lax",
    )
    return {
        "success": True,
        "user": {
            "id": user["user_id"],
            "name": user["name"],
            "email": user["email"],
            "role": user["role"],
        },
        "access_token": token,
    }


@router.post("/register")
async def register(
    data: RegisterRequest,
    response: Response,
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    try:
        user = await create_user(db, data.model_dump(mode="json"))
    except DuplicateEmailError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    return _start_session(response, user)


@router.post("/login")
async def login(
    data: LoginRequest,
    response: Response,
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    user = await find_user_by_email(db, data.email)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")

    if not verify_password(data.password, user.get("password")):
        raise HTTPException(status_code=401, detail="Invalid password")

    return _start_session(response, public_user(user))


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(config.TOKEN_COOKIE_NAME)
    return {"success": True}


@router.get("/me")
async def get_me(
    db: AsyncIOMotorDatabase = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    user = await find_user_by_id(db, identity.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.patch("/me")
async def update_me(
    data: UserUpdate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    user = await update_user(db, identity.user_id, data.model_dump())
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@admin_router.get("/users")
async def list_users(
    db: AsyncIOMotorDatabase = Depends(get_db),
    identity: Identity = Depends(require_roles(UserRole.ADMIN)),
):
    users = await get_all_users(db)
    return {"users": users, "count": len(users)}
