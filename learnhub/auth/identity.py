from datetime import timedelta
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request
from jose import JWTError, jwt

from learnhub import config
from learnhub.database import utcnow
from learnhub.users.models import UserRole


class Identity:
    """
    Resolved caller of a request: who they are and what role they hold.
    Core operations receive ids taken from here, never the request itself.
    """
    def __init__(self, user_id: str, role: str, email: Optional[str] = None):
        self.user_id = user_id
        self.role = role
        self.email = email

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self):
        return f"Identity(user_id={self.user_id!r}, role={self.role!r})"


def create_access_token(user_id: str, email: str, role: str) -> str:
    payload = {
        "sub": user_id,
        "email": email,
        "role": role,
        "exp": utcnow() + timedelta(days=config.TOKEN_EXPIRE_DAYS),
    }
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or Expired Token")


def _extract_token(request: Request, authorization: Optional[str]) -> Optional[str]:
    token = request.cookies.get(config.TOKEN_COOKIE_NAME)
    if token:
        return token
    if authorization and authorization.startswith("Bearer "):
        return authorization.split(" ", 1)[1]
    return None


def get_current_identity(
    request: Request,
    authorization: str = Header(None),
) -> Identity:
    """
    Dependency: resolves the session token (cookie first, then bearer header)

    Raises:
        401: Missing, invalid or expired token
    """
    token = _extract_token(request, authorization)
    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized")

    payload = decode_access_token(token)
    user_id = payload.get("sub")
    role = payload.get("role")
    if not user_id or role not in UserRole.values():
        raise HTTPException(status_code=401, detail="Invalid token: missing user_id or role")

    return Identity(user_id, role, payload.get("email"))


def require_roles(*roles: str):
    """Dependency factory: only lets the given roles through"""
    allowed = {getattr(role, "value", role) for role in roles}

    def checker(identity: Identity = Depends(get_current_identity)) -> Identity:
        if identity.role not in allowed:
            raise HTTPException(
                status_code=403,
                detail=f"Access denied. Requires one of: {', '.join(sorted(allowed))}",
            )
        return identity

    return checker
