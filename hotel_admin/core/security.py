from datetime import timedelta
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, Request, Response
from jwt import PyJWTError
from passlib.context import CryptContext
from pydantic import ValidationError

from hotel_admin.core.config import settings
from hotel_admin.core.exceptions import ForbiddenException, UnauthorizedException
from hotel_admin.core.logger import logger
from hotel_admin.models.auth import AuthUser
from hotel_admin.models.common import utcnow

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return str(pwd_context.hash(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bool(pwd_context.verify(plain_password, hashed_password))
    except ValueError as e:
        logger.error(f"Error verifying password: {e}")
        return False


def create_access_token(user: AuthUser) -> str:
    """Signed session token: {sub, email, role} valid for JWT_EXPIRE_DAYS."""
    now = utcnow()
    payload = {
        "sub": user.id,
        "email": user.email,
        "role": user.role,
        "iat": now,
        "exp": now + timedelta(days=settings.JWT_EXPIRE_DAYS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[AuthUser]:
    """Returns the session user, or None for any invalid, tampered or expired token."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        return AuthUser(id=payload["sub"], email=payload["email"], role=payload["role"])
    except (PyJWTError, KeyError, ValidationError):
        return None


def cookie_options() -> Dict[str, Any]:
    return {
        "httponly": True,
        "secure": settings.is_production,
        "samesite": "lax",
        "path": "/",
        "max_age": 60 * 60 * 24 * settings.JWT_EXPIRE_DAYS,
    }


def set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(settings.AUTH_COOKIE, token, **cookie_options())


def clear_auth_cookie(response: Response) -> None:
    options = cookie_options()
    options["max_age"] = 0
    response.set_cookie(settings.AUTH_COOKIE, "", **options)


def optional_user(request: Request) -> Optional[AuthUser]:
    token = request.cookies.get(settings.AUTH_COOKIE)
    return decode_access_token(token) if token else None


async def get_current_user(request: Request) -> AuthUser:
    user = optional_user(request)
    if user is None:
        raise UnauthorizedException()
    return user


async def require_admin(user: AuthUser = Depends(get_current_user)) -> AuthUser:
    if user.role != "admin":
        raise ForbiddenException()
    return user
