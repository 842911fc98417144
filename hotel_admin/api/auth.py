from typing import Optional

from fastapi import APIRouter, Depends, Header, Request, Response

from hotel_admin.api.deps import get_auth_service
from hotel_admin.core.config import settings
from hotel_admin.core.exceptions import ForbiddenException
from hotel_admin.core.logger import logger
from hotel_admin.core.security import clear_auth_cookie, optional_user, set_auth_cookie
from hotel_admin.models.auth import LoginRequest
from hotel_admin.services.auth_service import AuthService

router = APIRouter()


@router.post("/auth/login")
async def login(body: LoginRequest, response: Response, auth: AuthService = Depends(get_auth_service)):
    token = await auth.login(body.email, body.password)
    set_auth_cookie(response, token)
    return {"success": True}


@router.post("/auth/logout")
async def logout(response: Response):
    clear_auth_cookie(response)
    return {"success": True}


@router.get("/auth/me")
async def me(request: Request):
    user = optional_user(request)
    return {"user": user.to_api() if user else None}


@router.post("/seed")
async def seed(
    x_seed_token: Optional[str] = Header(default=None),
    auth: AuthService = Depends(get_auth_service),
):
    """Bootstrap the first admin account. Disabled unless SEED_TOKEN is set."""
    if not settings.SEED_TOKEN or x_seed_token != settings.SEED_TOKEN:
        logger.warning("🔒 Seed attempted with an invalid token")
        raise ForbiddenException()

    created = await auth.seed_admin()
    if not created:
        return {"message": "Admin already exists"}
    return {"message": "Admin created", "email": settings.ADMIN_EMAIL}
