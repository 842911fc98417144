from typing import Optional

from hotel_admin.core.config import settings
from hotel_admin.core.exceptions import ConflictException, UnauthorizedException
from hotel_admin.core.logger import logger
from hotel_admin.core.security import create_access_token, hash_password, verify_password
from hotel_admin.models.auth import Role, User
from hotel_admin.models.common import new_id, utcnow
from hotel_admin.services.db_service import DocumentStore, Query

USERS = "users"


class AuthService:
    def __init__(self, store: DocumentStore):
        self.store = store

    async def find_by_email(self, email: str) -> Optional[User]:
        row = await self.store.find_one(USERS, Query().eq("email", email.strip().lower()))
        return User.model_validate(row) if row else None

    async def create_user(self, email: str, password: str, role: Role) -> User:
        email = email.strip().lower()
        if await self.find_by_email(email):
            raise ConflictException("Email already in use")

        now = utcnow()
        user = User(
            id=new_id(),
            email=email,
            password_hash=hash_password(password),
            role=role,
            created_at=now,
            updated_at=now,
        )
        await self.store.insert(USERS, user.to_doc())
        logger.info(f"👤 User {email} created with role {role}")
        return user

    async def login(self, email: str, password: str) -> str:
        """Returns a session token for valid credentials."""
        user = await self.find_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            logger.warning(f"🔒 Failed login for {email}")
            raise UnauthorizedException("Invalid credentials")
        logger.info(f"🔑 {user.email} logged in")
        return create_access_token(user.as_auth_user())

    async def seed_admin(self) -> bool:
        """Creates the first admin from settings. Returns False if it already exists."""
        if await self.find_by_email(settings.ADMIN_EMAIL):
            return False
        await self.create_user(settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD, "admin")
        return True
