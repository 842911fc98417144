from typing import Literal, Optional

from pydantic import EmailStr, Field

from hotel_admin.models.common import ApiModel, UtcDatetime

Role = Literal["admin", "manager"]


class AuthUser(ApiModel):
    """Identity carried by the session token."""

    id: str
    email: str
    role: Role


class LoginRequest(ApiModel):
    email: EmailStr
    password: str = Field(min_length=6)


class User(ApiModel):
    id: str
    email: str
    password_hash: str
    role: Role
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None

    def as_auth_user(self) -> AuthUser:
        return AuthUser(id=self.id, email=self.email, role=self.role)
