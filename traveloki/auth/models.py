from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    user = "user"
    admin = "admin"


class Identity(BaseModel):
    """Authenticated caller as handed to the core by the auth provider."""

    model_config = ConfigDict(frozen=True)

    username: str
    role: Role = Role.user
    email: str | None = None
    full_name: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.admin


class LoginRequest(BaseModel):
    """Log in with either the username or the registered email."""

    username: str = ""
    email: str = ""
    password: str = Field(..., min_length=1)

    @property
    def login(self) -> str:
        return self.username.strip() or self.email.strip().lower()


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)
    full_name: str = ""
