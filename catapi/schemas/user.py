"""
Cat API — User Request/Response Schemas
=========================================

What:  Pydantic models for account creation, self-service updates, login
       and the public user projection.

Projection rule:
    Every user payload that leaves the API is a UserOutput: `_id`,
    `user_name`, `email`. The password hash and role are never serialized.
"""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class UserOutput(BaseModel):
    """Public projection of a user record."""

    id: str = Field(alias="_id")
    user_name: str
    email: str

    model_config = {"populate_by_name": True}


class UserMessageResponse(BaseModel):
    message: str
    data: UserOutput


class TokenIdentity(BaseModel):
    """The authenticated caller as seen by GET /users/token."""

    id: str = Field(alias="_id")
    user_name: str
    email: str
    role: str

    model_config = {"populate_by_name": True}


class LoginResponse(BaseModel):
    message: str
    token: str
    user: UserOutput


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class UserCreate(BaseModel):
    """
    Body of POST /users.

    The role cannot be chosen at sign-up; new accounts are always "user".
    """

    user_name: str = Field(min_length=3, max_length=255)
    email: EmailStr
    password: str = Field(min_length=5, max_length=255)


class UserUpdate(BaseModel):
    """Body of PUT /users/current. Omitted fields keep their stored value."""

    user_name: Optional[str] = Field(default=None, min_length=3, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=5, max_length=255)


class LoginRequest(BaseModel):
    """Body of POST /auth/login. `username` carries the account email."""

    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
