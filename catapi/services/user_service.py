"""
Cat API — User Service (Business Logic)
=========================================

What:  Account listing, lookup, sign-up, self-service update/delete,
       identity echo and login.
How:   Passwords are hashed with catapi.auth.hash_password before any write
       (sign-up and self-update alike); every returned user goes through
       `to_output`, which drops the hash and the role.
Who:   Called by catapi.routes.users and catapi.routes.auth.

Delete-current semantics:
    With settings.hard_delete_users disabled (default) the caller's row is
    kept and the response still reports "User deleted"; enabling the flag
    removes the row.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from catapi.auth import Identity, create_access_token, hash_password, verify_password
from catapi.config import settings
from catapi.database import store_errors
from catapi.exceptions import ForbiddenError, NotFoundError
from catapi.models.user import User
from catapi.schemas.user import (
    LoginResponse,
    TokenIdentity,
    UserCreate,
    UserMessageResponse,
    UserOutput,
    UserUpdate,
)

logger = logging.getLogger(__name__)


def to_output(user: User) -> UserOutput:
    return UserOutput(id=user.id, user_name=user.user_name, email=user.email)


class UserService:
    """Business logic layer for user accounts."""

    async def list_users(self, db: AsyncSession) -> List[UserOutput]:
        async with store_errors("list_users"):
            result = await db.execute(select(User).order_by(User.created_at))
            users = list(result.scalars().all())
        if not users:
            raise NotFoundError("No users found")
        return [to_output(user) for user in users]

    async def get_user(self, db: AsyncSession, user_id: str) -> UserOutput:
        user = await self._find(db, user_id)
        if user is None:
            raise NotFoundError("User not found", context={"user_id": user_id})
        return to_output(user)

    async def create_user(self, db: AsyncSession, data: UserCreate) -> UserMessageResponse:
        """Sign-up. The password is hashed before the row is built."""
        hashed = hash_password(data.password)
        async with store_errors("create_user"):
            user = User(
                user_name=data.user_name,
                email=str(data.email),
                role="user",
                password=hashed,
            )
            db.add(user)
            await db.flush()
        logger.info("User %s created", user.id)
        return UserMessageResponse(message="User created", data=to_output(user))

    async def update_current_user(
        self, db: AsyncSession, identity: Identity, changes: UserUpdate
    ) -> UserMessageResponse:
        """
        Update the caller's own row with the fields that were sent.

        Raises:
            NotFoundError: the token refers to a user that no longer exists
        """
        user = await self._find(db, identity.id)
        if user is None:
            raise NotFoundError("User not found", context={"user_id": identity.id})

        async with store_errors("update_current_user"):
            if changes.user_name is not None:
                user.user_name = changes.user_name
            if changes.email is not None:
                user.email = str(changes.email)
            if changes.password is not None:
                user.password = hash_password(changes.password)
            await db.flush()

        logger.info("User %s updated own account", user.id)
        return UserMessageResponse(message="User updated", data=to_output(user))

    async def delete_current_user(
        self, db: AsyncSession, identity: Identity
    ) -> UserMessageResponse:
        user = await self._find(db, identity.id)
        if user is None:
            raise NotFoundError("User not found", context={"user_id": identity.id})

        payload = to_output(user)
        if settings.hard_delete_users:
            async with store_errors("delete_current_user"):
                await db.delete(user)
                await db.flush()
            logger.info("User %s deleted own account", identity.id)
        else:
            logger.info("User %s requested deletion; row retained", identity.id)
        return UserMessageResponse(message="User deleted", data=payload)

    def check_token(self, identity: Optional[Identity]) -> TokenIdentity:
        """Echo the caller's identity. No store access."""
        if identity is None:
            raise ForbiddenError("token not valid")
        return TokenIdentity(
            id=identity.id,
            user_name=identity.user_name,
            email=identity.email,
            role=identity.role,
        )

    async def login(self, db: AsyncSession, email: str, password: str) -> LoginResponse:
        """
        Exchange credentials for a bearer token.

        Unknown email and wrong password produce the same 403.
        """
        async with store_errors("login"):
            result = await db.execute(
                select(User).where(User.email == email).order_by(User.created_at).limit(1)
            )
            user = result.scalar_one_or_none()

        if user is None or not verify_password(password, user.password):
            logger.warning("Failed login for %s", email)
            raise ForbiddenError("Incorrect username/password")

        token = create_access_token(
            user_id=user.id,
            email=user.email,
            role=user.role,
            user_name=user.user_name,
        )
        logger.info("User %s logged in", user.id)
        return LoginResponse(message="Login successful", token=token, user=to_output(user))

    async def _find(self, db: AsyncSession, user_id: str) -> Optional[User]:
        async with store_errors("find_user"):
            result = await db.execute(select(User).where(User.id == user_id))
            return result.scalar_one_or_none()


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
