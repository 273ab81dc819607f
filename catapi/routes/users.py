"""
Cat API — User Route Handlers
===============================

What:  Account listing/lookup, sign-up, self-service update/delete and the
       token check used by the frontend on page load.
How:   Thin handlers; UserService does the work and returns projections
       without the password hash.

Routes:
    GET    /users            list all users
    GET    /users/token      echo the caller's identity        [bearer]
    GET    /users/{id}       single user
    POST   /users            sign-up
    PUT    /users/current    update own account                [bearer]
    DELETE /users/current    delete own account                [bearer]
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from catapi.auth import Identity, optional_identity, require_identity
from catapi.database import get_db_session
from catapi.schemas.common import ErrorResponse
from catapi.schemas.user import (
    TokenIdentity,
    UserCreate,
    UserMessageResponse,
    UserOutput,
    UserUpdate,
)
from catapi.services.user_service import user_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "",
    response_model=List[UserOutput],
    responses={404: {"description": "No users stored", "model": ErrorResponse}},
    summary="List all users",
)
async def list_users(db: AsyncSession = Depends(get_db_session)) -> List[UserOutput]:
    return await user_service.list_users(db)


@router.get(
    "/token",
    response_model=TokenIdentity,
    responses={403: {"description": "No usable token", "model": ErrorResponse}},
    summary="Check a bearer token",
    description=(
        "Returns the identity carried by the bearer token. A missing or "
        "invalid token is reported as 403 'token not valid'."
    ),
)
async def check_token(
    identity: Optional[Identity] = Depends(optional_identity),
) -> TokenIdentity:
    return user_service.check_token(identity)


@router.get(
    "/{user_id}",
    response_model=UserOutput,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Get a single user",
)
async def get_user(user_id: str, db: AsyncSession = Depends(get_db_session)) -> UserOutput:
    return await user_service.get_user(db, user_id)


@router.post(
    "",
    status_code=200,
    response_model=UserMessageResponse,
    responses={400: {"description": "Invalid sign-up fields", "model": ErrorResponse}},
    summary="Create an account",
)
async def create_user(
    data: UserCreate,
    db: AsyncSession = Depends(get_db_session),
) -> UserMessageResponse:
    return await user_service.create_user(db, data)


@router.put(
    "/current",
    response_model=UserMessageResponse,
    responses={
        400: {"description": "Invalid fields", "model": ErrorResponse},
        401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
    },
    summary="Update the caller's account",
)
async def update_current_user(
    changes: UserUpdate,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> UserMessageResponse:
    return await user_service.update_current_user(db, identity, changes)


@router.delete(
    "/current",
    response_model=UserMessageResponse,
    responses={401: {"description": "Missing or invalid bearer token", "model": ErrorResponse}},
    summary="Delete the caller's account",
)
async def delete_current_user(
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> UserMessageResponse:
    return await user_service.delete_current_user(db, identity)
