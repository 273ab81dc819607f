"""
Cat API — Login Route
=======================

POST /auth/login exchanges an email/password pair for a bearer token.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from catapi.database import get_db_session
from catapi.schemas.common import ErrorResponse
from catapi.schemas.user import LoginRequest, LoginResponse
from catapi.services.user_service import user_service

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={403: {"description": "Incorrect username/password", "model": ErrorResponse}},
    summary="Log in",
)
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> LoginResponse:
    return await user_service.login(db, credentials.username, credentials.password)
