"""
Cat API — Cat Route Handlers
==============================

What:  HTTP surface of the cats collection.
How:   Extracts path/query/form/body input, resolves the caller through the
       bearer dependency, delegates to CatService and returns its models.
Who:   Called by the frontend map and "my cats" views.

Routes:
    GET    /cats                 list all
    GET    /cats/area            bounding-box query (topRight, bottomLeft)
    GET    /cats/user            caller's cats                 [bearer]
    GET    /cats/{id}            single cat
    POST   /cats                 multipart create              [bearer]
    PUT    /cats/admin/{id}      admin update                  [bearer, admin]
    DELETE /cats/admin/{id}      admin delete                  [bearer, admin]
    PUT    /cats/{id}            owner update                  [bearer, owner]
    DELETE /cats/{id}            owner delete                  [bearer, owner]

Literal segments (/area, /user, /admin) are registered before /{id}.
"""

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from catapi.auth import Identity, require_identity
from catapi.database import get_db_session
from catapi.schemas.cat import CatAdminUpdate, CatMessageResponse, CatResponse, CatUpdate
from catapi.schemas.common import ErrorResponse
from catapi.services.cat_service import cat_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cats", tags=["Cats"])

_AUTH_ERRORS = {
    401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
}
_OWNER_ERRORS = {
    **_AUTH_ERRORS,
    403: {"description": "Caller is not the owner", "model": ErrorResponse},
    404: {"description": "Cat not found", "model": ErrorResponse},
}
_ADMIN_ERRORS = {
    **_AUTH_ERRORS,
    403: {"description": "Caller is not the admin", "model": ErrorResponse},
    404: {"description": "Cat not found", "model": ErrorResponse},
}


# ── Reads ─────────────────────────────────────────────────────────────────

@router.get(
    "",
    response_model=List[CatResponse],
    responses={404: {"description": "No cats stored", "model": ErrorResponse}},
    summary="List all cats",
)
async def list_cats(db: AsyncSession = Depends(get_db_session)) -> List[CatResponse]:
    return await cat_service.list_cats(db)


@router.get(
    "/area",
    response_model=List[CatResponse],
    responses={400: {"description": "Malformed coordinates", "model": ErrorResponse}},
    summary="List cats inside a bounding box",
)
async def list_cats_in_area(
    top_right: Optional[str] = Query(
        default=None,
        alias="topRight",
        description="Top-right corner as 'lon,lat'",
        examples=["25.2,60.3"],
    ),
    bottom_left: Optional[str] = Query(
        default=None,
        alias="bottomLeft",
        description="Bottom-left corner as 'lon,lat'",
        examples=["24.8,60.1"],
    ),
    db: AsyncSession = Depends(get_db_session),
) -> List[CatResponse]:
    """
    Cats whose location lies inside the rectangle spanned by the corners.

    Both parameters are parsed here rather than by FastAPI so that every
    malformed value produces the same 400 error shape.
    """
    return await cat_service.list_cats_in_area(db, top_right, bottom_left)


@router.get(
    "/user",
    response_model=List[CatResponse],
    responses=_AUTH_ERRORS,
    summary="List the caller's cats",
)
async def list_my_cats(
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> List[CatResponse]:
    return await cat_service.list_cats_by_owner(db, identity)


@router.get(
    "/{cat_id}",
    response_model=CatResponse,
    responses={404: {"description": "Cat not found", "model": ErrorResponse}},
    summary="Get a single cat",
)
async def get_cat(cat_id: str, db: AsyncSession = Depends(get_db_session)) -> CatResponse:
    return await cat_service.get_cat(db, cat_id)


# ── Create ────────────────────────────────────────────────────────────────

@router.post(
    "",
    status_code=200,
    response_model=CatMessageResponse,
    responses={
        400: {"description": "Invalid fields or image", "model": ErrorResponse},
        **_AUTH_ERRORS,
    },
    summary="Create a cat with a photo",
    description=(
        "Multipart upload. The photo goes in the `cat` field (PNG or JPEG). "
        "The owner is the caller; the location is read from the photo's GPS "
        "metadata, falling back to the configured default coordinates."
    ),
)
async def create_cat(
    cat_name: str = Form(..., min_length=1),
    weight: float = Form(..., ge=0, allow_inf_nan=False),
    birthdate: date = Form(...),
    cat: UploadFile = File(..., description="Cat photo (PNG, JPG or JPEG)"),
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> CatMessageResponse:
    content = await cat.read()
    logger.info(
        "Received cat upload: filename=%s, size=%d bytes",
        cat.filename or "unknown",
        len(content),
    )
    try:
        return await cat_service.create_cat(
            db,
            identity,
            cat_name=cat_name,
            weight=weight,
            birthdate=birthdate,
            upload_filename=cat.filename or "upload.jpg",
            content=content,
            content_length=cat.size,
        )
    finally:
        await cat.close()


# ── Admin Mutations ───────────────────────────────────────────────────────

@router.put(
    "/admin/{cat_id}",
    response_model=CatMessageResponse,
    responses=_ADMIN_ERRORS,
    summary="Update any cat (admin)",
)
async def update_cat_admin(
    cat_id: str,
    changes: CatAdminUpdate,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> CatMessageResponse:
    return await cat_service.update_cat_admin(db, identity, cat_id, changes)


@router.delete(
    "/admin/{cat_id}",
    response_model=CatMessageResponse,
    responses=_ADMIN_ERRORS,
    summary="Delete any cat (admin)",
)
async def delete_cat_admin(
    cat_id: str,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> CatMessageResponse:
    return await cat_service.delete_cat_admin(db, identity, cat_id)


# ── Owner Mutations ───────────────────────────────────────────────────────

@router.put(
    "/{cat_id}",
    response_model=CatMessageResponse,
    responses=_OWNER_ERRORS,
    summary="Update one of the caller's cats",
)
async def update_cat(
    cat_id: str,
    changes: CatUpdate,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> CatMessageResponse:
    return await cat_service.update_cat(db, identity, cat_id, changes)


@router.delete(
    "/{cat_id}",
    response_model=CatMessageResponse,
    responses=_OWNER_ERRORS,
    summary="Delete one of the caller's cats",
)
async def delete_cat(
    cat_id: str,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> CatMessageResponse:
    return await cat_service.delete_cat(db, identity, cat_id)
