"""
Cat API — Cat Service (Business Logic)
========================================

What:  The nine cat operations: list, get, by-owner, by-area, create,
       owner update/delete and admin update/delete.
How:   Each method runs one lookup or mutation against the cats table,
       applies the owner/admin rules from catapi.auth, and returns response
       models. Routes stay thin.
Who:   Called by catapi.routes.cats.

Error Handling Strategy:
    CatApiError subclasses (ValidationError, ForbiddenError, NotFoundError,
    FileStorageError) propagate unchanged. Anything else raised while
    talking to the store is logged and wrapped in DatabaseError, which the
    global handler turns into a generic 500.

Check order:
    Owner update/delete:  lookup (404) → owner check (403) → write
    Admin update/delete:  admin check (403) → write (404 when absent)
"""

import html
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from catapi.auth import Identity, ensure_admin, ensure_owner
from catapi.database import store_errors
from catapi.exceptions import CatApiError, NotFoundError
from catapi.models.cat import Cat
from catapi.schemas.cat import (
    CatAdminUpdate,
    CatMessageResponse,
    CatResponse,
    CatUpdate,
    GeoPoint,
    OwnerRef,
)
from catapi.services import geo
from catapi.services.image_service import image_service

logger = logging.getLogger(__name__)


def to_response(cat: Cat) -> CatResponse:
    return CatResponse(
        id=cat.id,
        cat_name=cat.cat_name,
        weight=cat.weight,
        filename=cat.filename,
        birthdate=cat.birthdate,
        location=GeoPoint(**cat.location),
        owner=OwnerRef(**cat.owner),
    )


class CatService:
    """
    Business logic layer for cat records.

    Stateless: the session and the caller identity are passed into every call.
    """

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_cats(self, db: AsyncSession) -> List[CatResponse]:
        """All cats in insertion order. An empty table is a 404."""
        async with store_errors("list_cats"):
            result = await db.execute(select(Cat).order_by(Cat.created_at))
            cats = list(result.scalars().all())
        if not cats:
            raise NotFoundError("No cats found")
        return [to_response(cat) for cat in cats]

    async def get_cat(self, db: AsyncSession, cat_id: str) -> CatResponse:
        cat = await self._find(db, cat_id)
        if cat is None:
            raise NotFoundError("Cat not found", context={"cat_id": cat_id})
        return to_response(cat)

    async def list_cats_by_owner(
        self, db: AsyncSession, identity: Identity
    ) -> List[CatResponse]:
        """Cats whose owner is the caller. May be empty."""
        async with store_errors("list_cats_by_owner"):
            result = await db.execute(
                select(Cat).where(Cat.owner_id == identity.id).order_by(Cat.created_at)
            )
            cats = list(result.scalars().all())
        return [to_response(cat) for cat in cats]

    async def list_cats_in_area(
        self,
        db: AsyncSession,
        top_right: Optional[str],
        bottom_left: Optional[str],
    ) -> List[CatResponse]:
        """
        Cats located inside the box spanned by two "lon,lat" corners.

        Raises:
            ValidationError: either corner is missing or malformed (→ 400)
        """
        polygon = geo.bounding_box_polygon(
            geo.parse_coordinate_pair(top_right, "topRight"),
            geo.parse_coordinate_pair(bottom_left, "bottomLeft"),
        )
        logger.debug("Bounding box query: %s", polygon)
        async with store_errors("list_cats_in_area"):
            result = await db.execute(
                select(Cat).where(geo.within_polygon_clause(polygon)).order_by(Cat.created_at)
            )
            cats = list(result.scalars().all())
        return [to_response(cat) for cat in cats]

    # ── Create ────────────────────────────────────────────────────────────

    async def create_cat(
        self,
        db: AsyncSession,
        identity: Identity,
        cat_name: str,
        weight: float,
        birthdate: date,
        upload_filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> CatMessageResponse:
        """
        Store the photo, derive the location, persist the record.

        The owner is always the caller; the location always comes from the
        photo (or the configured default). On a store failure the stored
        files are removed again.
        """
        stored = await image_service.validate_and_store(
            filename=upload_filename,
            content=content,
            content_length=content_length,
        )
        lon, lat = stored.coordinates

        try:
            async with store_errors("create_cat"):
                cat = Cat(
                    cat_name=html.escape(cat_name),
                    weight=weight,
                    birthdate=birthdate,
                    filename=stored.filename,
                    longitude=lon,
                    latitude=lat,
                    owner_id=identity.id,
                )
                db.add(cat)
                await db.flush()
        except CatApiError:
            await image_service.cleanup(stored.path, stored.thumbnail_path)
            raise

        logger.info("Cat %s created by user %s", cat.id, identity.id)
        return CatMessageResponse(message="Cat created", data=to_response(cat))

    # ── Owner Mutations ───────────────────────────────────────────────────

    async def update_cat(
        self,
        db: AsyncSession,
        identity: Identity,
        cat_id: str,
        changes: CatUpdate,
    ) -> CatMessageResponse:
        """
        Owner-only update. The owner reference is re-stamped with the caller.

        Raises:
            NotFoundError: no cat with this id (→ 404)
            ForbiddenError: caller is not the stored owner (→ 403)
        """
        cat = await self._find(db, cat_id)
        if cat is None:
            raise NotFoundError("Cat not found", context={"cat_id": cat_id})
        ensure_owner(identity, cat.owner_id)

        async with store_errors("update_cat"):
            self._apply_descriptive_fields(cat, changes)
            cat.owner_id = identity.id
            await db.flush()

        logger.info("Cat %s updated by owner %s", cat.id, identity.id)
        return CatMessageResponse(message="Cat updated", data=to_response(cat))

    async def delete_cat(
        self, db: AsyncSession, identity: Identity, cat_id: str
    ) -> CatMessageResponse:
        """Owner-only delete. Same 404-then-403 order as update."""
        cat = await self._find(db, cat_id)
        if cat is None:
            raise NotFoundError("Cat not found", context={"cat_id": cat_id})
        ensure_owner(identity, cat.owner_id)
        return await self._delete(db, cat, identity)

    # ── Admin Mutations ───────────────────────────────────────────────────

    async def update_cat_admin(
        self,
        db: AsyncSession,
        identity: Identity,
        cat_id: str,
        changes: CatAdminUpdate,
    ) -> CatMessageResponse:
        """
        Fixed-admin update: every field in the body is written as given,
        including owner and location.
        """
        ensure_admin(identity)
        cat = await self._find(db, cat_id)
        if cat is None:
            raise NotFoundError("Cat not found", context={"cat_id": cat_id})

        async with store_errors("update_cat_admin"):
            self._apply_descriptive_fields(cat, changes)
            if changes.filename is not None:
                cat.filename = changes.filename
            if changes.location is not None:
                cat.longitude, cat.latitude = changes.location.coordinates
            if changes.owner is not None:
                cat.owner_id = changes.owner.id
            await db.flush()

        logger.info("Cat %s updated by admin %s", cat.id, identity.id)
        return CatMessageResponse(message="Cat updated", data=to_response(cat))

    async def delete_cat_admin(
        self, db: AsyncSession, identity: Identity, cat_id: str
    ) -> CatMessageResponse:
        ensure_admin(identity)
        cat = await self._find(db, cat_id)
        if cat is None:
            raise NotFoundError("Cat not found", context={"cat_id": cat_id})
        return await self._delete(db, cat, identity)

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _find(self, db: AsyncSession, cat_id: str) -> Optional[Cat]:
        async with store_errors("find_cat"):
            result = await db.execute(select(Cat).where(Cat.id == cat_id))
            return result.scalar_one_or_none()

    async def _delete(
        self, db: AsyncSession, cat: Cat, identity: Identity
    ) -> CatMessageResponse:
        # Build the payload first; the instance is detached after the flush
        payload = to_response(cat)
        async with store_errors("delete_cat"):
            await db.delete(cat)
            await db.flush()
        logger.info("Cat %s deleted by user %s", cat.id, identity.id)
        return CatMessageResponse(message="Cat deleted", data=payload)

    @staticmethod
    def _apply_descriptive_fields(cat: Cat, changes: CatUpdate) -> None:
        if changes.cat_name is not None:
            cat.cat_name = html.escape(changes.cat_name)
        if changes.weight is not None:
            cat.weight = changes.weight
        if changes.birthdate is not None:
            cat.birthdate = changes.birthdate


# ── Singleton Instance ────────────────────────────────────────────────────
cat_service = CatService()
