"""
Cat API — Cat SQLAlchemy Model
================================

What:  ORM model representing the `cats` table.
Who:   Used by CatService for CRUD operations and by Alembic for schema management.

Table Design:
    - id: UUID string primary key, exposed to clients as `_id`
    - filename: name of the stored photo inside STORAGE_ROOT (server-assigned)
    - longitude/latitude: the GeoJSON Point is assembled from these on output
    - owner_id: id of the creating user; deliberately no foreign key, so a
      cat survives its owner and admins may assign any owner id
    - created_at: insertion order for list responses

    Index on (longitude, latitude) serves the bounding-box query.
"""

import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict

from sqlalchemy import Date, DateTime, Float, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from catapi.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Cat(Base):
    """
    A geo-tagged cat record with one photo and exactly one owner reference.

    Query Patterns:
        - By owner:  WHERE owner_id = :caller_id        (idx_cats_owner_id)
        - By area:   WHERE longitude BETWEEN .. AND latitude BETWEEN ..
                     (idx_cats_location)
    """

    __tablename__ = "cats"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)

    cat_name: Mapped[str] = mapped_column(String(255), nullable=False)

    weight: Mapped[float] = mapped_column(Float, nullable=False)

    filename: Mapped[str] = mapped_column(String(255), nullable=False)

    birthdate: Mapped[date] = mapped_column(Date, nullable=False)

    # GeoJSON order: coordinates = [longitude, latitude]
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)

    owner_id: Mapped[str] = mapped_column(String(36), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_cats_owner_id", "owner_id"),
        Index("idx_cats_location", "longitude", "latitude"),
    )

    @property
    def location(self) -> Dict[str, Any]:
        """The stored position as a GeoJSON Point."""
        return {"type": "Point", "coordinates": [self.longitude, self.latitude]}

    @property
    def owner(self) -> Dict[str, str]:
        return {"_id": self.owner_id}

    def __repr__(self) -> str:
        return f"<Cat(id={self.id}, cat_name='{self.cat_name}', owner_id={self.owner_id})>"
