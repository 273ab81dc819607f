"""
Cat API — Cat Request/Response Schemas
========================================

What:  Pydantic models defining the cat API contract.
How:   FastAPI validates request bodies against the input models and
       serializes responses through the output models (by alias, so
       identifiers appear as `_id` on the wire).

Design Decision:
    Schemas are separate from the SQLAlchemy model because the wire format
    nests values the table stores flat: `location` is a GeoJSON Point built
    from longitude/latitude, and `owner` is an object around owner_id.
"""

from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


# ══════════════════════════════════════════════════════════════════════════
# Shared Value Objects
# ══════════════════════════════════════════════════════════════════════════


class GeoPoint(BaseModel):
    """GeoJSON Point. coordinates = [longitude, latitude]."""

    type: Literal["Point"] = "Point"
    coordinates: List[float] = Field(min_length=2, max_length=2)

    @field_validator("coordinates")
    @classmethod
    def validate_range(cls, v: List[float]) -> List[float]:
        lon, lat = v
        if not -180 <= lon <= 180:
            raise ValueError("longitude must be between -180 and 180")
        if not -90 <= lat <= 90:
            raise ValueError("latitude must be between -90 and 90")
        return v


class OwnerRef(BaseModel):
    """Reference to the owning user. Holds the identifier only."""

    id: str = Field(alias="_id", min_length=1)

    model_config = {"populate_by_name": True}


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class CatResponse(BaseModel):
    """
    What:  Full representation of a cat record.
    Who:   Returned by every read endpoint and wrapped by the mutation envelope.
    """

    id: str = Field(alias="_id", description="Cat identifier")
    cat_name: str
    weight: float
    filename: str = Field(description="Stored photo name under /uploads")
    birthdate: date
    location: GeoPoint
    owner: OwnerRef

    model_config = {"populate_by_name": True}


class CatMessageResponse(BaseModel):
    """Envelope returned by create, update and delete."""

    message: str
    data: CatResponse


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class CatUpdate(BaseModel):
    """
    Body of PUT /cats/{id} (owner update).

    Only descriptive fields are accepted; `owner`, `location` and
    `filename` sent by the client are ignored.
    """

    cat_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    weight: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    birthdate: Optional[date] = None


class CatAdminUpdate(CatUpdate):
    """
    Body of PUT /cats/admin/{id}.

    Every stored field may be rewritten, including the owner reference
    and the location. Unknown keys are ignored.
    """

    filename: Optional[str] = Field(default=None, min_length=1, max_length=255)
    location: Optional[GeoPoint] = None
    owner: Optional[OwnerRef] = None
