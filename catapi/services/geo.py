"""
Cat API — Bounding Box Geometry
=================================

What:  Turns the `topRight` / `bottomLeft` query strings of GET /cats/area
       into a closed GeoJSON polygon and the store filter for it.
How:   Each corner is parsed from "lon,lat"; the two corners expand into a
       five-point ring (first point repeated last). The ring is axis-aligned,
       so containment is equivalent to lying inside its envelope, which is
       what the SQL filter expresses.

Ring order for top-right (lonR, latT) and bottom-left (lonL, latB):

    (lonL, latT) ──▶ (lonR, latT)
         ▲                │
         │                ▼
    (lonL, latB) ◀── (lonR, latB)

Limits:
    No antimeridian wraparound; callers pass lonL < lonR. Points on the
    boundary are contained.
"""

import math
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from sqlalchemy import and_
from sqlalchemy.sql.elements import ColumnElement

from catapi.exceptions import ValidationError
from catapi.models.cat import Cat

Coordinate = Tuple[float, float]


class Envelope(NamedTuple):
    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float


def parse_coordinate_pair(raw: Optional[str], field: str) -> Coordinate:
    """
    Parse a "lon,lat" query value.

    Raises:
        ValidationError: missing value, wrong arity, non-numeric,
            non-finite or out-of-range component.
    """
    if raw is None or not raw.strip():
        raise ValidationError(message=f"Missing coordinates: {field}", field=field)

    parts = raw.split(",")
    if len(parts) != 2:
        raise ValidationError(
            message=f"Coordinates must be 'lon,lat': {field}",
            field=field,
            context={"value": raw},
        )

    try:
        lon, lat = (float(part) for part in parts)
    except ValueError:
        raise ValidationError(
            message=f"Coordinates must be numeric: {field}",
            field=field,
            context={"value": raw},
        )

    if not (math.isfinite(lon) and math.isfinite(lat)):
        raise ValidationError(message=f"Coordinates must be finite: {field}", field=field)
    if not -180 <= lon <= 180:
        raise ValidationError(message=f"Longitude out of range: {field}", field=field)
    if not -90 <= lat <= 90:
        raise ValidationError(message=f"Latitude out of range: {field}", field=field)

    return lon, lat


def bounding_box_polygon(top_right: Coordinate, bottom_left: Coordinate) -> Dict[str, Any]:
    """Build the closed GeoJSON Polygon spanned by two opposite corners."""
    lon_right, lat_top = top_right
    lon_left, lat_bottom = bottom_left
    ring: List[List[float]] = [
        [lon_left, lat_top],
        [lon_right, lat_top],
        [lon_right, lat_bottom],
        [lon_left, lat_bottom],
        [lon_left, lat_top],
    ]
    return {"type": "Polygon", "coordinates": [ring]}


def polygon_envelope(polygon: Dict[str, Any]) -> Envelope:
    """Smallest axis-aligned box containing the polygon's outer ring."""
    ring = polygon["coordinates"][0]
    lons = [point[0] for point in ring]
    lats = [point[1] for point in ring]
    return Envelope(min(lons), min(lats), max(lons), max(lats))


def within_polygon_clause(polygon: Dict[str, Any]) -> ColumnElement[bool]:
    """SQL filter selecting cats whose location lies inside the polygon."""
    box = polygon_envelope(polygon)
    return and_(
        Cat.longitude.between(box.min_lon, box.max_lon),
        Cat.latitude.between(box.min_lat, box.max_lat),
    )
