"""
Cat API — Bounding Box Geometry Tests
=======================================

What we test:
    ✅ "lon,lat" parsing and its rejection cases
    ✅ Ring order and closure of the bounding-box polygon
    ✅ Envelope of the ring (the store filter; containment is tested via /cats/area)
"""

import pytest

from catapi.exceptions import ValidationError
from catapi.services import geo


class TestParseCoordinatePair:

    def test_valid_pair(self):
        assert geo.parse_coordinate_pair("24.9,60.2", "topRight") == (24.9, 60.2)

    def test_whitespace_around_numbers(self):
        assert geo.parse_coordinate_pair(" 10 , -5 ", "bottomLeft") == (10.0, -5.0)

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_missing_value(self, raw):
        with pytest.raises(ValidationError) as exc_info:
            geo.parse_coordinate_pair(raw, "topRight")
        assert exc_info.value.message == "Missing coordinates: topRight"
        assert exc_info.value.field == "topRight"

    @pytest.mark.parametrize("raw", ["10", "1,2,3"])
    def test_wrong_arity(self, raw):
        with pytest.raises(ValidationError):
            geo.parse_coordinate_pair(raw, "bottomLeft")

    def test_non_numeric(self):
        with pytest.raises(ValidationError) as exc_info:
            geo.parse_coordinate_pair("abc,5", "topRight")
        assert "numeric" in exc_info.value.message

    @pytest.mark.parametrize("raw", ["nan,5", "5,inf"])
    def test_non_finite(self, raw):
        with pytest.raises(ValidationError):
            geo.parse_coordinate_pair(raw, "topRight")

    @pytest.mark.parametrize("raw", ["181,0", "-181,0", "0,91", "0,-91"])
    def test_out_of_range(self, raw):
        with pytest.raises(ValidationError):
            geo.parse_coordinate_pair(raw, "topRight")


class TestBoundingBoxPolygon:

    def test_ring_order_and_closure(self):
        polygon = geo.bounding_box_polygon((10.0, 10.0), (0.0, 0.0))

        assert polygon["type"] == "Polygon"
        assert polygon["coordinates"] == [
            [[0.0, 10.0], [10.0, 10.0], [10.0, 0.0], [0.0, 0.0], [0.0, 10.0]]
        ]

    def test_ring_is_closed(self):
        ring = geo.bounding_box_polygon((25.5, 60.5), (24.5, 59.5))["coordinates"][0]
        assert len(ring) == 5
        assert ring[0] == ring[-1]

    def test_envelope(self):
        polygon = geo.bounding_box_polygon((25.5, 60.5), (24.5, 59.5))
        assert geo.polygon_envelope(polygon) == geo.Envelope(24.5, 59.5, 25.5, 60.5)

