"""Tests for planengine/area.py polygon area and GIA."""
import pytest

from planengine import Point, Room, RoomType
from planengine.area import (
    polygon_area, polygon_perimeter, is_valid_polygon,
    pixels_to_meters, length_pixels_to_meters, square_meters_to_square_feet,
    calculate_gia, format_area, format_area_imperial, format_distance, NO_INTERNAL_ROOMS,
)
from conftest import rect


class TestPolygonArea:
    def test_square(self):
        assert polygon_area([Point(0, 0), Point(10, 0), Point(10, 10), Point(0, 10)]) == 100

    def test_triangle(self):
        assert polygon_area([Point(0, 0), Point(10, 0), Point(0, 10)]) == 50

    def test_winding_order_does_not_matter(self):
        sq = list(rect(0, 0, 30, 20))
        assert polygon_area(sq) == polygon_area(sq[::-1]) == 600

    @pytest.mark.parametrize("n", [0, 1, 2])
    def test_fewer_than_three_points(self, n):
        assert polygon_area([Point(i, i * i) for i in range(n)]) == 0

    def test_l_shape(self):
        l_shape = [Point(0, 0), Point(20, 0), Point(20, 10), Point(10, 10), Point(10, 20), Point(0, 20)]
        assert polygon_area(l_shape) == 300

    def test_collinear_is_zero(self):
        assert polygon_area([Point(0, 0), Point(5, 5), Point(10, 10)]) == 0
        assert not is_valid_polygon([Point(0, 0), Point(5, 5), Point(10, 10)])


class TestPerimeter:
    def test_closed_loop(self):
        assert polygon_perimeter(rect(0, 0, 30, 20)) == 100

    def test_two_points_go_there_and_back(self):
        assert polygon_perimeter([Point(0, 0), Point(3, 4)]) == 10

    def test_degenerate(self):
        assert polygon_perimeter([]) == 0
        assert polygon_perimeter([Point(1, 1)]) == 0


class TestUnits:
    def test_pixels_to_meters(self):
        assert pixels_to_meters(10_000) == 1
        assert pixels_to_meters(100) == pytest.approx(0.01)

    def test_custom_scale(self):
        assert pixels_to_meters(1600, pixels_per_meter=40) == 1

    def test_lengths(self):
        assert length_pixels_to_meters(250) == 2.5

    def test_square_feet(self):
        assert square_meters_to_square_feet(1) == pytest.approx(10.764)


# ============================================================
# GIA
# ============================================================

class TestCalculateGIA:
    def test_no_rooms(self):
        gia = calculate_gia([])
        assert gia["isValid"] is False
        assert gia["areaM2"] == 0 and gia["areaSqFt"] == 0 and gia["perimeter"] == 0
        assert gia["rooms"] == []
        assert gia["errorMessage"] == NO_INTERNAL_ROOMS

    def test_only_external_and_excluded(self):
        rooms = [Room(id="a", points=rect(0, 0, 100, 100), type=RoomType.EXTERNAL),
                 Room(id="b", points=rect(0, 0, 100, 100), type=RoomType.EXCLUDED)]
        assert calculate_gia(rooms)["isValid"] is False

    def test_small_internal_room(self):
        gia = calculate_gia([Room(id="tiny", points=rect(0, 0, 10, 10))])
        assert gia["isValid"] is True
        assert gia["areaM2"] == pytest.approx(0.01)
        assert "errorMessage" not in gia

    def test_breakdown_filters_internal(self, mixed_rooms):
        gia = calculate_gia(mixed_rooms)
        assert [r["id"] for r in gia["rooms"]] == ["r1", "r2"]
        # 2x2 m + 1x3 m
        assert gia["areaM2"] == 7
        assert gia["areaSqFt"] == pytest.approx(round(7 * 10.764, 2))
        # 8 m + 8 m
        assert gia["perimeter"] == 16

    def test_room_entry_shape(self, square_room):
        entry = calculate_gia([square_room])["rooms"][0]
        assert entry == {"id": "r1", "name": "Kitchen", "areaM2": 4.0,
                         "areaSqFt": round(4 * 10.764, 2), "type": "internal"}

    def test_precision(self):
        room = Room(id="odd", points=rect(0, 0, 123, 77))
        assert calculate_gia([room], precision=3)["areaM2"] == round(123 * 77 / 10_000, 3)
        assert calculate_gia([room], precision=0)["areaM2"] == 1

    def test_string_room_type_accepted(self):
        room = Room(id="s", points=rect(0, 0, 100, 100), type="internal")
        assert calculate_gia([room])["areaM2"] == 1


class TestFormatting:
    def test_format_area(self):
        assert format_area(1.234) == "1.23 m²"
        assert format_area(2, precision=1) == "2.0 m²"

    def test_format_area_imperial(self):
        assert format_area_imperial(1.23) == "1.23 m² (13.24 ft²)"

    def test_format_distance(self):
        assert format_distance(125) == "1.25 m"
