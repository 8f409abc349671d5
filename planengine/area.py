"""Room areas and Gross Internal Area (GIA)."""
from __future__ import annotations
import logging
from typing import Any, Dict, Iterable, List, Sequence

from .geometry import distance
from .models import Point, Room, RoomType
from .utils import PIXELS_PER_METER, SQFT_PER_M2, AREA_PRECISION, DISTANCE_PRECISION

logger = logging.getLogger(__name__)

NO_INTERNAL_ROOMS = "No internal rooms found"


def polygon_area(points: Sequence[Point]) -> float:
    """Shoelace area in input units squared. Works for either winding order."""
    n = len(points)
    if n < 3:
        return 0.0
    a = 0.0
    for i in range(n):
        j = (i + 1) % n
        a += points[i].x * points[j].y - points[j].x * points[i].y
    return abs(a) / 2.0


def polygon_perimeter(points: Sequence[Point]) -> float:
    n = len(points)
    if n < 2:
        return 0.0
    return sum(distance(points[i], points[(i + 1) % n]) for i in range(n))


def is_valid_polygon(points: Sequence[Point]) -> bool:
    return len(points) >= 3 and polygon_area(points) > 0


def pixels_to_meters(area_px: float, pixels_per_meter: float = PIXELS_PER_METER) -> float:
    """Square pixels to square metres."""
    return area_px / (pixels_per_meter * pixels_per_meter)


def length_pixels_to_meters(length_px: float, pixels_per_meter: float = PIXELS_PER_METER) -> float:
    return length_px / pixels_per_meter


def square_meters_to_square_feet(m2: float) -> float:
    return m2 * SQFT_PER_M2


def calculate_gia(rooms: Iterable[Room], precision: int = AREA_PRECISION,
                  pixels_per_meter: float = PIXELS_PER_METER) -> Dict[str, Any]:
    """Sum the areas of the internal rooms.

    Returns the aggregate (m², ft², perimeter in m) with a per-room
    breakdown. No internal rooms is a normal outcome, reported as
    ``isValid=False`` with an ``errorMessage``.
    """
    internal = [r for r in rooms if RoomType(r.type) == RoomType.INTERNAL]
    if not internal:
        return {"isValid": False, "areaM2": 0.0, "areaSqFt": 0.0, "perimeter": 0.0,
                "rooms": [], "errorMessage": NO_INTERNAL_ROOMS}

    breakdown: List[Dict[str, Any]] = []
    total_px = 0.0
    perimeter_px = 0.0
    for room in internal:
        area_px = polygon_area(room.points)
        total_px += area_px
        perimeter_px += polygon_perimeter(room.points)
        m2 = pixels_to_meters(area_px, pixels_per_meter)
        breakdown.append({
            "id": room.id,
            "name": room.name,
            "areaM2": round(m2, precision),
            "areaSqFt": round(square_meters_to_square_feet(m2), precision),
            "type": RoomType.INTERNAL.value,
        })

    area_m2 = pixels_to_meters(total_px, pixels_per_meter)
    result = {
        "isValid": True,
        "areaM2": round(area_m2, precision),
        "areaSqFt": round(square_meters_to_square_feet(area_m2), precision),
        "perimeter": round(length_pixels_to_meters(perimeter_px, pixels_per_meter), precision),
        "rooms": breakdown,
    }
    logger.debug(f"GIA: {len(internal)} internal rooms, {area_m2:.4f} m2")
    return result


def format_area(m2: float, precision: int = AREA_PRECISION) -> str:
    return f"{m2:.{precision}f} m²"


def format_area_imperial(m2: float, precision: int = AREA_PRECISION) -> str:
    return f"{format_area(m2, precision)} ({square_meters_to_square_feet(m2):.{precision}f} ft²)"


def format_distance(length_px: float, precision: int = DISTANCE_PRECISION,
                    pixels_per_meter: float = PIXELS_PER_METER) -> str:
    return f"{length_pixels_to_meters(length_px, pixels_per_meter):.{precision}f} m"
