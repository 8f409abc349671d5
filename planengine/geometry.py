"""Point and line math shared by the straightener, area engine and grid."""
from __future__ import annotations
import math
from typing import Sequence, List, Tuple, Union

from .models import Point, Line, ConfigError
from .utils import FLOATING_POINT_TOLERANCE, CLOSE_POINT_THRESHOLD, snap


def distance(a: Point, b: Point) -> float:
    return math.hypot(b.x - a.x, b.y - a.y)


def midpoint(a: Point, b: Point) -> Point:
    return Point((a.x + b.x) / 2.0, (a.y + b.y) / 2.0)


def angle(a: Point, b: Point) -> float:
    """Direction of a→b in degrees, [0, 360).

    Screen coordinates (y grows downward): 90 points down the screen, 270 up.
    A zero-length vector gives 0.
    """
    dx = b.x - a.x; dy = b.y - a.y
    if dx == 0 and dy == 0:
        return 0.0
    deg = math.degrees(math.atan2(dy, dx)) % 360.0
    # -0.0 and values that round up to 360.0
    return 0.0 if deg >= 360.0 else deg + 0.0


def quantize_angle(deg: float) -> float:
    """Nearest multiple of 45° in [0, 360)."""
    return (round((deg % 360.0) / 45.0) * 45.0) % 360.0


def _check_grid(grid_size: float):
    if grid_size <= 0:
        raise ConfigError(f"grid_size must be positive, got {grid_size}")


def snap_to_grid(p: Point, grid_size: float) -> Point:
    _check_grid(grid_size)
    return Point(snap(p.x, grid_size), snap(p.y, grid_size))


def snap_line_to_grid(line: Line, grid_size: float) -> Line:
    return Line(snap_to_grid(line.start, grid_size), snap_to_grid(line.end, grid_size))


def distance_to_grid(p: Point, grid_size: float) -> float:
    """Distance from p to the nearest grid intersection."""
    return distance(p, snap_to_grid(p, grid_size))


def is_exact_grid_multiple(value: float, grid_size: float, tolerance: float = FLOATING_POINT_TOLERANCE) -> bool:
    _check_grid(grid_size)
    nearest = round(value / grid_size) * grid_size
    return abs(value - nearest) < tolerance


def is_line_aligned_with_grid(item: Union[Point, Line], grid_size: float,
                              tolerance: float = FLOATING_POINT_TOLERANCE) -> bool:
    """True when the point (or both endpoints of the line) sits on a grid intersection."""
    if isinstance(item, Line):
        return (is_line_aligned_with_grid(item.start, grid_size, tolerance) and
                is_line_aligned_with_grid(item.end, grid_size, tolerance))
    return (is_exact_grid_multiple(item.x, grid_size, tolerance) and
            is_exact_grid_multiple(item.y, grid_size, tolerance))


def perpendicular_distance(p: Point, a: Point, b: Point) -> float:
    """Distance from p to segment a-b."""
    dx = b.x - a.x; dy = b.y - a.y
    len_sq = dx * dx + dy * dy
    if len_sq == 0:
        return distance(p, a)
    t = ((p.x - a.x) * dx + (p.y - a.y) * dy) / len_sq
    if t < 0:
        return distance(p, a)
    if t > 1:
        return distance(p, b)
    return distance(p, Point(a.x + t * dx, a.y + t * dy))


def simplify_path(points: Sequence[Point], tolerance: float = 1.0) -> List[Point]:
    """Douglas-Peucker simplification; endpoints are always kept."""
    pts = list(points)
    if len(pts) <= 2:
        return pts
    first, last = pts[0], pts[-1]
    index, dmax = 0, 0.0
    for i in range(1, len(pts) - 1):
        d = perpendicular_distance(pts[i], first, last)
        if d > dmax:
            index, dmax = i, d
    if dmax > tolerance:
        left = simplify_path(pts[:index + 1], tolerance)
        right = simplify_path(pts[index:], tolerance)
        return left[:-1] + right
    return [first, last]


def filter_redundant_points(points: Sequence[Point], min_distance: float = CLOSE_POINT_THRESHOLD) -> List[Point]:
    """Drop points closer than min_distance to the previously kept one. The last input point survives."""
    pts = list(points)
    if len(pts) <= 2:
        return pts
    out = [pts[0]]
    for p in pts[1:]:
        if distance(out[-1], p) >= min_distance:
            out.append(p)
    if out[-1] != pts[-1]:
        if len(out) > 1:
            out[-1] = pts[-1]
        else:
            out.append(pts[-1])
    return out


def smooth_points(points: Sequence[Point], window: int = 3) -> List[Point]:
    """Centered moving average. Endpoints use a truncated window."""
    pts = list(points)
    if len(pts) <= 2 or window < 2:
        return pts
    half = window // 2
    out = []
    for i in range(len(pts)):
        chunk = pts[max(0, i - half):min(len(pts), i + half + 1)]
        out.append(Point(sum(p.x for p in chunk) / len(chunk), sum(p.y for p in chunk) / len(chunk)))
    return out


def bounding_box(points: Sequence[Point]) -> Tuple[Point, Point]:
    if not points:
        return Point(0.0, 0.0), Point(0.0, 0.0)
    xs = [p.x for p in points]; ys = [p.y for p in points]
    return Point(min(xs), min(ys)), Point(max(xs), max(ys))


def polygon_centroid(points: Sequence[Point]) -> Point:
    """Vertex mean; (0, 0) for an empty polygon."""
    if not points:
        return Point(0.0, 0.0)
    n = len(points)
    return Point(sum(p.x for p in points) / n, sum(p.y for p in points) / n)


def point_in_polygon(p: Point, polygon: Sequence[Point]) -> bool:
    """Ray casting. Points exactly on an edge may land either side."""
    n = len(polygon)
    if n < 3:
        return False
    inside = False
    j = n - 1
    for i in range(n):
        a, b = polygon[i], polygon[j]
        if (a.y > p.y) != (b.y > p.y):
            x_cross = (b.x - a.x) * (p.y - a.y) / (b.y - a.y) + a.x
            if p.x < x_cross:
                inside = not inside
        j = i
    return inside


def is_polygon_closed(points: Sequence[Point], tolerance: float = FLOATING_POINT_TOLERANCE) -> bool:
    """True when the first and last vertices coincide (an explicitly closed ring)."""
    if len(points) < 3:
        return False
    return distance(points[0], points[-1]) < tolerance
