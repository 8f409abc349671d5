"""Angle snapping for hand-drawn lines, strokes and room outlines.

Cardinal directions (0/90/180/270) snap by copying the start coordinate
across, so the free coordinate is kept exactly. Diagonals (45/135/225/315)
snap by equalising |dx| and |dy| to their mean, keeping the signs.
Anything further than ``threshold`` degrees from a standard angle is left
alone, so deliberately oblique walls survive.
"""
from __future__ import annotations
import logging
import math
from typing import List, Optional, Sequence

from .geometry import angle, distance, perpendicular_distance, filter_redundant_points
from .models import Point
from .utils import ANGLE_SNAP_THRESHOLD, CLOSE_POINT_THRESHOLD, angle_delta

logger = logging.getLogger(__name__)

CARDINAL = (0.0, 90.0, 180.0, 270.0)
DIAGONAL = (45.0, 135.0, 225.0, 315.0)


def _near(a: float, targets: Sequence[float], threshold: float) -> Optional[float]:
    best = min(targets, key=lambda t: angle_delta(a, t))
    return best if angle_delta(a, best) <= threshold else None


def straighten_line(start: Point, end: Point, threshold: float = ANGLE_SNAP_THRESHOLD) -> Point:
    """Return a possibly adjusted ``end`` so that start→end sits on a standard angle."""
    if start == end:
        return end
    a = angle(start, end)

    cardinal = _near(a, CARDINAL, threshold)
    if cardinal is not None:
        if cardinal in (0.0, 180.0):
            return Point(end.x, start.y)
        return Point(start.x, end.y)

    if _near(a, DIAGONAL, threshold) is not None:
        dx = end.x - start.x; dy = end.y - start.y
        m = (abs(dx) + abs(dy)) / 2.0
        return Point(start.x + math.copysign(m, dx), start.y + math.copysign(m, dy))

    return end


def straighten_stroke(points: Sequence[Point], threshold: float = ANGLE_SNAP_THRESHOLD,
                      max_deviation: Optional[float] = None) -> List[Point]:
    """Collapse a nearly straight gesture into one straightened segment.

    A stroke of more than two points collapses only if every intermediate
    point lies within ``max_deviation`` of the first→last segment. The
    default band is ``length * sin(threshold)``. Curved or zig-zag
    strokes come back unchanged.
    """
    pts = list(points)
    if len(pts) < 2:
        return pts
    if len(pts) == 2:
        return [pts[0], straighten_line(pts[0], pts[1], threshold)]

    first, last = pts[0], pts[-1]
    length = distance(first, last)
    if length == 0:
        return pts
    band = max_deviation if max_deviation is not None else length * math.sin(math.radians(threshold))
    if any(perpendicular_distance(p, first, last) > band for p in pts[1:-1]):
        return pts
    return [first, straighten_line(first, last, threshold)]


def has_aligned_walls(polygon: Sequence[Point], threshold: float = ANGLE_SNAP_THRESHOLD) -> bool:
    """True when every edge (closing edge included) is within threshold of 0/90/180/270."""
    n = len(polygon)
    if n < 3:
        return False
    for i in range(n):
        a = angle(polygon[i], polygon[(i + 1) % n])
        if _near(a, CARDINAL, threshold) is None:
            return False
    return True


def straighten_polygon(polygon: Sequence[Point], threshold: float = ANGLE_SNAP_THRESHOLD) -> List[Point]:
    """Snap each edge in drawing order; the first vertex anchors the outline.

    Vertex i moves only when edge (i-1 → i) is near a standard angle. The
    closing edge is snapped by moving the last vertex. If the edge into the
    last vertex already sits on a standard angle, the last vertex goes to
    the intersection of both snapped directions so neither edge loses its
    snap; parallel directions leave the closing edge as drawn.
    """
    pts = list(polygon)
    if len(pts) < 2:
        return pts
    if len(pts) == 2:
        return [pts[0], straighten_line(pts[0], pts[1], threshold)]

    out = [pts[0]]
    for p in pts[1:]:
        out.append(straighten_line(out[-1], p, threshold))

    first, prev, last = out[0], out[-2], out[-1]
    closed = straighten_line(first, last, threshold)
    if closed == last:
        return out
    if not _on_standard_angle(prev, last):
        out[-1] = closed
        return out

    corner = _intersect(prev, last, first, closed)
    if corner is None or distance(corner, last) > max(distance(prev, last), distance(first, last)):
        return out
    # re-snap so the closing edge is exact, not just close
    out[-1] = straighten_line(first, corner, threshold)
    return out


def _on_standard_angle(a: Point, b: Point, eps: float = 1e-6) -> bool:
    if a == b:
        return False
    return _near(angle(a, b), CARDINAL + DIAGONAL, eps) is not None


def _intersect(p: Point, p_to: Point, q: Point, q_to: Point) -> Optional[Point]:
    """Intersection of the infinite lines p→p_to and q→q_to, None when parallel."""
    d1x, d1y = p_to.x - p.x, p_to.y - p.y
    d2x, d2y = q_to.x - q.x, q_to.y - q.y
    den = d1x * d2y - d1y * d2x
    if abs(den) < 1e-12:
        return None
    t = ((q.x - p.x) * d2y - (q.y - p.y) * d2x) / den
    return Point(p.x + t * d1x, p.y + t * d1y)


def clean_stroke(points: Sequence[Point], threshold: float = ANGLE_SNAP_THRESHOLD,
                 min_distance: float = CLOSE_POINT_THRESHOLD) -> List[Point]:
    """Stroke-end pipeline: drop jitter points, then straighten."""
    filtered = filter_redundant_points(points, min_distance)
    out = straighten_stroke(filtered, threshold)
    logger.debug(f"Stroke cleaned: {len(points)} -> {len(filtered)} -> {len(out)} points")
    return out
