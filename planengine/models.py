from __future__ import annotations
import copy
import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .utils import (SMALL_GRID, LARGE_GRID, GRID_MINOR_COLOR, GRID_MAJOR_COLOR,
                    GRID_MINOR_WIDTH, GRID_MAJOR_WIDTH, GRID_VIEWPORT_PADDING,
                    MAX_GRID_LINES, DEFAULT_STROKE_COLOR, DEFAULT_STROKE_WIDTH)


class ConfigError(ValueError):
    """Raised for invalid engine configuration (a programming mistake, not user input)."""


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_any(cls, value) -> "Point":
        if isinstance(value, Point):
            return value
        if isinstance(value, dict):
            return cls(float(value["x"]), float(value["y"]))
        x, y = value
        return cls(float(x), float(y))


@dataclass(frozen=True)
class Line:
    start: Point
    end: Point


@dataclass
class StrokeStyle:
    color: str = DEFAULT_STROKE_COLOR
    width: float = DEFAULT_STROKE_WIDTH


@dataclass
class Stroke:
    points: Tuple[Point, ...]
    style: StrokeStyle = field(default_factory=StrokeStyle)


class RoomType(str, Enum):
    INTERNAL = "internal"
    EXTERNAL = "external"
    EXCLUDED = "excluded"


@dataclass
class Room:
    id: str
    points: Tuple[Point, ...]
    name: str = ""
    type: RoomType = RoomType.INTERNAL


class DrawingMode:
    SELECT = "select"
    DRAW = "draw"
    STRAIGHT_LINE = "straight_line"
    ROOM = "room"


@dataclass
class GridConfig:
    small_spacing: float = SMALL_GRID
    large_spacing: float = LARGE_GRID
    small_color: str = GRID_MINOR_COLOR
    large_color: str = GRID_MAJOR_COLOR
    small_width: float = GRID_MINOR_WIDTH
    large_width: float = GRID_MAJOR_WIDTH
    viewport_padding: float = GRID_VIEWPORT_PADDING
    max_lines: int = MAX_GRID_LINES

    def __post_init__(self):
        if self.small_spacing <= 0 or self.large_spacing <= 0:
            raise ConfigError(f"Grid spacing must be positive: small={self.small_spacing}, large={self.large_spacing}")
        if self.large_spacing < self.small_spacing:
            raise ConfigError(f"large_spacing ({self.large_spacing}) is smaller than small_spacing ({self.small_spacing})")
        if self.viewport_padding < 0:
            raise ConfigError(f"viewport_padding must be >= 0, got {self.viewport_padding}")
        if int(self.max_lines) != self.max_lines or self.max_lines < 1:
            raise ConfigError(f"max_lines must be a positive integer, got {self.max_lines}")


@dataclass(frozen=True)
class ViewportBounds:
    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top


@dataclass(frozen=True)
class Viewport:
    """Canvas size in screen px plus the canvas affine transform (a, b, c, d, e, f)."""
    width: float
    height: float
    transform: Tuple[float, float, float, float, float, float] = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)
    zoom: float = 1.0


# ---- scene records ----
RECORD_KINDS = ("stroke", "line", "room", "grid-line")

_uid = itertools.count(1)


@dataclass(eq=False)
class SceneRecord:
    """One rendered drawing object. Identity (not value) equality: the scene removes by identity."""
    kind: str
    geometry: Dict[str, Any]
    style: Dict[str, Any] = field(default_factory=dict)
    grid: bool = False
    uid: int = field(default_factory=lambda: next(_uid))

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind, "geometry": copy.deepcopy(self.geometry), "style": copy.deepcopy(self.style)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SceneRecord":
        """Build a record from its serialized form, accepting the older plan-file shapes."""
        kind = data.get("type") or data.get("objectType") or "stroke"
        if kind in ("polyline", "path"):
            kind = "stroke"
        if kind in ("wall", "straight-line"):
            kind = "line"
        if kind in ("grid", "grid-small", "grid-large"):
            raise ValueError("Grid objects are not part of a drawing snapshot")
        if kind not in RECORD_KINDS:
            raise ValueError(f"Unknown record type: {kind!r}")

        geometry = data.get("geometry")
        if geometry is None:
            geometry = {}
            if "points" in data:
                geometry["points"] = data["points"]
            if all(k in data for k in ("x1", "y1", "x2", "y2")):
                geometry["points"] = [{"x": data["x1"], "y": data["y1"]}, {"x": data["x2"], "y": data["y2"]}]
            for k in ("id", "name", "room_type"):
                if k in data:
                    geometry[k] = data[k]
        geometry = dict(geometry)
        if "points" in geometry:
            geometry["points"] = [Point.from_any(p).to_dict() for p in geometry["points"]]

        style = dict(data.get("style") or {})
        if not style:
            if "stroke" in data:
                style["color"] = data["stroke"]
            if "strokeWidth" in data:
                style["width"] = data["strokeWidth"]
        return cls(kind=kind, geometry=geometry, style=style)

    @property
    def points(self) -> Tuple[Point, ...]:
        return tuple(Point.from_any(p) for p in self.geometry.get("points", ()))

    @classmethod
    def from_stroke(cls, stroke: Stroke) -> "SceneRecord":
        kind = "line" if len(stroke.points) == 2 else "stroke"
        return cls(kind=kind,
                   geometry={"points": [p.to_dict() for p in stroke.points]},
                   style={"color": stroke.style.color, "width": stroke.style.width})

    @classmethod
    def from_room(cls, room: Room, style: Optional[Dict[str, Any]] = None) -> "SceneRecord":
        return cls(kind="room",
                   geometry={"id": room.id, "name": room.name, "room_type": RoomType(room.type).value,
                             "points": [p.to_dict() for p in room.points]},
                   style=dict(style or {}))

    def to_room(self) -> Optional[Room]:
        if self.kind != "room":
            return None
        try:
            room_type = RoomType(self.geometry.get("room_type", RoomType.INTERNAL.value))
        except ValueError:
            room_type = RoomType.EXCLUDED
        return Room(id=str(self.geometry.get("id", self.uid)),
                    name=str(self.geometry.get("name", "")),
                    points=self.points,
                    type=room_type)
