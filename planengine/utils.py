from __future__ import annotations

# ===== Scale =====
# 1 m = 100 px. The 40 px/m value seen in older plan files is not supported.
PIXELS_PER_METER = 100.0
SQFT_PER_M2 = 10.764

# ===== Canvas / grid =====
SMALL_GRID = 10.0       # 0.1 m
LARGE_GRID = 100.0      # 1 m
GRID_VIEWPORT_PADDING = 100.0
GRID_UPDATE_THRESHOLD = 50.0
MAX_GRID_LINES = 600
GRID_DEBOUNCE_MS = 200

# ===== Grid visuals =====
GRID_MINOR_COLOR = "#DDDDDD"
GRID_MAJOR_COLOR = "#AAAAAA"
GRID_MINOR_WIDTH = 0.5
GRID_MAJOR_WIDTH = 1.0
GRID_Z = -1000.0

# ===== Drawing =====
DEFAULT_STROKE_COLOR = "#1E293B"
DEFAULT_STROKE_WIDTH = 2.0
ROOM_FILL = "#5A64A0FF"      # #AARRGGBB
ROOM_BORDER = "#1E5AC8"

# ===== Tolerances =====
FLOATING_POINT_TOLERANCE = 1e-4
ANGLE_SNAP_THRESHOLD = 5.0      # degrees
CLOSE_POINT_THRESHOLD = 10.0    # px
SHAPE_CLOSE_THRESHOLD = 15.0    # px

# ===== History / output =====
MAX_HISTORY_STATES = 50
AREA_PRECISION = 2
DISTANCE_PRECISION = 2


def snap(v: float, step: float) -> float:
    return round(v / step) * step


def angle_delta(a: float, b: float) -> float:
    """Shortest distance between two angles in degrees, in [0, 180]."""
    d = abs(a - b) % 360.0
    return min(d, 360.0 - d)
