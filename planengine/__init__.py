from .utils import *
from .models import (ConfigError, Point, Line, Stroke, StrokeStyle, Room, RoomType, DrawingMode,
                     GridConfig, Viewport, ViewportBounds, SceneRecord)
from .geometry import (distance, midpoint, angle, quantize_angle, snap_to_grid, snap_line_to_grid,
                       distance_to_grid, is_exact_grid_multiple, is_line_aligned_with_grid,
                       perpendicular_distance, simplify_path, filter_redundant_points, smooth_points,
                       bounding_box, polygon_centroid, point_in_polygon, is_polygon_closed)
from .straighten import straighten_line, straighten_stroke, straighten_polygon, has_aligned_walls, clean_stroke
from .area import (polygon_area, polygon_perimeter, is_valid_polygon, pixels_to_meters,
                   length_pixels_to_meters, square_meters_to_square_feet, calculate_gia,
                   format_area, format_area_imperial, format_distance)
from .scene import Scene, MemoryScene, SceneLifecycle
from .state import SceneState, SceneSnapshot, rooms_from_scene
from .grid import GridRenderer, GridLine, GridState, viewport_bounds, bounds_changed_significantly, create_grid_lines
from .undo import HistoryManager
from .store import Store, JsonFileStore
from .logging_config import setup_logging

# Qt adapter (PlanScene, PlanView) lives in planengine.qt_scene so the engine imports without a display.

__all__ = [
    "ConfigError", "Point", "Line", "Stroke", "StrokeStyle", "Room", "RoomType", "DrawingMode",
    "GridConfig", "Viewport", "ViewportBounds", "SceneRecord",
    "distance", "midpoint", "angle", "quantize_angle", "snap_to_grid", "snap_line_to_grid",
    "distance_to_grid", "is_exact_grid_multiple", "is_line_aligned_with_grid",
    "perpendicular_distance", "simplify_path", "filter_redundant_points", "smooth_points",
    "bounding_box", "polygon_centroid", "point_in_polygon", "is_polygon_closed",
    "straighten_line", "straighten_stroke", "straighten_polygon", "has_aligned_walls", "clean_stroke",
    "polygon_area", "polygon_perimeter", "is_valid_polygon", "pixels_to_meters",
    "length_pixels_to_meters", "square_meters_to_square_feet", "calculate_gia",
    "format_area", "format_area_imperial", "format_distance",
    "Scene", "MemoryScene", "SceneLifecycle", "SceneState", "SceneSnapshot", "rooms_from_scene",
    "GridRenderer", "GridLine", "GridState", "viewport_bounds", "bounds_changed_significantly",
    "create_grid_lines", "HistoryManager", "Store", "JsonFileStore", "setup_logging",
]
