"""Viewport-bounded background grid.

Only the visible rectangle (plus a padding margin) is covered, and lines
are regenerated only when the viewport has moved more than
``update_threshold`` scene units since the last generation. Each axis
gets at most ``max_lines // 2`` lines, so the work per regeneration stays
bounded at any zoom level.
"""
from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .geometry import is_exact_grid_multiple
from .models import ConfigError, GridConfig, SceneRecord, Viewport, ViewportBounds
from .scene import Scene
from .utils import GRID_UPDATE_THRESHOLD

logger = logging.getLogger(__name__)

_EPS = 1e-9


class GridState(str, Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"


@dataclass(frozen=True)
class GridLine:
    x1: float
    y1: float
    x2: float
    y2: float
    major: bool
    color: str
    width: float

    def to_record(self) -> SceneRecord:
        return SceneRecord(kind="grid-line",
                           geometry={"x1": self.x1, "y1": self.y1, "x2": self.x2, "y2": self.y2,
                                     "major": self.major},
                           style={"color": self.color, "width": self.width},
                           grid=True)


def viewport_bounds(canvas_size: Tuple[float, float], transform: Sequence[float],
                    zoom: float, margin: float) -> ViewportBounds:
    """Scene-space rectangle visible on the canvas, grown by ``margin`` on every side."""
    if zoom <= 0:
        raise ConfigError(f"zoom must be positive, got {zoom}")
    width, height = canvas_size
    left = -transform[4] / zoom - margin
    top = -transform[5] / zoom - margin
    return ViewportBounds(left=left, top=top,
                          right=left + width / zoom + 2 * margin,
                          bottom=top + height / zoom + 2 * margin)


def bounds_changed_significantly(old: Optional[ViewportBounds], new: ViewportBounds,
                                 update_threshold: float) -> bool:
    if old is None:
        return True
    return (abs(old.left - new.left) > update_threshold or
            abs(old.top - new.top) > update_threshold or
            abs(old.right - new.right) > update_threshold or
            abs(old.bottom - new.bottom) > update_threshold)


def _index_range(lo: float, hi: float, step: float) -> Tuple[int, int]:
    return math.ceil(lo / step - _EPS), math.floor(hi / step + _EPS)


def _axis_positions(lo: float, hi: float, config: GridConfig, cap: int) -> List[Tuple[float, bool]]:
    if cap <= 0:
        return []
    small, large = config.small_spacing, config.large_spacing
    mj0, mj1 = _index_range(lo, hi, large)
    n_major = max(0, mj1 - mj0 + 1)
    mn0, mn1 = _index_range(lo, hi, small)
    n_small = max(0, mn1 - mn0 + 1)

    # counts are known before building anything; only bounded lists get built
    if n_small <= cap:
        majors = [(i * large, True) for i in range(mj0, mj1 + 1)]
        minors = [(i * small, False) for i in range(mn0, mn1 + 1)
                  if not is_exact_grid_multiple(i * small, large)]
        if len(majors) + len(minors) <= cap:
            return sorted(minors + majors)

    if n_major <= cap:
        return [(i * large, True) for i in range(mj0, mj1 + 1)]

    # zoomed far out: every k-th major line, anchored on multiples of k so panning is stable
    stride = math.ceil(n_major / cap)
    first = math.ceil(mj0 / stride) * stride
    return [(i * large, True) for i in range(first, mj1 + 1, stride)]


def create_grid_lines(bounds: ViewportBounds, config: GridConfig) -> List[GridLine]:
    """Grid lines covering ``bounds`` snapped outward to the small spacing. Minor lines come first."""
    small = config.small_spacing
    left = math.floor(bounds.left / small) * small
    top = math.floor(bounds.top / small) * small
    right = math.ceil(bounds.right / small) * small
    bottom = math.ceil(bounds.bottom / small) * small
    cap = int(config.max_lines) // 2

    def make(major: bool, x1, y1, x2, y2) -> GridLine:
        if major:
            return GridLine(x1, y1, x2, y2, True, config.large_color, config.large_width)
        return GridLine(x1, y1, x2, y2, False, config.small_color, config.small_width)

    lines = [make(m, x, top, x, bottom) for x, m in _axis_positions(left, right, config, cap)]
    lines += [make(m, left, y, right, y) for y, m in _axis_positions(top, bottom, config, cap)]
    lines.sort(key=lambda ln: ln.major)
    return lines


class GridRenderer:
    """Keeps the scene's grid layer in step with the viewport.

    UNINITIALIZED -> ACTIVE on the first successful generation,
    ACTIVE -> ACTIVE when the viewport moves past the threshold,
    any -> UNINITIALIZED on clear_grid()/destroy().
    """

    def __init__(self, scene: Scene, config: Optional[GridConfig] = None,
                 margin: Optional[float] = None, update_threshold: float = GRID_UPDATE_THRESHOLD):
        self.scene = scene
        self.config = config or GridConfig()
        self.margin = self.config.viewport_padding if margin is None else float(margin)
        if self.margin < 0:
            raise ConfigError(f"margin must be >= 0, got {self.margin}")
        if update_threshold < 0:
            raise ConfigError(f"update_threshold must be >= 0, got {update_threshold}")
        self.update_threshold = float(update_threshold)
        self.state = GridState.UNINITIALIZED
        self.bounds: Optional[ViewportBounds] = None
        self.generation_count = 0
        self._records: List[SceneRecord] = []
        self._viewport: Optional[Viewport] = None
        self._source = None

    @property
    def line_count(self) -> int:
        return len(self._records)

    # ---- viewport source ----
    def attach(self, source):
        """Subscribe to a source exposing add_viewport_listener/remove_viewport_listener."""
        if self._source is source:
            return
        self.detach()
        source.add_viewport_listener(self.on_viewport_changed)
        self._source = source
        logger.info("Grid attached to viewport source")

    def detach(self):
        if self._source is None:
            return
        self._source.remove_viewport_listener(self.on_viewport_changed)
        self._source = None

    def on_viewport_changed(self, viewport: Viewport):
        self.update_grid(viewport)

    # ---- generation ----
    def create_grid_lines(self, bounds: ViewportBounds) -> List[GridLine]:
        return create_grid_lines(bounds, self.config)

    def update_grid(self, viewport: Optional[Viewport] = None) -> bool:
        """Regenerate if uninitialized or the viewport moved enough. Returns True when lines were rebuilt."""
        if viewport is not None:
            self._viewport = viewport
        if self._viewport is None:
            logger.debug("Grid update skipped: no viewport yet")
            return False
        vp = self._viewport
        bounds = viewport_bounds((vp.width, vp.height), vp.transform, vp.zoom, self.margin)
        if self.state is GridState.ACTIVE and not bounds_changed_significantly(self.bounds, bounds,
                                                                                self.update_threshold):
            return False
        return self._regenerate(bounds)

    def _regenerate(self, bounds: ViewportBounds) -> bool:
        records = [ln.to_record() for ln in self.create_grid_lines(bounds)]
        added: List[SceneRecord] = []
        try:
            for rec in records:
                self.scene.add(rec)
                added.append(rec)
        except Exception:
            logger.exception("Grid generation failed, keeping the previous grid")
            self._discard(added)
            return False

        self._discard(self._records)
        self._records = records
        self.bounds = bounds
        self.state = GridState.ACTIVE
        self.generation_count += 1
        self.scene.request_render()
        logger.debug(f"Grid regenerated: {len(records)} lines for {bounds}")
        return True

    def _discard(self, records: List[SceneRecord]):
        for rec in records:
            try:
                self.scene.remove(rec)
            except RuntimeError as e:
                logger.warning(f"Could not remove grid line: {e}")
                break

    def clear_grid(self):
        self._discard(self._records)
        self._records = []
        self.bounds = None
        self.state = GridState.UNINITIALIZED

    def destroy(self):
        self.detach()
        self.clear_grid()
        self._viewport = None
        logger.info("Grid destroyed")
