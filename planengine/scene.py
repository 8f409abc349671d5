from __future__ import annotations
import logging
from enum import Enum
from typing import Callable, List, Optional, Protocol, runtime_checkable

from .models import SceneRecord

logger = logging.getLogger(__name__)


@runtime_checkable
class Scene(Protocol):
    """What the engine needs from a canvas. Grid records are always drawn behind drawing records."""

    def add(self, record: SceneRecord) -> None: ...
    def remove(self, record: SceneRecord) -> None: ...
    def get_objects(self, grid: Optional[bool] = None) -> List[SceneRecord]: ...
    def request_render(self) -> None: ...


class SceneLifecycle(str, Enum):
    ACTIVE = "active"
    DISPOSED = "disposed"


class MemoryScene:
    """Canvas-less scene: two ordered layers, grid first.

    Used headless (tests, batch tools) and as the reference behaviour for
    the Qt scene.
    """

    def __init__(self, on_render: Optional[Callable[[], None]] = None):
        self._grid: List[SceneRecord] = []
        self._drawing: List[SceneRecord] = []
        self.lifecycle = SceneLifecycle.ACTIVE
        self.render_requests = 0
        self._on_render = on_render

    def _ensure_active(self):
        if self.lifecycle is not SceneLifecycle.ACTIVE:
            raise RuntimeError("Scene has been disposed")

    def add(self, record: SceneRecord) -> None:
        self._ensure_active()
        (self._grid if record.grid else self._drawing).append(record)

    def remove(self, record: SceneRecord) -> None:
        self._ensure_active()
        layer = self._grid if record.grid else self._drawing
        for i, it in enumerate(layer):
            if it is record:
                del layer[i]
                return

    def get_objects(self, grid: Optional[bool] = None) -> List[SceneRecord]:
        if grid is True:
            return list(self._grid)
        if grid is False:
            return list(self._drawing)
        return self._grid + self._drawing

    def request_render(self) -> None:
        if self.lifecycle is not SceneLifecycle.ACTIVE:
            return
        self.render_requests += 1
        if self._on_render:
            self._on_render()

    def dispose(self) -> None:
        self._grid.clear()
        self._drawing.clear()
        self.lifecycle = SceneLifecycle.DISPOSED
        logger.info("Scene disposed")
