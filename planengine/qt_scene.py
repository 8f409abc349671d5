from __future__ import annotations
import itertools
import logging
from typing import Callable, Dict, List, Optional

from PySide6.QtCore import Qt, QPointF, QLineF, QTimer, Signal
from PySide6.QtGui import QPainter, QPen, QBrush, QColor, QPainterPath, QPolygonF, QWheelEvent
from PySide6.QtWidgets import QApplication, QGraphicsScene, QGraphicsView, QGraphicsItem, \
    QGraphicsLineItem, QGraphicsPathItem, QGraphicsPolygonItem

from .models import SceneRecord, Viewport
from .utils import (GRID_Z, GRID_DEBOUNCE_MS, DEFAULT_STROKE_COLOR, DEFAULT_STROKE_WIDTH,
                    ROOM_FILL, ROOM_BORDER)

logger = logging.getLogger(__name__)

# Scene extent: the grid follows the viewport, the scroll range must just be big enough.
SCENE_EXTENT = 100_000.0
ZOOM_STEP = 1.15
ZOOM_MIN, ZOOM_MAX = 0.05, 20.0


# ===== Scene =====
class PlanScene(QGraphicsScene):
    """QGraphicsScene implementing the engine's Scene protocol.

    Every record maps to one graphics item. Grid items live at GRID_Z,
    drawing items stack above in insertion order.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.setItemIndexMethod(QGraphicsScene.NoIndex)
        self.setSceneRect(-SCENE_EXTENT, -SCENE_EXTENT, 2 * SCENE_EXTENT, 2 * SCENE_EXTENT)
        self._grid: Dict[int, SceneRecord] = {}
        self._drawing: Dict[int, SceneRecord] = {}
        self._items: Dict[int, QGraphicsItem] = {}
        self._z = itertools.count(1)

    # ---- Scene protocol ----
    def add(self, record: SceneRecord) -> None:
        item = self._make_item(record)
        if record.grid:
            item.setZValue(GRID_Z + (0.5 if record.geometry.get("major") else 0.0))
            self._grid[record.uid] = record
        else:
            item.setZValue(float(next(self._z)))
            item.setFlag(QGraphicsItem.ItemIsSelectable, True)
            self._drawing[record.uid] = record
        item.setData(0, record.uid)
        self.addItem(item)
        self._items[record.uid] = item

    def remove(self, record: SceneRecord) -> None:
        item = self._items.pop(record.uid, None)
        if item is None:
            return
        (self._grid if record.grid else self._drawing).pop(record.uid, None)
        self.removeItem(item)

    def get_objects(self, grid: Optional[bool] = None) -> List[SceneRecord]:
        if grid is True:
            return list(self._grid.values())
        if grid is False:
            return list(self._drawing.values())
        return list(self._grid.values()) + list(self._drawing.values())

    def request_render(self) -> None:
        self.update()

    # ---- helpers ----
    def item_for(self, record: SceneRecord) -> Optional[QGraphicsItem]:
        return self._items.get(record.uid)

    def record_for(self, item: QGraphicsItem) -> Optional[SceneRecord]:
        uid = item.data(0)
        return self._drawing.get(uid) or self._grid.get(uid)

    def _make_item(self, record: SceneRecord) -> QGraphicsItem:
        style = record.style
        if record.kind == "grid-line":
            g = record.geometry
            item = QGraphicsLineItem(QLineF(g["x1"], g["y1"], g["x2"], g["y2"]))
            pen = QPen(QColor(style.get("color", "#DDDDDD")), float(style.get("width", 0.5)))
            pen.setCosmetic(True)
            item.setPen(pen)
            item.setAcceptedMouseButtons(Qt.NoButton)
            return item

        pen = QPen(QColor(style.get("color", DEFAULT_STROKE_COLOR)),
                   float(style.get("width", DEFAULT_STROKE_WIDTH)),
                   Qt.SolidLine, Qt.RoundCap, Qt.RoundJoin)
        pts = [QPointF(p.x, p.y) for p in record.points]

        if record.kind == "room":
            item = QGraphicsPolygonItem(QPolygonF(pts))
            pen.setColor(QColor(style.get("color", ROOM_BORDER)))
            item.setPen(pen)
            item.setBrush(QBrush(QColor(style.get("fill", ROOM_FILL))))
            return item

        path = QPainterPath()
        if pts:
            path.moveTo(pts[0])
            for p in pts[1:]:
                path.lineTo(p)
        item = QGraphicsPathItem(path)
        item.setPen(pen)
        return item


# ===== View =====
class PlanView(QGraphicsView):
    scaleChanged = Signal(float)        # m11()
    viewportChanged = Signal(object)    # Viewport, debounced

    def __init__(self, scene: PlanScene, debounce_ms: int = GRID_DEBOUNCE_MS):
        super().__init__(scene)
        self.setRenderHint(QPainter.Antialiasing, True)
        self.setViewportUpdateMode(QGraphicsView.BoundingRectViewportUpdate)
        self.setDragMode(QGraphicsView.NoDrag)
        self.setTransformationAnchor(QGraphicsView.AnchorUnderMouse)
        self.setResizeAnchor(QGraphicsView.AnchorViewCenter)
        self._space_down = False
        self._debounce = QTimer(self)
        self._debounce.setSingleShot(True)
        self._debounce.setInterval(int(debounce_ms))
        self._debounce.timeout.connect(self.emit_viewport)
        self._listeners: List[Callable[[Viewport], None]] = []

    # ---- viewport source ----
    def add_viewport_listener(self, cb: Callable[[Viewport], None]):
        if cb in self._listeners:
            return
        self._listeners.append(cb)
        self.viewportChanged.connect(cb)

    def remove_viewport_listener(self, cb: Callable[[Viewport], None]):
        # Qt warns when disconnecting a slot it never saw
        if cb not in self._listeners:
            logger.debug("Viewport listener was not connected")
            return
        self._listeners.remove(cb)
        self.viewportChanged.disconnect(cb)

    def current_viewport(self) -> Viewport:
        """Viewport as a (zoom, 0, 0, zoom, e, f) transform with the scroll offset folded into e/f."""
        zoom = self.transform().m11()
        origin = self.mapToScene(0, 0)
        vp = self.viewport()
        return Viewport(width=float(vp.width()), height=float(vp.height()),
                        transform=(zoom, 0.0, 0.0, zoom, -origin.x() * zoom, -origin.y() * zoom),
                        zoom=zoom)

    def schedule_viewport_update(self):
        self._debounce.start()

    def emit_viewport(self):
        self._debounce.stop()
        self.viewportChanged.emit(self.current_viewport())

    # ---- events ----
    def scrollContentsBy(self, dx: int, dy: int):
        super().scrollContentsBy(dx, dy)
        self.schedule_viewport_update()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.schedule_viewport_update()

    def wheelEvent(self, event: QWheelEvent):
        if QApplication.keyboardModifiers() & Qt.ControlModifier:
            factor = ZOOM_STEP if event.angleDelta().y() > 0 else 1.0 / ZOOM_STEP
            target = self.transform().m11() * factor
            if ZOOM_MIN <= target <= ZOOM_MAX:
                self.scale(factor, factor)
                self.scaleChanged.emit(self.transform().m11())
                self.schedule_viewport_update()
            event.accept()
            return
        super().wheelEvent(event)

    def keyPressEvent(self, event):
        if event.key() == Qt.Key_Space and not event.isAutoRepeat() and not self._space_down:
            self._space_down = True
            self.setDragMode(QGraphicsView.ScrollHandDrag)
            event.accept()
            return
        super().keyPressEvent(event)

    def keyReleaseEvent(self, event):
        if event.key() == Qt.Key_Space and not event.isAutoRepeat() and self._space_down:
            self._space_down = False
            self.setDragMode(QGraphicsView.NoDrag)
            event.accept()
            return
        super().keyReleaseEvent(event)

    @property
    def panning(self) -> bool:
        return self._space_down
