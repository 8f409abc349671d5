#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations
import sys, os, json, uuid, logging
from typing import List, Optional

from PySide6.QtCore import Qt, QPointF
from PySide6.QtGui import QAction, QActionGroup, QKeySequence, QPen, QColor, QPainterPath
from PySide6.QtWidgets import (
    QApplication, QMainWindow, QToolBar, QStatusBar, QFileDialog, QMessageBox,
    QComboBox, QLabel, QGraphicsPathItem
)

from planengine import (Point, Stroke, Room, RoomType, DrawingMode, SceneRecord, SceneState,
                        HistoryManager, GridRenderer, GridConfig, JsonFileStore,
                        clean_stroke, straighten_polygon, is_valid_polygon, distance,
                        calculate_gia, rooms_from_scene, format_area, setup_logging,
                        SHAPE_CLOSE_THRESHOLD)
from planengine.qt_scene import PlanScene, PlanView

logger = logging.getLogger("planengine.editor")

AUTOSAVE_DIR = os.path.join(os.path.expanduser("~"), ".floorplan_editor")
HISTORY_KEY = "history"
SCENE_KEY = "scene"


# ===== Drawing view =====
class EditorView(PlanView):
    """PlanView with the pointer tools. Finished gestures go to the window callbacks."""

    def __init__(self, scene: PlanScene, on_stroke, on_room):
        super().__init__(scene)
        self.mode = DrawingMode.DRAW
        self._on_stroke = on_stroke
        self._on_room = on_room
        self._points: List[Point] = []
        self._preview: Optional[QGraphicsPathItem] = None

    def set_mode(self, mode: str):
        self.mode = mode
        self._cancel()

    # ---- preview ----
    def _update_preview(self, extra: Optional[Point] = None):
        pts = self._points + ([extra] if extra else [])
        path = QPainterPath()
        if pts:
            path.moveTo(QPointF(pts[0].x, pts[0].y))
            for p in pts[1:]:
                path.lineTo(QPointF(p.x, p.y))
        if self._preview is None:
            self._preview = QGraphicsPathItem()
            pen = QPen(QColor("#2563EB"), 1.5, Qt.DashLine); pen.setCosmetic(True)
            self._preview.setPen(pen)
            self._preview.setZValue(10_000)
            self.scene().addItem(self._preview)
        self._preview.setPath(path)

    def _cancel(self):
        self._points = []
        if self._preview is not None:
            self.scene().removeItem(self._preview)
            self._preview = None

    def _scene_point(self, event) -> Point:
        sp = self.mapToScene(event.position().toPoint())
        return Point(sp.x(), sp.y())

    # ---- mouse ----
    def mousePressEvent(self, event):
        if self.panning or event.button() != Qt.LeftButton or self.mode == DrawingMode.SELECT:
            return super().mousePressEvent(event)
        p = self._scene_point(event)
        if self.mode == DrawingMode.ROOM:
            if len(self._points) >= 3 and distance(p, self._points[0]) <= SHAPE_CLOSE_THRESHOLD:
                self._finish_room()
            else:
                self._points.append(p); self._update_preview()
        else:
            self._points = [p]; self._update_preview()
        event.accept()

    def mouseMoveEvent(self, event):
        if self._points and not self.panning:
            p = self._scene_point(event)
            if self.mode == DrawingMode.ROOM:
                self._update_preview(p)
            elif event.buttons() & Qt.LeftButton:
                if self.mode == DrawingMode.STRAIGHT_LINE:
                    self._points = [self._points[0], p]
                else:
                    self._points.append(p)
                self._update_preview()
            event.accept()
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event):
        if self.mode in (DrawingMode.DRAW, DrawingMode.STRAIGHT_LINE) and self._points \
                and event.button() == Qt.LeftButton:
            pts = self._points
            self._cancel()
            if len(pts) >= 2:
                self._on_stroke(pts)
            event.accept()
            return
        super().mouseReleaseEvent(event)

    def mouseDoubleClickEvent(self, event):
        if self.mode == DrawingMode.ROOM and len(self._points) >= 3:
            self._finish_room()
            event.accept()
            return
        super().mouseDoubleClickEvent(event)

    def keyPressEvent(self, event):
        if event.key() == Qt.Key_Escape and self._points:
            self._cancel(); event.accept(); return
        super().keyPressEvent(event)

    def _finish_room(self):
        pts = self._points
        self._cancel()
        self._on_room(pts)


# ===== Main window =====
class MainWindow(QMainWindow):
    def __init__(self, autosave_dir: str = AUTOSAVE_DIR):
        super().__init__()
        self.setWindowTitle("Floor Plan Editor")
        self.resize(1280, 860)

        # 1) Scene/view
        self.scene = PlanScene()
        self.view = EditorView(self.scene, on_stroke=self._add_stroke, on_room=self._add_room)
        self.setCentralWidget(self.view)

        # 2) Engine
        self.store = JsonFileStore(autosave_dir)
        self.history = HistoryManager(self.scene, on_restore=self._update_area,
                                      on_change=self._update_actions)
        self.grid = GridRenderer(self.scene, GridConfig())

        # 3) Toolbar/status
        self._build_toolbar()
        self.setStatusBar(QStatusBar(self))
        self.area_label = QLabel()
        self.statusBar().addPermanentWidget(self.area_label)
        self.view.scaleChanged.connect(lambda s: self._status(f"Zoom: {int(s * 100)}%"))

        # 4) Start state
        self._restore_session()
        self.grid.attach(self.view)
        self.view.centerOn(0, 0)
        self.view.schedule_viewport_update()
        self._update_area()
        self._update_actions()

    def _build_toolbar(self):
        tb = QToolBar("Tools", self)
        tb.setMovable(False)
        tb.setToolButtonStyle(Qt.ToolButtonTextOnly)
        self.addToolBar(Qt.TopToolBarArea, tb)

        # ----- tools -----
        group = QActionGroup(self)
        for mode, title in ((DrawingMode.SELECT, "Select"), (DrawingMode.DRAW, "Freehand"),
                            (DrawingMode.STRAIGHT_LINE, "Line"), (DrawingMode.ROOM, "Room")):
            act = QAction(title, self, checkable=True)
            act.setChecked(mode == self.view.mode)
            act.triggered.connect(lambda _=False, m=mode: self.view.set_mode(m))
            group.addAction(act); tb.addAction(act)

        self.room_type = QComboBox(self)
        for rt in RoomType:
            self.room_type.addItem(rt.value.capitalize(), rt)
        tb.addWidget(self.room_type)
        tb.addSeparator()

        # ----- edit -----
        self.act_undo = QAction("Undo", self)
        self.act_undo.setShortcut(QKeySequence("Ctrl+Z"))
        self.act_undo.triggered.connect(self._undo)

        self.act_redo = QAction("Redo", self)
        self.act_redo.setShortcut(QKeySequence("Ctrl+Y"))
        self.act_redo.triggered.connect(self._redo)

        self.act_clear = QAction("Clear", self)
        self.act_clear.triggered.connect(self._clear_drawing)

        self.act_grid = QAction("Grid", self, checkable=True)
        self.act_grid.setChecked(True)
        self.act_grid.toggled.connect(self._toggle_grid)

        # ----- project -----
        self.act_open = QAction("Open…", self)
        self.act_open.setShortcut(QKeySequence("Ctrl+O"))
        self.act_open.triggered.connect(self._open_project_dialog)

        self.act_save = QAction("Save…", self)
        self.act_save.setShortcut(QKeySequence("Ctrl+S"))
        self.act_save.triggered.connect(self._save_project_dialog)

        for act in (self.act_undo, self.act_redo, self.act_clear, self.act_grid):
            tb.addAction(act)
        tb.addSeparator()
        tb.addAction(self.act_open); tb.addAction(self.act_save)

    # ---- edits (history is recorded before every change) ----
    def _add_stroke(self, points: List[Point]):
        cleaned = clean_stroke(points)
        if len(cleaned) < 2:
            return
        self.history.record()
        self.scene.add(SceneRecord.from_stroke(Stroke(tuple(cleaned))))
        self.scene.request_render()

    def _add_room(self, points: List[Point]):
        outline = straighten_polygon(points)
        if not is_valid_polygon(outline):
            self._status("Room outline has no area, ignored.")
            return
        n = len(rooms_from_scene(self.scene)) + 1
        room = Room(id=uuid.uuid4().hex, points=tuple(outline), name=f"Room {n}",
                    type=self.room_type.currentData())
        self.history.record()
        self.scene.add(SceneRecord.from_room(room))
        self.scene.request_render()
        self._update_area()

    def _clear_drawing(self):
        if not self.scene.get_objects(grid=False):
            return
        self.history.record()
        SceneState.clear_drawing(self.scene)
        self.scene.request_render()
        self._update_area()

    def _undo(self):
        if self.history.undo():
            self._status("Undo")

    def _redo(self):
        if self.history.redo():
            self._status("Redo")

    def _toggle_grid(self, on: bool):
        if on:
            self.grid.attach(self.view)
            self.grid.update_grid(self.view.current_viewport())
        else:
            self.grid.destroy()

    # ---- project files ----
    def _open_project_dialog(self):
        path, _ = QFileDialog.getOpenFileName(self, "Open plan", "", "Floor plan (*.json)")
        if not path:
            return
        try:
            with open(path, "r", encoding="utf-8") as f:
                snapshot = SceneState.loads(f.read())
        except (OSError, ValueError) as e:
            logger.error(f"Could not open {path}: {e}")
            QMessageBox.critical(self, "Open failed", str(e))
            return
        SceneState.restore(self.scene, snapshot)
        self.history.clear()
        self._update_area()
        self._status(f"Opened: {os.path.basename(path)}")

    def _save_project_dialog(self):
        path, _ = QFileDialog.getSaveFileName(self, "Save plan", "plan.json", "Floor plan (*.json)")
        if not path:
            return
        if not path.lower().endswith(".json"):
            path += ".json"
        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(list(SceneState.capture(self.scene)), f, ensure_ascii=False, indent=2)
            self._status(f"Saved: {os.path.basename(path)}")
        except OSError as e:
            logger.error(f"Could not save {path}: {e}")
            QMessageBox.critical(self, "Save failed", str(e))

    # ---- autosave ----
    def _restore_session(self):
        snapshot = self.store.load(SCENE_KEY)
        if isinstance(snapshot, list):
            SceneState.restore(self.scene, snapshot)
            self.history.load(self.store, HISTORY_KEY)

    def closeEvent(self, event):
        self.store.save(SCENE_KEY, list(SceneState.capture(self.scene)))
        self.history.save(self.store, HISTORY_KEY)
        self.grid.destroy()
        super().closeEvent(event)

    # ---- status ----
    def _update_area(self):
        gia = calculate_gia(rooms_from_scene(self.scene))
        if gia["isValid"]:
            self.area_label.setText(f"GIA: {format_area(gia['areaM2'])} ({len(gia['rooms'])} rooms)")
        else:
            self.area_label.setText(f"GIA: {gia['errorMessage']}")

    def _update_actions(self):
        self.act_undo.setEnabled(self.history.can_undo())
        self.act_redo.setEnabled(self.history.can_redo())

    def _status(self, text: str):
        self.statusBar().showMessage(text, 3000)


def main():
    setup_logging(logging.DEBUG if "--debug" in sys.argv else logging.INFO)
    app = QApplication(sys.argv)
    win = MainWindow()
    win.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
