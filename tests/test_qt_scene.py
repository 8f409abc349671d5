"""Tests for the PySide6 scene adapter (offscreen)."""
import warnings

import pytest

pytest.importorskip("PySide6.QtWidgets")

from PySide6.QtCore import QCoreApplication, QEvent
from PySide6.QtWidgets import QApplication, QGraphicsLineItem, QGraphicsPathItem, QGraphicsPolygonItem

from planengine import GridRenderer, HistoryManager, Scene, SceneRecord, Viewport
from planengine.qt_scene import PlanScene, PlanView
from planengine.utils import GRID_Z
from conftest import add_stroke


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def plan_scene(qapp):
    """A PlanScene torn down with every view attached to it."""
    scene = PlanScene()
    yield scene
    for view in scene.views():
        view.setScene(None)
        view.deleteLater()
    scene.clear()
    scene.deleteLater()
    qapp.processEvents()
    QCoreApplication.sendPostedEvents(None, QEvent.Type.DeferredDelete)


class TestPlanScene:
    def test_satisfies_protocol(self, plan_scene):
        assert isinstance(plan_scene, Scene)

    def test_item_types(self, plan_scene, square_room):
        line = add_stroke(plan_scene, 0, 0, 10, 0)
        room = SceneRecord.from_room(square_room)
        plan_scene.add(room)
        grid = GridRenderer(plan_scene)
        grid.update_grid(Viewport(200, 200))
        assert isinstance(plan_scene.item_for(line), QGraphicsPathItem)
        assert isinstance(plan_scene.item_for(room), QGraphicsPolygonItem)
        g = plan_scene.get_objects(grid=True)[0]
        assert isinstance(plan_scene.item_for(g), QGraphicsLineItem)

    def test_grid_items_sit_behind_drawing(self, plan_scene):
        stroke = add_stroke(plan_scene, 0, 0, 10, 0)
        GridRenderer(plan_scene).update_grid(Viewport(200, 200))
        drawing_z = plan_scene.item_for(stroke).zValue()
        for rec in plan_scene.get_objects(grid=True):
            z = plan_scene.item_for(rec).zValue()
            assert GRID_Z <= z < drawing_z

    def test_layers_and_remove(self, plan_scene):
        a = add_stroke(plan_scene, 0, 0, 10, 0)
        b = add_stroke(plan_scene, 0, 5, 10, 5)
        assert plan_scene.get_objects(grid=False) == [a, b]
        plan_scene.remove(a)
        assert plan_scene.get_objects(grid=False) == [b]
        assert plan_scene.item_for(a) is None
        assert len(plan_scene.items()) == 1
        plan_scene.remove(a)

    def test_record_for_item(self, plan_scene):
        a = add_stroke(plan_scene, 0, 0, 10, 0)
        assert plan_scene.record_for(plan_scene.item_for(a)) is a

    def test_undo_keeps_grid_items(self, plan_scene):
        GridRenderer(plan_scene).update_grid(Viewport(300, 300))
        grid_items = {id(plan_scene.item_for(r)) for r in plan_scene.get_objects(grid=True)}
        history = HistoryManager(plan_scene)
        history.record()
        add_stroke(plan_scene, 0, 0, 10, 0)
        history.record()
        add_stroke(plan_scene, 0, 5, 10, 5)
        history.undo()
        history.undo()
        history.redo()
        assert len(plan_scene.get_objects(grid=False)) == 1
        assert {id(plan_scene.item_for(r)) for r in plan_scene.get_objects(grid=True)} == grid_items


class TestPlanView:
    def test_viewport_listener(self, plan_scene):
        view = PlanView(plan_scene, debounce_ms=0)
        view.resize(400, 300)
        got = []

        def listener(v):
            got.append(v)

        view.add_viewport_listener(listener)
        view.emit_viewport()
        assert len(got) == 1 and isinstance(got[0], Viewport)
        assert got[0].zoom == pytest.approx(1.0)
        view.remove_viewport_listener(listener)
        view.emit_viewport()
        assert len(got) == 1

    def test_remove_unknown_listener_is_harmless(self, plan_scene):
        view = PlanView(plan_scene)
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            view.remove_viewport_listener(lambda v: None)

    def test_listener_removed_twice_is_quiet(self, plan_scene):
        view = PlanView(plan_scene, debounce_ms=0)
        grid = GridRenderer(plan_scene)
        view.add_viewport_listener(grid.on_viewport_changed)
        view.add_viewport_listener(grid.on_viewport_changed)
        view.remove_viewport_listener(grid.on_viewport_changed)
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            view.remove_viewport_listener(grid.on_viewport_changed)
        count = grid.generation_count
        view.resize(300, 200)
        view.emit_viewport()
        assert grid.generation_count == count

    def test_viewport_matches_visible_scene_rect(self, plan_scene):
        view = PlanView(plan_scene)
        view.resize(400, 300)
        view.scale(2.0, 2.0)
        view.centerOn(0, 0)
        v = view.current_viewport()
        assert v.zoom == pytest.approx(2.0)
        origin = view.mapToScene(0, 0)
        assert -v.transform[4] / v.zoom == pytest.approx(origin.x())
        assert -v.transform[5] / v.zoom == pytest.approx(origin.y())

    def test_grid_follows_view(self, plan_scene):
        view = PlanView(plan_scene, debounce_ms=0)
        view.resize(400, 300)
        grid = GridRenderer(plan_scene)
        grid.attach(view)
        view.emit_viewport()
        assert grid.generation_count == 1
        grid.destroy()
        view.emit_viewport()
        assert grid.generation_count == 1
        assert plan_scene.get_objects(grid=True) == []
