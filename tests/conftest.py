"""Shared fixtures for the plan engine tests."""
import os

import pytest

from planengine import MemoryScene, HistoryManager, Point, Room, RoomType, SceneRecord, Stroke

# Qt adapter tests never need a display.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


def rect(x, y, w, h):
    """Axis-aligned rectangle outline, clockwise in screen coordinates."""
    return (Point(x, y), Point(x + w, y), Point(x + w, y + h), Point(x, y + h))


@pytest.fixture
def scene():
    return MemoryScene()


@pytest.fixture
def history(scene):
    return HistoryManager(scene)


@pytest.fixture
def square_room():
    """2 m x 2 m internal room at 100 px/m."""
    return Room(id="r1", name="Kitchen", points=rect(0, 0, 200, 200))


@pytest.fixture
def mixed_rooms(square_room):
    return [
        square_room,
        Room(id="r2", name="Hall", points=rect(200, 0, 100, 300)),
        Room(id="r3", name="Patio", points=rect(0, 300, 500, 500), type=RoomType.EXTERNAL),
        Room(id="r4", name="Stairwell", points=rect(300, 0, 50, 50), type=RoomType.EXCLUDED),
    ]


def add_stroke(scene, *xy):
    """Add a stroke record built from flat x, y pairs and return it."""
    pts = tuple(Point(xy[i], xy[i + 1]) for i in range(0, len(xy), 2))
    rec = SceneRecord.from_stroke(Stroke(pts))
    scene.add(rec)
    return rec
