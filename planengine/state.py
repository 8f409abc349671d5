from __future__ import annotations
import json
import logging
from typing import Any, Dict, List, Sequence, Tuple

from .models import SceneRecord, Room
from .scene import Scene

logger = logging.getLogger(__name__)

# A snapshot is the ordered, serialized drawing layer: ({type, geometry, style}, ...)
SceneSnapshot = Tuple[Dict[str, Any], ...]


class SceneState:
    """Serialize the drawing layer of a scene and put it back. The grid layer is never read or written."""

    @staticmethod
    def capture(scene: Scene) -> SceneSnapshot:
        return tuple(rec.to_dict() for rec in scene.get_objects(grid=False))

    @staticmethod
    def clear_drawing(scene: Scene) -> int:
        items = scene.get_objects(grid=False)
        for rec in items:
            scene.remove(rec)
        return len(items)

    @staticmethod
    def restore(scene: Scene, snapshot: Sequence[Dict[str, Any]]) -> List[SceneRecord]:
        records = []
        for data in snapshot:
            try:
                records.append(SceneRecord.from_dict(data))
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping unreadable snapshot entry {data!r}: {e}")
        SceneState.clear_drawing(scene)
        for rec in records:
            scene.add(rec)
        scene.request_render()
        return records

    @staticmethod
    def dumps(snapshot: Sequence[Dict[str, Any]]) -> str:
        return json.dumps(list(snapshot), ensure_ascii=False)

    @staticmethod
    def loads(text: str) -> SceneSnapshot:
        data = json.loads(text)
        if not isinstance(data, list):
            raise ValueError("Snapshot must be a JSON array")
        return tuple(dict(d) for d in data)


def rooms_from_scene(scene: Scene) -> List[Room]:
    rooms = []
    for rec in scene.get_objects(grid=False):
        room = rec.to_room()
        if room is not None:
            rooms.append(room)
    return rooms
