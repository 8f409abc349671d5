from __future__ import annotations
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from .models import ConfigError
from .scene import Scene
from .state import SceneState, SceneSnapshot
from .store import Store
from .utils import MAX_HISTORY_STATES

logger = logging.getLogger(__name__)


class HistoryManager:
    """Bounded undo/redo over drawing-layer snapshots.

    ``past`` holds the states to go back to (most recent last), ``future``
    the states undone. Both stacks stay within ``max_states``. Grid records
    never enter a snapshot and are never touched by a restore.

    ``on_restore`` runs after every undo/redo (area recalculation);
    ``on_change`` runs after any stack change (toolbar state).
    """

    def __init__(self, scene: Scene, max_states: int = MAX_HISTORY_STATES,
                 on_restore: Optional[Callable[[], None]] = None,
                 on_change: Optional[Callable[[], None]] = None):
        if max_states < 0:
            raise ConfigError(f"max_states must be >= 0, got {max_states}")
        self.scene = scene
        self.max_states = int(max_states)
        self.on_restore = on_restore
        self.on_change = on_change
        self._past: List[SceneSnapshot] = []
        self._future: List[SceneSnapshot] = []
        self._restoring = False

    # ---- queries ----
    @property
    def past(self) -> List[SceneSnapshot]:
        return list(self._past)

    @property
    def future(self) -> List[SceneSnapshot]:
        return list(self._future)

    def can_undo(self) -> bool:
        return bool(self._past)

    def can_redo(self) -> bool:
        return bool(self._future)

    def is_empty(self) -> bool:
        return not self._past and not self._future

    def top(self) -> Optional[SceneSnapshot]:
        return self._past[-1] if self._past else None

    # ---- mutations ----
    def record(self, snapshot: Optional[Sequence[Dict[str, Any]]] = None) -> bool:
        """Push the state to return to (usually captured right before an edit) and drop redo."""
        if self._restoring:
            return False
        snap = SceneState.capture(self.scene) if snapshot is None else tuple(snapshot)
        if self._past and self._past[-1] == snap:
            # nothing new to push, but a fresh edit still invalidates redo
            if self._future:
                self._future.clear()
                self._changed()
            return False
        self._past.append(snap)
        self._future.clear()
        self._trim(self._past)
        logger.debug(f"Snapshot recorded ({len(snap)} objects, {len(self._past)} in history)")
        self._changed()
        return True

    def undo(self) -> bool:
        return self._step(self._past, self._future, "undo")

    def redo(self) -> bool:
        return self._step(self._future, self._past, "redo")

    def clear(self):
        self._past.clear()
        self._future.clear()
        logger.info("History cleared")
        self._changed()

    def _step(self, source: List[SceneSnapshot], target: List[SceneSnapshot], label: str) -> bool:
        if self._restoring:
            logger.warning(f"Ignoring {label}: a restore is already in progress")
            return False
        if not source:
            return False
        self._restoring = True
        try:
            current = SceneState.capture(self.scene)
            snap = source[-1]
            SceneState.restore(self.scene, snap)
            source.pop()
            target.append(current)
            self._trim(target)
        finally:
            self._restoring = False
        logger.debug(f"{label}: restored {len(snap)} objects")
        if self.on_restore:
            self.on_restore()
        self._changed()
        return True

    def _trim(self, stack: List[SceneSnapshot]):
        overflow = len(stack) - self.max_states
        if overflow > 0:
            del stack[:overflow]

    def _changed(self):
        if self.on_change:
            self.on_change()

    # ---- persistence ----
    def save(self, store: Store, key: str) -> bool:
        data = {
            "past": [list(s) for s in self._past[-self.max_states:]] if self.max_states else [],
            "future": [list(s) for s in self._future[-self.max_states:]] if self.max_states else [],
        }
        ok = store.save(key, data)
        if ok:
            logger.debug(f"History saved under '{key}'")
        return ok

    def load(self, store: Store, key: str) -> bool:
        data = store.load(key)
        if data is None:
            return False
        try:
            past = [tuple(dict(d) for d in s) for s in data["past"]]
            future = [tuple(dict(d) for d in s) for s in data["future"]]
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"History under '{key}' is malformed: {e}")
            return False
        self._past = past
        self._future = future
        self._trim(self._past)
        self._trim(self._future)
        logger.info(f"History loaded from '{key}': {len(self._past)} undo / {len(self._future)} redo")
        self._changed()
        return True

    def forget(self, store: Store, key: str) -> bool:
        return store.delete(key)
