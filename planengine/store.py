from __future__ import annotations
import json
import logging
import os
import re
from typing import Any, Optional, Protocol

logger = logging.getLogger(__name__)


class Store(Protocol):
    def save(self, key: str, data: Any) -> bool: ...
    def load(self, key: str) -> Optional[Any]: ...
    def delete(self, key: str) -> bool: ...


_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]+")


class JsonFileStore:
    """Key/value store backed by one JSON file per key."""

    def __init__(self, directory: str):
        self.directory = directory

    def path_for(self, key: str) -> str:
        name = _SAFE_KEY.sub("_", key).strip(".") or "_"
        return os.path.join(self.directory, f"{name}.json")

    def save(self, key: str, data: Any) -> bool:
        path = self.path_for(key)
        tmp = path + ".tmp"
        try:
            os.makedirs(self.directory, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, path)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Could not save '{key}' to {path}: {e}")
            if os.path.exists(tmp):
                os.remove(tmp)
            return False

    def load(self, key: str) -> Optional[Any]:
        path = self.path_for(key)
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Could not read '{key}' from {path}: {e}")
            return None

    def delete(self, key: str) -> bool:
        path = self.path_for(key)
        try:
            if os.path.exists(path):
                os.remove(path)
            return True
        except OSError as e:
            logger.warning(f"Could not delete '{key}' ({path}): {e}")
            return False
