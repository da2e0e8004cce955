"""KeyValueStore adapters."""

import json
import logging
from pathlib import Path
from typing import Any

from calepin.domain.knowledge.port.store import KeyValueStore

logger = logging.getLogger(__name__)


class MemoryStore(KeyValueStore):
    """Process-local store."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    def get(self, key: str) -> Any | None:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """One JSON file per key inside a directory.

    Unreadable files read as missing; the directory is created on first write.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Any | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable cache file %s: %s", path, e)
            return None

    def set(self, key: str, value: Any) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self.path_for(key).write_text(json.dumps(value, indent=2))

    def delete(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)
