"""JSON file-based key-value store.

All keys live in one JSON object on disk. Writes go to a temp file that is
then renamed over the target, so a crash never leaves a half-written file.
"""

import json
import os
from pathlib import Path
from typing import Any

from cipher.core.errors import PersistenceError
from cipher.core.logging import get_logger
from cipher.state.base import KeyValueStore

_logger = get_logger("state")


class JsonFileStore(KeyValueStore):
    """JSON file-backed store.

    The file is read lazily on first access and cached; every ``set`` rewrites
    the whole document atomically.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._data: dict[str, Any] | None = None

    def _load(self) -> dict[str, Any]:
        if self._data is not None:
            return self._data
        if not self.path.exists():
            self._data = {}
            return self._data
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Failed to read state from {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise PersistenceError(f"State file {self.path} does not contain a JSON object")
        self._data = data
        return self._data

    def get(self, key: str) -> Any | None:
        return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        try:
            data = self._load()
        except PersistenceError:
            # Unreadable file is replaced rather than blocking all saves
            _logger.warning("state_file_unreadable_overwriting", path=str(self.path))
            data = {}
            self._data = data
        data[key] = value
        self._write(data)

    def keys(self) -> list[str]:
        return list(self._load())

    def _write(self, data: dict[str, Any]) -> None:
        temp_file = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, default=str)
            os.replace(temp_file, self.path)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Failed to write state to {self.path}: {e}") from e
