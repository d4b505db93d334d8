"""Versioned snapshot envelope and best-effort section persistence.

Every persisted section is wrapped as::

    {"schema_version": 2, "data": {...}}

Unversioned documents are treated as version 1 (camelCase keys, handler
names with a ``Handler`` suffix) and migrated forward on load. Documents
from a newer schema are rejected with SchemaVersionError.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any

from cipher.core.errors import CipherError, PersistenceError, SchemaVersionError
from cipher.core.logging import get_logger
from cipher.state.base import KeyValueStore

_logger = get_logger("state")

SCHEMA_VERSION = 2
LEGACY_SCHEMA_VERSION = 1

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def camel_to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def _snake_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {camel_to_snake(str(k)): _snake_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_snake_keys(v) for v in value]
    return value


def _migrate_v1_to_v2(data: Any) -> Any:
    """Snake-case every key; drop the ``_handler`` suffix from handler names."""
    migrated = _snake_keys(data)
    if isinstance(migrated, dict) and isinstance(migrated.get("handlers"), dict):
        migrated["handlers"] = {
            name.removesuffix("_handler"): stats for name, stats in migrated["handlers"].items()
        }
    return migrated


MIGRATIONS: dict[int, Callable[[Any], Any]] = {
    1: _migrate_v1_to_v2,
}


def wrap(data: Any) -> dict[str, Any]:
    """Wrap section data in the current schema envelope."""
    return {"schema_version": SCHEMA_VERSION, "data": data}


def unwrap(document: Any) -> Any:
    """Return section data at the current schema version.

    Raises:
        SchemaVersionError: If the document is newer than this code supports.
        PersistenceError: If a migration step is missing or fails.
    """
    if isinstance(document, dict) and "schema_version" in document:
        try:
            version = int(document["schema_version"])
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"Invalid schema version: {document['schema_version']!r}") from e
        data = document.get("data")
    else:
        version = LEGACY_SCHEMA_VERSION
        data = document

    if version > SCHEMA_VERSION:
        raise SchemaVersionError(version, SCHEMA_VERSION)

    while version < SCHEMA_VERSION:
        migration = MIGRATIONS.get(version)
        if migration is None:
            raise PersistenceError(f"No migration from schema version {version}")
        try:
            data = migration(data)
        except (AttributeError, TypeError, ValueError) as e:
            raise PersistenceError(f"Migration from schema version {version} failed: {e}") from e
        _logger.info("state_migrated", from_version=version, to_version=version + 1)
        version += 1
    return data


class StatePersistence:
    """Loads and saves named sections without ever raising.

    Persistence failures are logged and the caller carries on with its
    in-memory state.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def load_section(self, key: str) -> dict[str, Any] | None:
        try:
            document = self.store.get(key)
            if document is None:
                return None
            data = unwrap(document)
        except CipherError as e:
            _logger.warning("state_load_failed", key=key, error=str(e))
            return None
        if not isinstance(data, dict):
            _logger.warning("state_section_malformed", key=key, type=type(data).__name__)
            return None
        return data

    def save_section(self, key: str, data: dict[str, Any]) -> bool:
        try:
            self.store.set(key, wrap(data))
        except CipherError as e:
            _logger.error("state_save_failed", key=key, error=str(e))
            return False
        return True
