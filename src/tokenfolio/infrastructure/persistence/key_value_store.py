# src/tokenfolio/infrastructure/persistence/key_value_store.py
# Copyright (c) TokenFolio.
# SPDX-License-Identifier: MIT
"""Persisted key/value stores.

Synopsis:
    Implementations of :class:`KeyValueStore`:

    * :class:`InMemoryKeyValueStore` for tests and throwaway sessions.
    * :class:`JsonFileKeyValueStore` keeping all keys in one JSON object on
      disk, so user state survives across CLI invocations.

Layer:
    infrastructure/persistence
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

from tokenfolio.application.interfaces.key_value_store import KeyValueStore
from tokenfolio.infrastructure.logging.logger import get_json_logger

log = get_json_logger(__name__)


class InMemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed store; contents live as long as the instance."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileKeyValueStore(KeyValueStore):
    """Store backed by a single JSON object file.

    The file is read on every ``get`` and rewritten atomically (temp file +
    ``os.replace``) on every mutation. A missing file reads as empty. A file
    that is not a JSON object is logged and treated as empty; it is replaced
    on the next write.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> str | None:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def delete(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._dump(data)

    def _load(self) -> dict[str, object]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            log.error("state_file.corrupt", extra={"path": str(self._path), "error": str(exc)})
            return {}
        if not isinstance(data, dict):
            log.error("state_file.not_an_object", extra={"path": str(self._path)})
            return {}
        return data

    def _dump(self, data: dict[str, object]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False, indent=2)
            os.replace(tmp, self._path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
