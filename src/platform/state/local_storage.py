"""
Local Storage

Browser-style string key/value store for non-critical client state
(event list cache, form drafts, offline snapshot, anonymous user id).

Values are strings, exactly like window.localStorage; callers serialize
JSON themselves. When a path is given the whole store is persisted to one
JSON file on every write (write to a temp file, then atomic replace).
"""

import os
from pathlib import Path
from typing import Any, Optional

import orjson

from src.platform.logging.loguru_io import Logger


class LocalStorage:
    def __init__(self, *, path: Optional[Path] = None) -> None:
        self._path = Path(path) if path else None
        self._items: dict[str, str] = self._load()

    def _load(self) -> dict[str, str]:
        if self._path is None or not self._path.exists():
            return {}
        try:
            data = orjson.loads(self._path.read_bytes())
        except (OSError, orjson.JSONDecodeError) as e:
            Logger.base.warning(f'⚠️ [STORAGE] Ignoring unreadable storage file {self._path}: {e}')
            return {}
        if not isinstance(data, dict):
            Logger.base.warning(f'⚠️ [STORAGE] Ignoring malformed storage file {self._path}')
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _flush(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + '.tmp')
        tmp_path.write_bytes(orjson.dumps(self._items, option=orjson.OPT_SORT_KEYS))
        os.replace(tmp_path, self._path)

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value
        self._flush()

    def remove_item(self, key: str) -> None:
        if self._items.pop(key, None) is not None:
            self._flush()

    def clear(self) -> None:
        self._items.clear()
        self._flush()

    def keys(self) -> list[str]:
        return list(self._items)

    # JSON helpers

    def get_json(self, key: str) -> Any:
        """Decoded JSON value, or None when missing; corrupt JSON raises orjson.JSONDecodeError"""
        raw = self.get_item(key)
        if raw is None:
            return None
        return orjson.loads(raw)

    def set_json(self, key: str, value: Any) -> None:
        self.set_item(key, orjson.dumps(value).decode())
