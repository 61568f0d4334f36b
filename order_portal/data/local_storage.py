from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any, Optional

from order_portal.config import get_config
from order_portal.errors import StorageError
from order_portal.logging import get_logger

_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")


class LocalStorage:
    """
    Key/value string store on disk, one file per key.
    - Mirrors the browser ``localStorage`` API (get_item / set_item / remove_item).
    - Values are whole strings; callers serialize JSON themselves or use the *_json helpers.
    - No locking: concurrent writers overwrite each other (last write wins).
    """

    def __init__(self, root: str | Path = None) -> None:
        if root is None:
            root = get_config().storage_dir
        self.root = Path(root)
        self.logger = get_logger(__name__)

    def _path(self, key: str) -> Path:
        return self.root / f"{_SAFE_KEY.sub('_', key)}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Could not read storage key '{key}' from {path}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            tmp.write_text(value, encoding="utf-8")
            os.replace(tmp, path)
        except OSError as e:
            raise StorageError(f"Could not write storage key '{key}' to {path}: {e}") from e

    def remove_item(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Could not remove storage key '{key}': {e}") from e

    # ---------- JSON helpers ----------

    def get_json(self, key: str, default: Any = None) -> Any:
        raw = self.get_item(key)
        if raw is None or not raw.strip():
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Storage key '{key}' does not hold valid JSON: {e}") from e

    def set_json(self, key: str, value: Any) -> None:
        self.set_item(key, json.dumps(value, ensure_ascii=False))
