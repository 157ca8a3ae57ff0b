# src/tracking/data/storage/json_file.py
from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Optional

from src.tracking.data.storage.base import KeyValueStore

log = logging.getLogger("tracking.storage.json_file")


class JsonFileKeyValueStore(KeyValueStore):
    """
    Key-value slots kept in one JSON object on disk:
      {"custom_analytics_charts": "[...]", "demo_orders_last_generated": "2024-01-01"}

    Every write rewrites the whole file via tmp + os.replace.
    An unreadable file is logged and treated as empty.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError) as e:
            log.warning("State file unreadable (%s): %s -> starting empty", self.path, e)
            return {}
        if not isinstance(data, dict):
            log.warning("State file is not an object (%s) -> starting empty", self.path)
            return {}
        return {str(k): str(v) for k, v in data.items() if v is not None}

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        os.replace(tmp, self.path)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = str(value)
            self._write(data)

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)
