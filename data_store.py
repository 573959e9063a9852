from __future__ import annotations

import json
import logging
import os
import tempfile
from typing import Dict, Optional

from settings import CatalogSettings

logger = logging.getLogger(__name__)


class MemoryBlobStore:
    """Keeps blobs in a dict. Nothing survives the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


class JsonFileBlobStore:
    """Preferences-style store: one JSON object of key -> text in a single file."""

    def __init__(self, data_file: str = "watchlist_data.json") -> None:
        self.data_file = data_file

    @classmethod
    def from_settings(cls, settings: CatalogSettings) -> "JsonFileBlobStore":
        return cls(settings.data_file)

    def _read_all(self) -> Dict[str, str]:
        if not os.path.exists(self.data_file):
            return {}
        try:
            with open(self.data_file, "r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable store %s: %s", self.data_file, exc)
            return {}
        if not isinstance(payload, dict):
            return {}
        return {key: value for key, value in payload.items() if isinstance(value, str)}

    def _write_all(self, values: Dict[str, str]) -> None:
        directory = os.path.dirname(self.data_file) or "."
        os.makedirs(directory, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as temp:
                json.dump(values, temp, indent=2, ensure_ascii=False)
            os.replace(temp_path, self.data_file)
        finally:
            if os.path.exists(temp_path):
                os.remove(temp_path)

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        values = self._read_all()
        values[key] = value
        self._write_all(values)

    def delete(self, key: str) -> None:
        values = self._read_all()
        if values.pop(key, None) is not None:
            self._write_all(values)
