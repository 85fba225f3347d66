from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

"""
Tiny on-disk JSON key/value store.

This is the client's stand-in for device-local storage:
- one JSON object per file, keys are plain strings;
- reads are best-effort (a missing or corrupt file reads as empty);
- writes go through a temporary file + atomic replace so a crash never leaves
  a half-written state file behind.
"""

logger = logging.getLogger(__name__)


class JsonKeyValueStore:
    """A filesystem-backed key/value store holding JSON-serializable values."""

    def __init__(self, path: Path):
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.debug("Ignoring unreadable state file %s: %s", self._path, e)
            return {}
        if not isinstance(raw, dict):
            logger.debug("Ignoring state file %s: root is not an object", self._path)
            return {}
        return raw

    def get(self, key: str, default: Any = None) -> Any:
        """Read one value; returns `default` when missing or unreadable."""
        return self._read_all().get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Write one value (atomic whole-file replace)."""
        self.update({key: value})

    def update(self, values: dict[str, Any]) -> None:
        """Write several values in one atomic replace; `None` values delete the key."""
        data = self._read_all()
        for key, value in values.items():
            if value is None:
                data.pop(key, None)
            else:
                data[key] = value

        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(self._path)
