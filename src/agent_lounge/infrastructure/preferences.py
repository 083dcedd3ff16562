"""PreferenceStore -- key-value scope living outside the engine.

Holds the handful of per-user flags that survive a session (currently only
``onboarding_completed``).  Values are kept in memory and, when a path is
given, mirrored to a small JSON file after every write.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

ONBOARDING_COMPLETED = "onboarding_completed"


class PreferenceStore:
    """Thread-safe key-value preferences.

    Parameters
    ----------
    path:
        Optional JSON file used for persistence.  Loaded on construction if
        it exists; rewritten on every ``set`` / ``delete``.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self._values: dict[str, Any] = {}
        self._lock = threading.Lock()
        self._path = Path(path) if path is not None else None
        if self._path is not None and self._path.exists():
            self._values = self._read(self._path)

    @staticmethod
    def _read(path: Path) -> dict[str, Any]:
        data = json.loads(path.read_text(encoding="utf-8") or "{}")
        if not isinstance(data, dict):
            raise ValueError(f"Preference file {path} must contain a JSON object")
        return data

    def _flush(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(self._values, indent=2), encoding="utf-8")
        logger.debug("PreferenceStore: wrote %d keys to %s", len(self._values), self._path)

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._values[key] = value
            self._flush()

    def delete(self, key: str) -> bool:
        """Remove *key*.  Returns ``True`` if it was present."""
        with self._lock:
            if key not in self._values:
                return False
            del self._values[key]
            self._flush()
            return True

    def get_flag(self, key: str) -> bool:
        return bool(self.get(key, False))

    def to_dict(self) -> dict[str, Any]:
        with self._lock:
            return dict(self._values)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._values

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)
