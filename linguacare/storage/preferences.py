"""JSON-backed key/value store for user preferences."""

import json
import logging
import threading
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class PreferenceStore:
    """Persistent string key/value pairs, kept in memory when no path is given."""

    def __init__(self, path: Optional[str] = None):
        """Initialize the store.

        Args:
            path: JSON file to persist to; None keeps values in memory only
        """
        self.path = Path(path) if path else None
        self._lock = threading.Lock()
        self._values: Dict[str, str] = self._load()

    def _load(self) -> Dict[str, str]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading preferences from {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed preferences file: {self.path}")
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(self._values, f, indent=2, ensure_ascii=False)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with self._lock:
            return self._values.get(key, default)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value
            self._save()
        logger.debug(f"Preference '{key}' set to: {value}")

    def remove(self, key: str) -> None:
        with self._lock:
            if self._values.pop(key, None) is not None:
                self._save()
