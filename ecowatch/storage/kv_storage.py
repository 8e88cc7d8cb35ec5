"""
Durable key-value storage for the EcoWatch sync client
Values are strings, like browser local storage
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional
import logging

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Key-value persistence port"""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value or None"""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one"""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete a key; missing keys are ignored"""


class MemoryKeyValueStore(KeyValueStore):
    """In-process store, lost on exit"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JSONFileKeyValueStore(KeyValueStore):
    """Store backed by a single JSON object file"""

    def __init__(self, file_path: Path):
        self.file_path = Path(file_path)
        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Could not create storage directory {self.file_path.parent}: {e}")

    def _read_json(self) -> Dict[str, str]:
        """Read the whole store from disk"""
        if not self.file_path.exists():
            return {}

        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Error reading {self.file_path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.error(f"Ignoring non-object storage file {self.file_path}")
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write_json(self, data: Dict[str, str]) -> bool:
        """Write the whole store to disk"""
        try:
            with open(self.file_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            return True
        except OSError as e:
            logger.error(f"Error writing {self.file_path}: {e}")
            return False

    def get(self, key: str) -> Optional[str]:
        return self._read_json().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_json()
        data[key] = value
        self._write_json(data)

    def remove(self, key: str) -> None:
        data = self._read_json()
        if key in data:
            del data[key]
            self._write_json(data)
