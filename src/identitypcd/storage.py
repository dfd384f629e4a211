"""
Key-value storage for the persisted session.

The session only needs get/set/delete on a single key. MemoryStorage
suits tests and short-lived processes; FileStorage keeps the session
across restarts in a small JSON file.
"""

import base64
import json
import logging
import os
from typing import Dict, Optional, Protocol


logger = logging.getLogger(__name__)

# The single slot holding the current session
SESSION_KEY = "identity-pcd:session"


class SessionStorage(Protocol):
    def get(self, key: str) -> Optional[bytes]:
        ...

    def set(self, key: str, value: bytes) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class MemoryStorage:
    """In-process storage backed by a dict."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self._data: Dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._data[key] = bytes(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class FileStorage:
    """
    Storage persisted to a JSON file.

    Values are stored base64-encoded. Every set() and delete() rewrites
    the file through a temporary file and os.replace(). A file that
    cannot be read is treated as empty.
    """

    def __init__(self, path: str):
        self.path = path
        self._data = self._load()

    def _load(self) -> Dict[str, bytes]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            return {str(k): base64.b64decode(v, validate=True) for k, v in raw.items()}
        except (OSError, ValueError, AttributeError, TypeError) as e:
            logger.warning("Ignoring unreadable storage file %s: %s", self.path, e)
            return {}

    def _save(self) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        tmp_path = self.path + ".tmp"
        encoded = {k: base64.b64encode(v).decode("ascii") for k, v in self._data.items()}
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(encoded, f, indent=2)
        os.replace(tmp_path, self.path)

    def get(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._data[key] = bytes(value)
        self._save()

    def delete(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._save()
