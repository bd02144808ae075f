"""Key/value persistence standing in for the browser's local storage."""
import copy
import json
import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Union


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[Any]: ...

    def set_item(self, key: str, value: Any) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = copy.deepcopy(initial) if initial else {}
        self._lock = threading.Lock()

    def get_item(self, key: str) -> Optional[Any]:
        with self._lock:
            return copy.deepcopy(self._data.get(key))

    def set_item(self, key: str, value: Any) -> None:
        value = copy.deepcopy(value)
        with self._lock:
            self._data[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self):
        with self._lock:
            return list(self._data)


class FileStorage:
    """All keys live in one JSON document; every write rewrites the file.

    Stores and scheduled cleanups may write from different threads, so reads
    and writes are serialised on one lock.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.RLock()
        self._data = self._load()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (json.JSONDecodeError, ValueError):
            # A corrupted file starts a fresh session.
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as fh:
            json.dump(self._data, fh, default=str)
        os.replace(tmp, self.path)
        os.chmod(self.path, 0o600)

    def get_item(self, key: str) -> Optional[Any]:
        with self._lock:
            return copy.deepcopy(self._data.get(key))

    def set_item(self, key: str, value: Any) -> None:
        value = json.loads(json.dumps(value, default=str))
        with self._lock:
            self._data[key] = value
            self._save()

    def remove_item(self, key: str) -> None:
        with self._lock:
            if key in self._data:
                del self._data[key]
                self._save()

    def keys(self):
        with self._lock:
            return list(self._data)
