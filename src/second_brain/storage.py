"""
Durable key-value stores backing the persistent state containers.

A store maps a string key to a text payload, the way browser local storage
does. Two implementations are provided:

- InMemoryKeyValueStore: process-local dict, used by tests and the
  `memory` storage backend.
- DirectoryKeyValueStore: one file per key under a directory, written
  atomically; survives process restarts.

Both accept an optional `quota_bytes`; a write that would push the total
payload size past the quota raises StorageQuotaExceeded and leaves the
previous value in place.

Stores also keep an in-process registry of claimed keys so that two
containers can never be bound to the same slot.
"""

import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Set, Union


class StorageError(Exception):
    """Base error for durable store failures."""


class StorageQuotaExceeded(StorageError):
    """Raised when a write would exceed the configured quota."""


class StorageUnavailable(StorageError):
    """Raised when the backing medium cannot be read or written."""


class KeyCollisionError(ValueError):
    """Raised when a second owner claims an already claimed key."""


class KeyValueStore(ABC):
    """Interface for durable key-value persistence."""

    def __init__(self, quota_bytes: Optional[int] = None):
        if quota_bytes is not None and quota_bytes <= 0:
            raise ValueError("quota_bytes must be > 0")
        self.quota_bytes = quota_bytes
        self._claimed: Set[str] = set()

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored text for `key`, or None when absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store `value` under `key`. Raises StorageError on failure."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove `key` if present."""
        pass

    @abstractmethod
    def keys(self) -> Set[str]:
        """Return all stored keys."""
        pass

    def claim(self, key: str) -> None:
        if not key:
            raise ValueError("key is required")
        if key in self._claimed:
            raise KeyCollisionError(f"Key already bound to a container: {key}")
        self._claimed.add(key)

    def release(self, key: str) -> None:
        self._claimed.discard(key)

    def _check_quota(self, key: str, value: str, current_total: int, current_size: int) -> None:
        if self.quota_bytes is None:
            return
        projected = current_total - current_size + len(value.encode("utf-8"))
        if projected > self.quota_bytes:
            raise StorageQuotaExceeded(
                f"Writing {key} would use {projected} bytes (quota {self.quota_bytes})"
            )


class InMemoryKeyValueStore(KeyValueStore):
    """A KeyValueStore that keeps everything in a dict."""

    def __init__(self, initial: Optional[Dict[str, str]] = None, quota_bytes: Optional[int] = None):
        super().__init__(quota_bytes=quota_bytes)
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        total = sum(len(v.encode("utf-8")) for v in self.data.values())
        size = len(self.data[key].encode("utf-8")) if key in self.data else 0
        self._check_quota(key, value, total, size)
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)

    def keys(self) -> Set[str]:
        return set(self.data)


_KEY_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,127}$")


class DirectoryKeyValueStore(KeyValueStore):
    """
    Stores each key as `<directory>/<key>.json`.

    Writes go to a temp file in the same directory followed by os.replace,
    so a crash mid-write never leaves a truncated payload behind.
    """

    SUFFIX = ".json"

    def __init__(self, directory: Union[str, os.PathLike], quota_bytes: Optional[int] = None):
        super().__init__(quota_bytes=quota_bytes)
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key or ""):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}{self.SUFFIX}"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageUnavailable(f"Failed to read {path}") from exc

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            if self.quota_bytes is not None:
                sizes = {p.name: p.stat().st_size for p in self.directory.glob(f"*{self.SUFFIX}")}
                self._check_quota(key, value, sum(sizes.values()), sizes.get(path.name, 0))
            fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(value)
                os.replace(tmp, path)
            except BaseException:
                if os.path.exists(tmp):
                    os.remove(tmp)
                raise
        except OSError as exc:
            raise StorageUnavailable(f"Failed to write {path}") from exc

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise StorageUnavailable(f"Failed to delete {key}") from exc

    def keys(self) -> Set[str]:
        if not self.directory.is_dir():
            return set()
        return {p.name[: -len(self.SUFFIX)] for p in self.directory.glob(f"*{self.SUFFIX}")}
