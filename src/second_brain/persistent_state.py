"""
Persistent State Container: in-memory value mirrored to a durable store.

Lifecycle:
    UNHYDRATED --hydrate()--> HYDRATING --read resolved--> HYDRATED

- Construction only allocates the in-memory value; the store is not touched.
- hydrate() reads the key once. A stored value replaces the in-memory one;
  an absent, empty or unreadable payload keeps it. Either way the container
  ends up HYDRATED and mirrors its current value back to the store.
- replace() before HYDRATED is never written (not queued either), so a fresh
  default can not overwrite a previously saved value.
- Store failures are logged and swallowed: the in-memory value is authoritative.

Usage:
    notes = PersistentStateContainer("second-brain-notes", [], store, value_type=List[Note])
    await notes.hydrate()
    notes.replace([new_note, *notes.read()])
"""

import asyncio
import copy
import enum
import json
from typing import Any, Generic, Optional, TypeVar

from pydantic import TypeAdapter, ValidationError

from src.second_brain.logging_setup import get_logger
from src.second_brain.storage import KeyValueStore, StorageError

log = get_logger(__name__)

T = TypeVar("T")


class HydrationPhase(str, enum.Enum):
    UNHYDRATED = "unhydrated"
    HYDRATING = "hydrating"
    HYDRATED = "hydrated"


class PersistentStateContainer(Generic[T]):
    """Durable state cell bound to one key of a KeyValueStore."""

    def __init__(self, key: str, initial: T, store: KeyValueStore, value_type: Optional[Any] = None) -> None:
        store.claim(key)
        self.key = key
        self.store = store
        self._initial = initial
        self._value: T = initial
        self._phase = HydrationPhase.UNHYDRATED
        self._adapter: Optional[TypeAdapter] = TypeAdapter(value_type) if value_type is not None else None
        self._task: Optional[asyncio.Task] = None

    @property
    def phase(self) -> HydrationPhase:
        return self._phase

    @property
    def hydrated(self) -> bool:
        return self._phase is HydrationPhase.HYDRATED

    # -------- Serialization --------
    def serialize(self, value: T) -> str:
        if self._adapter is not None:
            return self._adapter.dump_json(value, by_alias=True).decode("utf-8")
        return json.dumps(value)

    def deserialize(self, text: str) -> T:
        if self._adapter is not None:
            return self._adapter.validate_json(text)
        return json.loads(text)

    # -------- Lifecycle --------
    def attach(self) -> asyncio.Task:
        """Schedule hydration on the running loop; returns the (shared) task."""
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self._load())
        return self._task

    async def hydrate(self) -> None:
        """Wait until the stored value has been read; safe to call from several awaiters."""
        if self._phase is HydrationPhase.HYDRATED:
            return
        await self.attach()

    async def _load(self) -> None:
        self._phase = HydrationPhase.HYDRATING
        # Let callers issued right after attach() run against the default first
        await asyncio.sleep(0)
        try:
            stored = self.store.get(self.key)
            if stored:
                self._value = self.deserialize(stored)
                log.info("state_hydrated", key=self.key)
            else:
                log.info("state_hydration_skipped", key=self.key, reason="absent")
        except (StorageError, ValidationError, ValueError) as exc:
            log.warning("state_read_failed", key=self.key, error=str(exc))
        finally:
            self._phase = HydrationPhase.HYDRATED
        self._persist()

    # -------- Accessors --------
    def read(self) -> T:
        return self._value

    def replace(self, value: T) -> None:
        self._value = value
        self._persist()

    def reset(self) -> None:
        self.replace(copy.deepcopy(self._initial))

    def _persist(self) -> None:
        if self._phase is not HydrationPhase.HYDRATED:
            log.debug("state_write_suppressed", key=self.key, phase=self._phase.value)
            return
        try:
            self.store.set(self.key, self.serialize(self._value))
        except (StorageError, TypeError, ValueError) as exc:
            log.warning("state_write_failed", key=self.key, error=str(exc))
