import asyncio
from typing import Any, Dict, List, Optional

from src.second_brain.chat import AskFn, ChatTranscript, greeting_transcript, local_ask
from src.second_brain.files import FileLibrary
from src.second_brain.models import ChatMessage, FileAsset, Note, Reminder, Task
from src.second_brain.notes import NotesBook
from src.second_brain.persistent_state import PersistentStateContainer
from src.second_brain.reminders import ReminderList
from src.second_brain.storage import DirectoryKeyValueStore, InMemoryKeyValueStore, KeyValueStore
from src.second_brain.tasks import TaskBoard

NOTES_KEY = "second-brain-notes"
TASKS_KEY = "second-brain-tasks"
REMINDERS_KEY = "second-brain-reminders"
FILES_KEY = "second-brain-files"
CHAT_KEY = "second-brain-chat"


class Workspace:
    """
    Application shell: one persistent container per collection, each wrapped
    by the feature module that owns it.
    """

    def __init__(self, store: KeyValueStore, ask: AskFn = local_ask):
        self.store = store
        self.notes_state = PersistentStateContainer(NOTES_KEY, [], store, value_type=List[Note])
        self.tasks_state = PersistentStateContainer(TASKS_KEY, [], store, value_type=List[Task])
        self.reminders_state = PersistentStateContainer(REMINDERS_KEY, [], store, value_type=List[Reminder])
        self.files_state = PersistentStateContainer(FILES_KEY, [], store, value_type=List[FileAsset])
        self.chat_state = PersistentStateContainer(
            CHAT_KEY, greeting_transcript(), store, value_type=List[ChatMessage]
        )

        self.notes = NotesBook(self.notes_state)
        self.tasks = TaskBoard(self.tasks_state)
        self.reminders = ReminderList(self.reminders_state)
        self.files = FileLibrary(self.files_state)
        self.chat = ChatTranscript(self.chat_state, ask=ask)

    @property
    def containers(self) -> List[PersistentStateContainer]:
        return [self.notes_state, self.tasks_state, self.reminders_state, self.files_state, self.chat_state]

    @property
    def hydrated(self) -> bool:
        return all(c.hydrated for c in self.containers)

    async def hydrate(self) -> None:
        await asyncio.gather(*(c.attach() for c in self.containers))


def store_from_config(storage_cfg: Optional[Dict[str, Any]] = None) -> KeyValueStore:
    cfg = storage_cfg or {}
    backend = cfg.get("backend", "file")
    quota = cfg.get("quota_bytes")
    if backend == "memory":
        return InMemoryKeyValueStore(quota_bytes=quota)
    if backend == "file":
        return DirectoryKeyValueStore(cfg.get("path") or ".second_brain", quota_bytes=quota)
    raise ValueError(f"Unknown storage backend: {backend}")
