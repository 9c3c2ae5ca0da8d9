import uuid
from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def new_id() -> str:
    return str(uuid.uuid4())


def now_iso() -> str:
    """UTC timestamp in the 2024-05-01T10:00:00.000Z form."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Record(BaseModel):
    """Base for persisted records; stored with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=new_id)


class Note(Record):
    title: str
    content: str
    tags: List[str] = Field(default_factory=list)
    color: str
    created_at: str
    updated_at: str


class Task(Record):
    title: str
    notes: str = ""
    due_date: Optional[str] = None  # ISO date, YYYY-MM-DD
    completed: bool = False
    priority: Literal["low", "medium", "high"] = "medium"


class Reminder(Record):
    title: str
    scheduled_at: str  # ISO local datetime, YYYY-MM-DDTHH:MM
    channel: Literal["push", "email", "sms"] = "push"
    notes: str = ""


class FileAsset(Record):
    name: str
    size: int
    type: str = "application/octet-stream"
    uploaded_at: str
    data_url: str = ""


class ChatMessage(Record):
    role: Literal["user", "assistant"]
    content: str
    created_at: str = Field(default_factory=now_iso)


class RecordNotFound(KeyError):
    """Raised when an id does not match any record in a collection."""
