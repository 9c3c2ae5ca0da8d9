from typing import List, Optional

from src.second_brain.models import Note, RecordNotFound, now_iso
from src.second_brain.persistent_state import PersistentStateContainer

PALETTE = ["#60a5fa", "#34d399", "#f97316", "#f472b6", "#a855f7", "#facc15"]


def parse_tags(value: str) -> List[str]:
    """Split a comma separated tag string, dropping blanks."""
    return [tag.strip() for tag in (value or "").split(",") if tag.strip()]


class NotesBook:
    """Atomic notes stored newest first."""

    def __init__(self, state: PersistentStateContainer[List[Note]]):
        self.state = state

    def list(self) -> List[Note]:
        return list(self.state.read())

    def search(self, query: str = "") -> List[Note]:
        notes = self.state.read()
        if not (query or "").strip():
            return list(notes)
        needle = query.lower()
        return [
            note
            for note in notes
            if needle in note.title.lower()
            or needle in note.content.lower()
            or any(needle in tag.lower() for tag in note.tags)
        ]

    def create(self, title: str, content: str, tags: Optional[List[str]] = None, color: Optional[str] = None) -> Note:
        title, content = _require_text(title, content)
        notes = self.state.read()
        timestamp = now_iso()
        note = Note(
            title=title,
            content=content,
            tags=[t for t in (tags or []) if t],
            color=color or PALETTE[len(notes) % len(PALETTE)],
            created_at=timestamp,
            updated_at=timestamp,
        )
        self.state.replace([note, *notes])
        return note

    def update(
        self,
        note_id: str,
        title: str,
        content: str,
        tags: Optional[List[str]] = None,
        color: Optional[str] = None,
    ) -> Note:
        title, content = _require_text(title, content)
        notes = self.state.read()
        current = _find(notes, note_id)
        updated = current.model_copy(
            update={
                "title": title,
                "content": content,
                "tags": [t for t in (tags or []) if t],
                "color": color or current.color,
                "updated_at": now_iso(),
            }
        )
        self.state.replace([updated if n.id == note_id else n for n in notes])
        return updated

    def delete(self, note_id: str) -> None:
        notes = self.state.read()
        _find(notes, note_id)
        self.state.replace([n for n in notes if n.id != note_id])


def _require_text(title: str, content: str):
    title = (title or "").strip()
    content = (content or "").strip()
    if not title or not content:
        raise ValueError("Note title and content are required")
    return title, content


def _find(notes: List[Note], note_id: str) -> Note:
    for note in notes:
        if note.id == note_id:
            return note
    raise RecordNotFound(note_id)
