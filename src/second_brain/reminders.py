from datetime import datetime
from typing import List, Optional, Tuple

from src.second_brain.models import RecordNotFound, Reminder
from src.second_brain.persistent_state import PersistentStateContainer

CHANNELS = ("push", "email", "sms")


def parse_local(text: str) -> datetime:
    """Parse an ISO timestamp as naive local time; offsets are converted, not dropped."""
    when = datetime.fromisoformat(text.replace("Z", "+00:00"))
    if when.tzinfo is not None:
        when = when.astimezone().replace(tzinfo=None)
    return when


def scheduled_time(reminder: Reminder) -> Optional[datetime]:
    try:
        return parse_local(reminder.scheduled_at)
    except ValueError:
        return None


class ReminderList:
    """Follow-ups and rituals ordered by when they fire."""

    def __init__(self, state: PersistentStateContainer[List[Reminder]]):
        self.state = state

    def upcoming(self, show_past: bool = False, now: Optional[datetime] = None) -> List[Reminder]:
        now = now or datetime.now()
        timed: List[Tuple[datetime, Reminder]] = []
        for reminder in self.state.read():
            when = scheduled_time(reminder)
            if when is None:
                continue
            timed.append((when, reminder))
        timed.sort(key=lambda pair: pair[0])
        if show_past:
            return [r for _, r in timed]
        return [r for when, r in timed if when >= now]

    def next_due(self, now: Optional[datetime] = None) -> Optional[Reminder]:
        items = self.upcoming(now=now)
        return items[0] if items else None

    def create(self, title: str, scheduled_at: str, channel: str = "push", notes: str = "") -> Reminder:
        title = (title or "").strip()
        if not title or not scheduled_at:
            raise ValueError("Reminder title and time are required")
        parse_local(scheduled_at)
        reminder = Reminder(title=title, scheduled_at=scheduled_at, channel=channel or "push", notes=notes or "")
        self.state.replace([reminder, *self.state.read()])
        return reminder

    def delete(self, reminder_id: str) -> None:
        reminders = self.state.read()
        if not any(r.id == reminder_id for r in reminders):
            raise RecordNotFound(reminder_id)
        self.state.replace([r for r in reminders if r.id != reminder_id])
