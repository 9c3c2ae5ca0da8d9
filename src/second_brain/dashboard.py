from datetime import date, datetime
from typing import Any, Dict, List, Optional

from src.second_brain.models import FileAsset, Note, Reminder, Task
from src.second_brain.reminders import scheduled_time
from src.second_brain.tasks import due_date_of

AFFIRMATIONS = [
    "Build momentum with one meaningful capture.",
    "Connect insights to unlock compound creativity.",
    "Honor focus: ship the task that unlocks everything else.",
    "You have everything you need to orchestrate today with clarity.",
]


def daily_affirmation(today: Optional[date] = None) -> str:
    today = today or date.today()
    return AFFIRMATIONS[today.day % len(AFFIRMATIONS)]


def format_reminder_time(when: datetime) -> str:
    """e.g. 'Oct 19 • 3:05 PM'"""
    hour = when.hour % 12 or 12
    return f"{when:%b} {when.day} • {hour}:{when:%M} {when:%p}"


def overview(
    notes: List[Note],
    tasks: List[Task],
    reminders: List[Reminder],
    files: List[FileAsset],
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    now = now or datetime.now()
    open_tasks = sum(1 for t in tasks if not t.completed)
    completed_today = sum(1 for t in tasks if t.completed and due_date_of(t) == now.date())

    upcoming = []
    for reminder in reminders:
        when = scheduled_time(reminder)
        if when is not None and when >= now:
            upcoming.append(when)
    upcoming.sort()

    latest_note = notes[0] if notes else None
    return [
        {
            "label": "Notes",
            "value": str(len(notes)),
            "detail": f"Latest: {latest_note.title[:22]}" if latest_note else "Capture your first insight",
        },
        {
            "label": "Tasks",
            "value": str(open_tasks),
            "detail": f"{completed_today} completed today",
        },
        {
            "label": "Reminders",
            "value": str(len(reminders)),
            "detail": f"Next: {format_reminder_time(upcoming[0])}" if upcoming else "No upcoming reminders",
        },
        {
            "label": "Files",
            "value": str(len(files)),
            "detail": f"Last: {files[0].name[:20]}" if files else "Upload an asset",
        },
    ]
