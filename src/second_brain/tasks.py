from datetime import date
from typing import Dict, List, Optional

from src.second_brain.models import RecordNotFound, Task
from src.second_brain.persistent_state import PersistentStateContainer

VIEWS = ("all", "today", "overdue", "completed")


def due_date_of(task: Task) -> Optional[date]:
    if not task.due_date:
        return None
    try:
        return date.fromisoformat(task.due_date[:10])
    except ValueError:
        return None


def is_due_today(task: Task, today: date) -> bool:
    return due_date_of(task) == today and not task.completed


def is_overdue(task: Task, today: date) -> bool:
    due = due_date_of(task)
    return due is not None and due < today and not task.completed


class TaskBoard:
    """Next actions with a completion toggle and date based views."""

    def __init__(self, state: PersistentStateContainer[List[Task]]):
        self.state = state

    def list(self, view: str = "all", today: Optional[date] = None) -> List[Task]:
        if view not in VIEWS:
            raise ValueError(f"Unknown task view: {view}")
        today = today or date.today()
        tasks = self.state.read()
        if view == "all":
            return [t for t in tasks if not t.completed]
        if view == "completed":
            return [t for t in tasks if t.completed]
        if view == "today":
            return [t for t in tasks if is_due_today(t, today)]
        return [t for t in tasks if is_overdue(t, today)]

    def stats(self, today: Optional[date] = None) -> Dict[str, int]:
        today = today or date.today()
        tasks = self.state.read()
        return {
            "total": len(tasks),
            "completed": sum(1 for t in tasks if t.completed),
            "overdue": sum(1 for t in tasks if is_overdue(t, today)),
            "today": sum(1 for t in tasks if is_due_today(t, today)),
        }

    def create(self, title: str, notes: str = "", due_date: Optional[str] = None, priority: str = "medium") -> Task:
        title = (title or "").strip()
        if not title:
            raise ValueError("Task title is required")
        if due_date:
            date.fromisoformat(due_date[:10])
        task = Task(title=title, notes=notes or "", due_date=due_date or None, priority=priority or "medium")
        self.state.replace([task, *self.state.read()])
        return task

    def toggle(self, task_id: str) -> Task:
        tasks = self.state.read()
        toggled = None
        updated = []
        for task in tasks:
            if task.id == task_id:
                toggled = task.model_copy(update={"completed": not task.completed})
                updated.append(toggled)
            else:
                updated.append(task)
        if toggled is None:
            raise RecordNotFound(task_id)
        self.state.replace(updated)
        return toggled

    def delete(self, task_id: str) -> None:
        tasks = self.state.read()
        if not any(t.id == task_id for t in tasks):
            raise RecordNotFound(task_id)
        self.state.replace([t for t in tasks if t.id != task_id])
