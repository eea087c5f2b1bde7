"""Summary counts shown above the task list."""

from dataclasses import dataclass
from datetime import date
from typing import Iterable

from .tasks import Task


@dataclass(frozen=True)
class TaskStats:
    total: int
    completed: int
    pending: int
    due_today: int
    overdue: int

    @property
    def completion_percentage(self) -> int:
        if not self.total:
            return 0
        return round(self.completed * 100 / self.total)


def compute_stats(tasks: Iterable[Task], as_of: date | None = None) -> TaskStats:
    """
    Count tasks by state.

    Due-today and overdue only count open tasks. Pure function - no I/O.
    """
    as_of = as_of or date.today()
    tasks = list(tasks)
    completed = sum(1 for t in tasks if t.completed)
    return TaskStats(
        total=len(tasks),
        completed=completed,
        pending=len(tasks) - completed,
        due_today=sum(1 for t in tasks if t.is_due_today(as_of) and not t.completed),
        overdue=sum(1 for t in tasks if t.is_overdue(as_of)),
    )


def collect_tags(tasks: Iterable[Task]) -> list[str]:
    """Distinct tags across all tasks, in first-seen order."""
    seen: dict[str, None] = {}
    for task in tasks:
        for tag in task.tags:
            seen.setdefault(tag, None)
    return list(seen)
