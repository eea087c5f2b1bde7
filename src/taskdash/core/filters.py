"""Task filter predicates - pure functions, combined with logical AND."""

from datetime import date, timedelta
from enum import Enum
from typing import Callable, Iterable

from .tasks import Priority, Task

DUE_SOON_DAYS = 7

Predicate = Callable[[Task], bool]


class TaskFilter(Enum):
    """Status/priority bucket selected in the sidebar."""

    ALL = "all"
    COMPLETED = "completed"
    PENDING = "pending"
    DUE_SOON = "due-soon"
    HIGH_PRIORITY = "high-priority"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


_PRIORITY_BUCKETS = {
    TaskFilter.HIGH: Priority.HIGH,
    TaskFilter.MEDIUM: Priority.MEDIUM,
    TaskFilter.LOW: Priority.LOW,
}


def matches_search(task: Task, query: str) -> bool:
    """Case-insensitive substring match on title or description."""
    if not query:
        return True
    needle = query.lower()
    return needle in task.title.lower() or needle in task.description.lower()


def is_due_soon(task: Task, as_of: date | None = None, days: int = DUE_SOON_DAYS) -> bool:
    """Open task due between today and today + N days, both inclusive."""
    if not task.due_date or task.completed:
        return False
    as_of = as_of or date.today()
    return as_of <= task.due_date <= as_of + timedelta(days=days)


def is_high_priority(task: Task) -> bool:
    return task.priority is Priority.HIGH and not task.completed


def has_tag(task: Task, tag: str) -> bool:
    return tag in task.tags


def status_predicate(active_filter: TaskFilter, as_of: date | None = None) -> Predicate | None:
    """Predicate for the active bucket, or None when it keeps everything."""
    if active_filter is TaskFilter.ALL:
        return None
    if active_filter is TaskFilter.COMPLETED:
        return lambda t: t.completed
    if active_filter is TaskFilter.PENDING:
        return lambda t: not t.completed
    if active_filter is TaskFilter.DUE_SOON:
        as_of = as_of or date.today()
        return lambda t: is_due_soon(t, as_of)
    if active_filter is TaskFilter.HIGH_PRIORITY:
        return is_high_priority
    wanted = _PRIORITY_BUCKETS[active_filter]
    return lambda t: t.priority is wanted


def build_predicates(
    query: str = "",
    active_filter: TaskFilter = TaskFilter.ALL,
    tag: str | None = None,
    as_of: date | None = None,
) -> list[Predicate]:
    """Collect the active predicates. Order is irrelevant to the result."""
    predicates: list[Predicate] = []
    if query:
        predicates.append(lambda t: matches_search(t, query))
    status = status_predicate(active_filter, as_of)
    if status is not None:
        predicates.append(status)
    if tag:
        predicates.append(lambda t: has_tag(t, tag))
    return predicates


def apply_filters(tasks: Iterable[Task], predicates: list[Predicate]) -> list[Task]:
    """Keep tasks that satisfy every predicate, preserving input order."""
    return [t for t in tasks if all(p(t) for p in predicates)]


def filter_tasks(
    tasks: Iterable[Task],
    query: str = "",
    active_filter: TaskFilter = TaskFilter.ALL,
    tag: str | None = None,
    as_of: date | None = None,
) -> list[Task]:
    return apply_filters(tasks, build_predicates(query, active_filter, tag, as_of))
