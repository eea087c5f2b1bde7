"""Task sort orders - pure functions, never mutate their input."""

import locale
import unicodedata
from enum import Enum
from typing import Iterable

from .tasks import Task


class SortKey(Enum):
    DATE = "date"
    TITLE = "title"
    PRIORITY = "priority"
    COMPLETED = "completed"


def sort_by_date(tasks: Iterable[Task]) -> list[Task]:
    """
    Latest due date first.

    Tasks without a due date go last, keeping their relative order.
    """
    tasks = list(tasks)
    dated = [t for t in tasks if t.due_date is not None]
    undated = [t for t in tasks if t.due_date is None]
    # sorted(reverse=True) stays stable for equal keys
    return sorted(dated, key=lambda t: t.due_date, reverse=True) + undated


def title_key(title: str) -> str:
    """Collation key: accents folded to their base letter, case ignored."""
    decomposed = unicodedata.normalize("NFKD", title.casefold())
    base = "".join(c for c in decomposed if not unicodedata.combining(c))
    return locale.strxfrm(base)


def sort_by_title(tasks: Iterable[Task]) -> list[Task]:
    """Ascending, using the process locale's collation and ignoring case."""
    return sorted(tasks, key=lambda t: title_key(t.title))


def sort_by_priority(tasks: Iterable[Task]) -> list[Task]:
    """Highest priority first; ties keep input order."""
    return sorted(tasks, key=lambda t: -int(t.priority))


def sort_by_completion(tasks: Iterable[Task]) -> list[Task]:
    """Open tasks before completed ones; ties keep input order."""
    return sorted(tasks, key=lambda t: t.completed)


_SORTERS = {
    SortKey.DATE: sort_by_date,
    SortKey.TITLE: sort_by_title,
    SortKey.PRIORITY: sort_by_priority,
    SortKey.COMPLETED: sort_by_completion,
}


def sort_tasks(tasks: Iterable[Task], key: SortKey = SortKey.DATE) -> list[Task]:
    """Return a new list ordered by the selected key."""
    return _SORTERS[key](tasks)
