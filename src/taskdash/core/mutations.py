"""
Pure builders for task mutations.

Each builder returns a Patch: the optimistic local value of the task plus
the wire payload carrying only the changed fields. Nothing here talks to
the task API; see TaskBoard for the two-phase commit.
"""

import uuid
from dataclasses import dataclass, replace
from datetime import date

from .tasks import Priority, Subtask, Task, priority_to_wire

EDITABLE_FIELDS = ("title", "description", "priority", "due_date", "tags", "project")


@dataclass(frozen=True)
class Patch:
    task: Task
    payload: dict


@dataclass(frozen=True)
class Confirmed:
    """The API accepted the change; the optimistic value stands."""

    task_id: str | None = None


@dataclass(frozen=True)
class RolledBack:
    """The API rejected the change; local state was reconciled by refetch."""

    reason: str
    task_id: str | None = None


MutationResult = Confirmed | RolledBack


def set_completed(task: Task, completed: bool) -> Patch:
    return Patch(replace(task, completed=completed), {"completed": completed})


def toggle_completed(task: Task) -> Patch:
    return set_completed(task, not task.completed)


def _clean_title(title: str) -> str:
    title = (title or "").strip()
    if not title:
        raise ValueError("Title must not be empty")
    return title


def _field_to_wire(name: str, value: object) -> tuple[str, object]:
    if name == "priority":
        return "priority", priority_to_wire(value)
    if name == "due_date":
        return "dueDate", value.isoformat() if value else None
    if name == "tags":
        return "tags", list(value)
    return name, value


def edit_fields(task: Task, changes: dict) -> Patch:
    """
    Apply edits to the editable fields of a task.

    `changes` uses display-form field names and values; fields whose value
    is unchanged are left out of the payload.
    """
    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValueError(f"Cannot edit fields: {', '.join(sorted(unknown))}")

    normalized = dict(changes)
    if "title" in normalized:
        normalized["title"] = _clean_title(normalized["title"])
    if "description" in normalized:
        normalized["description"] = normalized["description"] or ""
    if "project" in normalized:
        normalized["project"] = normalized["project"] or ""
    if "priority" in normalized:
        normalized["priority"] = Priority(normalized["priority"])
    if "tags" in normalized:
        normalized["tags"] = tuple(normalized["tags"])
    if "due_date" in normalized and normalized["due_date"] is not None:
        if not isinstance(normalized["due_date"], date):
            raise ValueError("Due date must be a date")

    changed = {k: v for k, v in normalized.items() if getattr(task, k) != v}
    payload = dict(_field_to_wire(k, v) for k, v in changed.items())
    return Patch(replace(task, **changed), payload)


def _with_subtasks(task: Task, subtasks: tuple[Subtask, ...]) -> Patch:
    return Patch(
        replace(task, subtasks=subtasks),
        {"subtasks": [s.to_api() for s in subtasks]},
    )


def _require_subtask(task: Task, subtask_id: str) -> Subtask:
    subtask = task.find_subtask(subtask_id)
    if subtask is None:
        raise ValueError(f"Task {task.id} has no subtask {subtask_id}")
    return subtask


def add_subtask(task: Task, title: str, subtask_id: str | None = None) -> Patch:
    subtask = Subtask(id=subtask_id or str(uuid.uuid4()), title=_clean_title(title))
    return _with_subtasks(task, task.subtasks + (subtask,))


def toggle_subtask(task: Task, subtask_id: str, completed: bool | None = None) -> Patch:
    current = _require_subtask(task, subtask_id)
    value = (not current.completed) if completed is None else completed
    return _with_subtasks(
        task,
        tuple(replace(s, completed=value) if s.id == subtask_id else s for s in task.subtasks),
    )


def edit_subtask(task: Task, subtask_id: str, title: str) -> Patch:
    _require_subtask(task, subtask_id)
    title = _clean_title(title)
    return _with_subtasks(
        task,
        tuple(replace(s, title=title) if s.id == subtask_id else s for s in task.subtasks),
    )


def delete_subtask(task: Task, subtask_id: str) -> Patch:
    _require_subtask(task, subtask_id)
    return _with_subtasks(task, tuple(s for s in task.subtasks if s.id != subtask_id))


def complete_all_subtasks(task: Task) -> Patch:
    return _with_subtasks(task, tuple(replace(s, completed=True) for s in task.subtasks))


def new_task_payload(
    title: str,
    description: str = "",
    priority: Priority = Priority.NONE,
    due_date: date | None = None,
    tags: list[str] | tuple[str, ...] = (),
    project: str = "",
) -> dict:
    """Wire-form body for creating a task."""
    return {
        "title": _clean_title(title),
        "description": description or "",
        "completed": False,
        "priority": priority_to_wire(priority),
        "dueDate": due_date.isoformat() if due_date else None,
        "tags": list(tags),
        "subtasks": [],
        "project": project or "",
    }
