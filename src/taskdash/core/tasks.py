"""Task domain model and wire/display conversion - no I/O dependencies."""

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import IntEnum

from .errors import InvalidTaskData

logger = logging.getLogger(__name__)


class Priority(IntEnum):
    """Display-form priority. The integer value is the wire form."""

    NONE = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3

    @property
    def label(self) -> str:
        return "" if self is Priority.NONE else self.name.capitalize()


_PRIORITY_BY_WIRE = {p.value: p for p in Priority}

_PRIORITY_BY_NAME = {
    "none": Priority.NONE,
    "low": Priority.LOW,
    "medium": Priority.MEDIUM,
    "high": Priority.HIGH,
}


def priority_from_wire(value: object) -> Priority:
    """Map a wire integer to a Priority. Anything outside 0-3 is NONE."""
    if isinstance(value, bool) or not isinstance(value, int):
        return Priority.NONE
    return _PRIORITY_BY_WIRE.get(value, Priority.NONE)


def priority_to_wire(priority: Priority) -> int:
    return int(priority)


def parse_priority(text: str) -> Priority:
    """Parse a form/CLI priority name ("none", "low", "medium", "high")."""
    try:
        return _PRIORITY_BY_NAME[text.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown priority: {text!r}") from None


def parse_due_date(value: object) -> date | None:
    """
    Parse a wire-form due date.

    Accepts None, a bare ISO date or a full ISO timestamp; only the calendar
    day is kept.
    """
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise InvalidTaskData(f"Due date must be a string, got {type(value).__name__}")
    try:
        return date.fromisoformat(value.split("T")[0])
    except ValueError:
        raise InvalidTaskData(f"Malformed due date: {value!r}") from None


def _optional_bool(data: dict, key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise InvalidTaskData(f"{key} must be a boolean, got {value!r}")
    return value


def _optional_str(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise InvalidTaskData(f"{key} must be a string, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class Subtask:
    """A checklist item owned by a task."""

    id: str
    title: str
    completed: bool = False

    @classmethod
    def from_api(cls, data: dict) -> "Subtask":
        if not isinstance(data, dict) or data.get("id") is None:
            raise InvalidTaskData("Subtask record without an id")
        return cls(
            id=str(data["id"]),
            title=str(data.get("title") or ""),
            completed=_optional_bool(data, "completed"),
        )

    def to_api(self) -> dict:
        return {"id": self.id, "title": self.title, "completed": self.completed}


@dataclass(frozen=True)
class SubtaskProgress:
    total: int
    completed: int

    @property
    def percentage(self) -> int:
        if not self.total:
            return 0
        return round(self.completed * 100 / self.total)


@dataclass(frozen=True)
class Task:
    """A task in display form."""

    id: str
    title: str
    description: str = ""
    completed: bool = False
    priority: Priority = Priority.NONE
    due_date: date | None = None
    tags: tuple[str, ...] = ()
    subtasks: tuple[Subtask, ...] = ()
    project: str = ""

    def days_until_due(self, as_of: date | None = None) -> int | None:
        """Days until due date (negative if overdue)."""
        if not self.due_date:
            return None
        as_of = as_of or date.today()
        return (self.due_date - as_of).days

    def is_due_today(self, as_of: date | None = None) -> bool:
        return self.days_until_due(as_of) == 0

    def is_overdue(self, as_of: date | None = None) -> bool:
        """Past its due date and still open."""
        days = self.days_until_due(as_of)
        return days is not None and days < 0 and not self.completed

    @property
    def subtask_progress(self) -> SubtaskProgress:
        done = sum(1 for s in self.subtasks if s.completed)
        return SubtaskProgress(total=len(self.subtasks), completed=done)

    def find_subtask(self, subtask_id: str) -> Subtask | None:
        return next((s for s in self.subtasks if s.id == subtask_id), None)

    @classmethod
    def from_api(cls, data: dict) -> "Task":
        """Create a Task from a task API record."""
        if not isinstance(data, dict):
            raise InvalidTaskData(f"Task record must be an object, got {type(data).__name__}")
        if data.get("id") is None:
            raise InvalidTaskData("Task record without an id", data)
        title = data.get("title")
        if not isinstance(title, str) or not title.strip():
            raise InvalidTaskData(f"Task {data['id']} has no title", data)

        tags = data.get("tags") or []
        subtasks = data.get("subtasks") or []
        if not isinstance(tags, list) or not isinstance(subtasks, list):
            raise InvalidTaskData(f"Task {data['id']} has malformed tags or subtasks", data)

        try:
            due = parse_due_date(data.get("dueDate"))
            parsed_subtasks = tuple(Subtask.from_api(s) for s in subtasks)
            description = _optional_str(data, "description")
            completed = _optional_bool(data, "completed")
            project = _optional_str(data, "project") or _optional_str(data, "list")
        except InvalidTaskData as e:
            raise InvalidTaskData(f"Task {data['id']}: {e}", data) from None

        return cls(
            id=str(data["id"]),
            title=title,
            description=description,
            completed=completed,
            priority=priority_from_wire(data.get("priority", 0)),
            due_date=due,
            tags=tuple(str(t) for t in tags),
            subtasks=parsed_subtasks,
            project=project,
        )

    def to_api(self) -> dict:
        """Full wire-form representation."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "completed": self.completed,
            "priority": priority_to_wire(self.priority),
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "tags": list(self.tags),
            "subtasks": [s.to_api() for s in self.subtasks],
            "project": self.project,
        }


@dataclass
class ParseResult:
    """Outcome of converting a whole API listing."""

    tasks: list[Task] = field(default_factory=list)
    rejected: list[InvalidTaskData] = field(default_factory=list)


def parse_tasks(records: list[dict]) -> ParseResult:
    """
    Convert wire-form records, excluding the ones that fail to convert.

    Duplicate ids keep the first occurrence so ids stay unique.
    """
    result = ParseResult()
    seen: set[str] = set()
    for record in records:
        try:
            task = Task.from_api(record)
        except InvalidTaskData as e:
            logger.warning(f"Skipping invalid task record: {e}")
            result.rejected.append(e)
            continue
        if task.id in seen:
            logger.warning(f"Skipping duplicate task id {task.id}")
            result.rejected.append(InvalidTaskData(f"Duplicate task id {task.id}", record))
            continue
        seen.add(task.id)
        result.tasks.append(task)
    return result
