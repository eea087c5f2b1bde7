"""Functional core - pure business logic with no I/O."""

from .errors import (
    ApiError,
    AuthenticationError,
    ConfigurationError,
    InvalidTaskData,
    NetworkError,
    TaskDashError,
)
from .tasks import Priority, Subtask, Task, parse_tasks, priority_from_wire, priority_to_wire
from .filters import TaskFilter, filter_tasks
from .sorting import SortKey, sort_tasks
from .stats import TaskStats, compute_stats, collect_tags
from .view import BoardError, BoardState, TaskView, ViewStatus, derive, reduce
from .mutations import Confirmed, MutationResult, Patch, RolledBack

__all__ = [
    # Errors
    "TaskDashError",
    "ConfigurationError",
    "NetworkError",
    "ApiError",
    "AuthenticationError",
    "InvalidTaskData",
    # Tasks
    "Priority",
    "Subtask",
    "Task",
    "parse_tasks",
    "priority_from_wire",
    "priority_to_wire",
    # Filtering / sorting
    "TaskFilter",
    "filter_tasks",
    "SortKey",
    "sort_tasks",
    # Stats
    "TaskStats",
    "compute_stats",
    "collect_tags",
    # View
    "BoardError",
    "BoardState",
    "TaskView",
    "ViewStatus",
    "derive",
    "reduce",
    # Mutations
    "Confirmed",
    "MutationResult",
    "Patch",
    "RolledBack",
]
