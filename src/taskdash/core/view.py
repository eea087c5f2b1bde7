"""
Board state, actions and the pure derivation of the displayed list.

State only changes through `reduce(state, action)`; what the user sees is
always `derive(state)`, recomputed from scratch.
"""

from dataclasses import dataclass, replace
from datetime import date
from enum import Enum

from .filters import TaskFilter, filter_tasks
from .sorting import SortKey, sort_tasks
from .stats import TaskStats, collect_tags, compute_stats
from .tasks import Task


@dataclass(frozen=True)
class BoardError:
    """List-level failure shown instead of the task list."""

    kind: str
    message: str
    retryable: bool = True


@dataclass(frozen=True)
class BoardState:
    tasks: tuple[Task, ...] = ()
    loaded: bool = False
    loading: bool = False
    error: BoardError | None = None
    search: str = ""
    active_filter: TaskFilter = TaskFilter.ALL
    active_tag: str | None = None
    sort_key: SortKey = SortKey.DATE
    selected_id: str | None = None
    notices: tuple[str, ...] = ()
    rejected: int = 0
    fetch_ticket: int = 0

    def find(self, task_id: str) -> Task | None:
        return next((t for t in self.tasks if t.id == task_id), None)


# ============== Actions ==============


@dataclass(frozen=True)
class LoadStarted:
    pass


@dataclass(frozen=True)
class TasksLoaded:
    tasks: tuple[Task, ...]
    rejected: int = 0
    ticket: int = 0


@dataclass(frozen=True)
class LoadFailed:
    error: BoardError
    ticket: int = 0


@dataclass(frozen=True)
class SearchChanged:
    query: str


@dataclass(frozen=True)
class FilterChanged:
    active_filter: TaskFilter


@dataclass(frozen=True)
class TagChanged:
    tag: str | None


@dataclass(frozen=True)
class SortChanged:
    key: SortKey


@dataclass(frozen=True)
class TaskSelected:
    task_id: str


@dataclass(frozen=True)
class SelectionCleared:
    pass


@dataclass(frozen=True)
class TaskReplaced:
    """Optimistic local write of a single task."""

    task: Task


@dataclass(frozen=True)
class NoticePosted:
    message: str


@dataclass(frozen=True)
class NoticesCleared:
    pass


Action = (
    LoadStarted
    | TasksLoaded
    | LoadFailed
    | SearchChanged
    | FilterChanged
    | TagChanged
    | SortChanged
    | TaskSelected
    | SelectionCleared
    | TaskReplaced
    | NoticePosted
    | NoticesCleared
)


def reduce(state: BoardState, action: Action) -> BoardState:
    """Apply one action. Pure function - returns a new state."""
    match action:
        case LoadStarted():
            return replace(state, loading=True, error=None)
        case TasksLoaded(tasks=tasks, rejected=rejected, ticket=ticket):
            if ticket < state.fetch_ticket:
                return state
            selected = state.selected_id
            if selected is not None and not any(t.id == selected for t in tasks):
                selected = None
            return replace(
                state,
                tasks=tuple(tasks),
                loaded=True,
                loading=False,
                error=None,
                rejected=rejected,
                fetch_ticket=ticket,
                selected_id=selected,
            )
        case LoadFailed(error=error, ticket=ticket):
            if ticket < state.fetch_ticket:
                return state
            return replace(state, loading=False, error=error, fetch_ticket=ticket)
        case SearchChanged(query=query):
            return replace(state, search=query)
        case FilterChanged(active_filter=active_filter):
            return replace(state, active_filter=active_filter)
        case TagChanged(tag=tag):
            return replace(state, active_tag=tag or None)
        case SortChanged(key=key):
            return replace(state, sort_key=key)
        case TaskSelected(task_id=task_id):
            if state.find(task_id) is None:
                return state
            return replace(state, selected_id=task_id)
        case SelectionCleared():
            return replace(state, selected_id=None)
        case TaskReplaced(task=task):
            return replace(
                state,
                tasks=tuple(task if t.id == task.id else t for t in state.tasks),
            )
        case NoticePosted(message=message):
            return replace(state, notices=state.notices + (message,))
        case NoticesCleared():
            return replace(state, notices=())
    raise TypeError(f"Unknown action: {action!r}")


# ============== Derivation ==============


class ViewStatus(Enum):
    LOADING = "loading"
    ERROR = "error"
    READY = "ready"


@dataclass(frozen=True)
class TaskView:
    """Everything the presentation layer needs, derived from BoardState."""

    status: ViewStatus
    tasks: tuple[Task, ...]
    stats: TaskStats
    tags: tuple[str, ...]
    selected: Task | None = None
    error: BoardError | None = None
    notices: tuple[str, ...] = ()
    rejected: int = 0


def derive(state: BoardState, as_of: date | None = None) -> TaskView:
    """
    Filter then sort the raw tasks for display.

    The list is only populated once a fetch has completed and no error is
    pending; it is never partially shown.
    """
    as_of = as_of or date.today()
    if state.error is not None:
        status = ViewStatus.ERROR
    elif state.loading or not state.loaded:
        status = ViewStatus.LOADING
    else:
        status = ViewStatus.READY

    shown: tuple[Task, ...] = ()
    if status is ViewStatus.READY:
        filtered = filter_tasks(
            state.tasks,
            query=state.search,
            active_filter=state.active_filter,
            tag=state.active_tag,
            as_of=as_of,
        )
        shown = tuple(sort_tasks(filtered, state.sort_key))

    selected = state.find(state.selected_id) if state.selected_id else None
    return TaskView(
        status=status,
        tasks=shown,
        stats=compute_stats(state.tasks, as_of),
        tags=tuple(collect_tags(state.tasks)),
        selected=selected,
        error=state.error,
        notices=state.notices,
        rejected=state.rejected,
    )
