"""
Task board - owns the raw task collection and talks to the task API.

Every change goes through the pure reducer in core.view. Mutations follow a
two-phase commit: apply the new value locally, send only the changed fields,
and on failure reconcile by refetching the whole collection.
"""

import logging
import threading
from datetime import date
from typing import Callable

from .adapters.auth_session import SessionTokenProvider
from .adapters.task_api import TaskApiAdapter
from .config import Config, load_config
from .core import mutations
from .core.errors import TaskDashError
from .core.filters import TaskFilter
from .core.mutations import Confirmed, MutationResult, Patch, RolledBack
from .core.sorting import SortKey
from .core.tasks import Priority, Task, parse_tasks
from .core.view import (
    Action,
    BoardError,
    BoardState,
    FilterChanged,
    LoadFailed,
    LoadStarted,
    NoticePosted,
    NoticesCleared,
    SearchChanged,
    SelectionCleared,
    SortChanged,
    TagChanged,
    TaskReplaced,
    TaskSelected,
    TasksLoaded,
    TaskView,
    derive,
    reduce,
)
from .ports.task_repo import TaskRepository

logger = logging.getLogger(__name__)


class TaskBoard:
    """Stateful view-model over a TaskRepository."""

    def __init__(self, repository: TaskRepository, state: BoardState | None = None):
        self.repository = repository
        self._state = state or BoardState()
        self._lock = threading.RLock()
        self._last_ticket = 0

    @classmethod
    def from_config(cls, config: Config | None = None) -> "TaskBoard":
        """Build a board on the HTTP adapter, signing in when credentials are set."""
        config = config or load_config()
        token_provider = SessionTokenProvider(config) if config.has_credentials else None
        return cls(TaskApiAdapter(config, token_provider=token_provider))

    @property
    def state(self) -> BoardState:
        return self._state

    def dispatch(self, action: Action) -> BoardState:
        with self._lock:
            self._state = reduce(self._state, action)
            return self._state

    def view(self, as_of: date | None = None) -> TaskView:
        return derive(self._state, as_of)

    # ============== Loading ==============

    def _next_ticket(self) -> int:
        with self._lock:
            self._last_ticket += 1
            return self._last_ticket

    def load(self) -> bool:
        """
        Replace the collection with the API's current listing.

        Returns False when the fetch failed or was superseded by a newer one.
        """
        ticket = self._next_ticket()
        self.dispatch(LoadStarted())
        try:
            records = self.repository.fetch_all()
        except TaskDashError as e:
            logger.error(f"Failed to fetch tasks: {e}")
            self.dispatch(LoadFailed(BoardError(e.kind, str(e), e.retryable), ticket))
            return False

        result = parse_tasks(records)
        if result.rejected:
            logger.warning(f"Excluded {len(result.rejected)} invalid task record(s)")
        state = self.dispatch(TasksLoaded(tuple(result.tasks), len(result.rejected), ticket))
        if state.fetch_ticket != ticket:
            logger.info(f"Discarded stale fetch #{ticket} (latest is #{state.fetch_ticket})")
            return False
        return True

    retry = load

    # ============== View inputs ==============

    def set_search(self, query: str) -> None:
        self.dispatch(SearchChanged(query))

    def set_filter(self, active_filter: TaskFilter) -> None:
        self.dispatch(FilterChanged(active_filter))

    def set_tag(self, tag: str | None) -> None:
        self.dispatch(TagChanged(tag))

    def set_sort(self, key: SortKey) -> None:
        self.dispatch(SortChanged(key))

    def select(self, task_id: str) -> Task | None:
        self.dispatch(TaskSelected(task_id))
        return self.view().selected

    def clear_selection(self) -> None:
        self.dispatch(SelectionCleared())

    def dismiss_notices(self) -> None:
        self.dispatch(NoticesCleared())

    # ============== Mutations ==============

    def _require(self, task_id: str) -> Task:
        task = self._state.find(task_id)
        if task is None:
            raise ValueError(f"Unknown task: {task_id}")
        return task

    def _commit(self, task_id: str, build: Callable[[Task], Patch]) -> MutationResult:
        """Optimistically apply a patch, then confirm it or roll back via refetch."""
        with self._lock:
            patch = build(self._require(task_id))
            if not patch.payload:
                return Confirmed(task_id)
            self.dispatch(TaskReplaced(patch.task))

        try:
            self.repository.update(task_id, patch.payload)
        except TaskDashError as e:
            logger.warning(f"Update of task {task_id} failed, reconciling: {e}")
            self.dispatch(NoticePosted(f"Failed to update task: {e}"))
            self.load()
            return RolledBack(str(e), task_id)
        return Confirmed(task_id)

    def set_completed(self, task_id: str, completed: bool) -> MutationResult:
        return self._commit(task_id, lambda t: mutations.set_completed(t, completed))

    def toggle_complete(self, task_id: str) -> MutationResult:
        return self._commit(task_id, mutations.toggle_completed)

    def edit_task(self, task_id: str, **changes) -> MutationResult:
        """Edit title, description, priority, due_date, tags or project."""
        return self._commit(task_id, lambda t: mutations.edit_fields(t, changes))

    def add_subtask(self, task_id: str, title: str) -> MutationResult:
        return self._commit(task_id, lambda t: mutations.add_subtask(t, title))

    def toggle_subtask(self, task_id: str, subtask_id: str, completed: bool | None = None) -> MutationResult:
        return self._commit(task_id, lambda t: mutations.toggle_subtask(t, subtask_id, completed))

    def edit_subtask(self, task_id: str, subtask_id: str, title: str) -> MutationResult:
        return self._commit(task_id, lambda t: mutations.edit_subtask(t, subtask_id, title))

    def delete_subtask(self, task_id: str, subtask_id: str) -> MutationResult:
        return self._commit(task_id, lambda t: mutations.delete_subtask(t, subtask_id))

    def complete_all_subtasks(self, task_id: str) -> MutationResult:
        return self._commit(task_id, mutations.complete_all_subtasks)

    def delete_task(self, task_id: str) -> MutationResult:
        """Delete on the API first; refetch only once it succeeded."""
        try:
            self.repository.delete(task_id)
        except TaskDashError as e:
            logger.warning(f"Delete of task {task_id} failed: {e}")
            self.dispatch(NoticePosted(f"Failed to delete task: {e}"))
            return RolledBack(str(e), task_id)

        self.load()
        if self._state.selected_id == task_id:
            self.dispatch(SelectionCleared())
        return Confirmed(task_id)

    def add_task(
        self,
        title: str,
        description: str = "",
        priority: Priority = Priority.NONE,
        due_date: date | None = None,
        tags: list[str] | tuple[str, ...] = (),
        project: str = "",
    ) -> MutationResult:
        payload = mutations.new_task_payload(title, description, priority, due_date, tags, project)
        try:
            created = self.repository.create(payload)
        except TaskDashError as e:
            logger.warning(f"Creating task {payload['title']!r} failed: {e}")
            self.dispatch(NoticePosted(f"Failed to add task: {e}"))
            return RolledBack(str(e))

        self.load()
        task_id = created.get("id") if isinstance(created, dict) else None
        return Confirmed(str(task_id) if task_id is not None else None)

    # ============== Bulk operations ==============

    def bulk_complete(self, task_ids: list[str]) -> list[MutationResult]:
        results = []
        for task_id in task_ids:
            task = self._state.find(task_id)
            if task is not None and not task.completed:
                results.append(self.set_completed(task_id, True))
        return results

    def bulk_delete(self, task_ids: list[str]) -> list[MutationResult]:
        """Delete one at a time; each deletion finishes before the next starts."""
        return [self.delete_task(task_id) for task_id in task_ids]

    def complete_all(self) -> list[MutationResult]:
        return self.bulk_complete([t.id for t in self._state.tasks if not t.completed])

    def clear_completed(self) -> list[MutationResult]:
        return self.bulk_delete([t.id for t in self._state.tasks if t.completed])
