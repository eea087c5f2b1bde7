"""Tests for the board reducer and list derivation."""

from dataclasses import replace
from datetime import date

import pytest

from taskdash.core.filters import TaskFilter
from taskdash.core.sorting import SortKey
from taskdash.core.tasks import Task, parse_tasks
from taskdash.core.view import (
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
    ViewStatus,
    derive,
    reduce,
)


@pytest.fixture
def today():
    return date(2024, 1, 1)


@pytest.fixture
def raw_tasks():
    records = [
        {"id": "1", "title": "Pay rent", "priority": 3, "completed": False, "dueDate": "2024-01-01"},
        {"id": "2", "title": "Buy milk", "priority": 0, "completed": True, "dueDate": None},
    ]
    return tuple(parse_tasks(records).tasks)


@pytest.fixture
def loaded(raw_tasks):
    return reduce(BoardState(), TasksLoaded(raw_tasks, ticket=1))


def run(state, *actions):
    for action in actions:
        state = reduce(state, action)
    return state


class TestDerive:
    def test_loading_before_first_fetch(self, today):
        view = derive(BoardState(), today)
        assert view.status is ViewStatus.LOADING
        assert view.tasks == ()

    def test_pending_filter_sorted_by_priority(self, loaded, today):
        state = run(loaded, FilterChanged(TaskFilter.PENDING), SortChanged(SortKey.PRIORITY))
        view = derive(state, today)
        assert view.status is ViewStatus.READY
        assert [t.id for t in view.tasks] == ["1"]

    def test_search_without_other_filters(self, loaded, today):
        view = derive(reduce(loaded, SearchChanged("milk")), today)
        assert [t.id for t in view.tasks] == ["2"]

    def test_tag_filter(self, today):
        tasks = (Task(id="1", title="a", tags=("x",)), Task(id="2", title="b", tags=("y",)))
        state = run(BoardState(), TasksLoaded(tasks, ticket=1), TagChanged("y"))
        assert [t.id for t in derive(state, today).tasks] == ["2"]

    def test_derivation_is_idempotent(self, loaded, today):
        state = run(loaded, SearchChanged("a"), SortChanged(SortKey.TITLE))
        assert derive(state, today) == derive(state, today)

    def test_error_hides_the_list(self, loaded, today):
        state = reduce(loaded, LoadFailed(BoardError("network", "Cannot connect"), ticket=2))
        view = derive(state, today)
        assert view.status is ViewStatus.ERROR
        assert view.tasks == ()
        assert view.error.message == "Cannot connect"

    def test_stats_and_tags_use_raw_tasks(self, today):
        tasks = (
            Task(id="1", title="a", tags=("x", "y"), due_date=today),
            Task(id="2", title="b", tags=("y", "z"), completed=True),
        )
        state = run(BoardState(), TasksLoaded(tasks, ticket=1), FilterChanged(TaskFilter.COMPLETED))
        view = derive(state, today)
        assert view.stats.total == 2
        assert view.stats.due_today == 1
        assert view.tags == ("x", "y", "z")

    def test_raw_state_is_untouched(self, loaded, today):
        state = reduce(loaded, SortChanged(SortKey.TITLE))
        derive(state, today)
        assert [t.id for t in state.tasks] == ["1", "2"]


class TestLoading:
    def test_load_started_clears_error(self):
        state = BoardState(error=BoardError("network", "down"))
        state = reduce(state, LoadStarted())
        assert state.loading is True
        assert state.error is None

    def test_tasks_loaded_replaces_wholesale(self, loaded):
        new = (Task(id="9", title="Fresh"),)
        state = reduce(loaded, TasksLoaded(new, rejected=2, ticket=2))
        assert state.tasks == new
        assert state.rejected == 2
        assert state.loaded is True

    def test_stale_result_is_discarded(self, loaded):
        newer = reduce(loaded, TasksLoaded((Task(id="9", title="Newer"),), ticket=5))
        stale = reduce(newer, TasksLoaded((Task(id="8", title="Older"),), ticket=4))
        assert stale is newer

    def test_stale_failure_is_discarded(self, loaded):
        newer = reduce(loaded, TasksLoaded(loaded.tasks, ticket=5))
        assert reduce(newer, LoadFailed(BoardError("api", "boom"), ticket=3)) is newer

    def test_selection_dropped_when_task_disappears(self, loaded):
        state = reduce(loaded, TaskSelected("1"))
        state = reduce(state, TasksLoaded((Task(id="2", title="Buy milk"),), ticket=2))
        assert state.selected_id is None


class TestSelection:
    def test_select_existing(self, loaded, today):
        state = reduce(loaded, TaskSelected("2"))
        assert derive(state, today).selected.title == "Buy milk"

    def test_select_unknown_is_ignored(self, loaded):
        assert reduce(loaded, TaskSelected("nope")) is loaded

    def test_clear(self, loaded):
        state = run(loaded, TaskSelected("1"), SelectionCleared())
        assert state.selected_id is None


class TestLocalWrites:
    def test_task_replaced(self, loaded):
        updated = replace(loaded.tasks[0], completed=True)
        state = reduce(loaded, TaskReplaced(updated))
        assert state.tasks[0].completed is True
        assert loaded.tasks[0].completed is False

    def test_notices(self, loaded):
        state = run(loaded, NoticePosted("first"), NoticePosted("second"))
        assert state.notices == ("first", "second")
        assert reduce(state, NoticesCleared()).notices == ()

    def test_empty_tag_clears_filter(self, loaded):
        assert reduce(loaded, TagChanged("")).active_tag is None


def test_unknown_action_raises():
    with pytest.raises(TypeError):
        reduce(BoardState(), object())
