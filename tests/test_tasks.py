"""Tests for the task model and wire/display conversion."""

from datetime import date, timedelta

import pytest

from taskdash.core.errors import InvalidTaskData
from taskdash.core.tasks import (
    Priority,
    Subtask,
    Task,
    parse_due_date,
    parse_priority,
    parse_tasks,
    priority_from_wire,
    priority_to_wire,
)


@pytest.fixture
def today():
    return date(2025, 1, 15)


@pytest.fixture
def wire_task():
    return {
        "id": 7,
        "title": "Pay rent",
        "description": "Transfer before noon",
        "completed": False,
        "priority": 3,
        "dueDate": "2025-01-20T00:00:00.000Z",
        "tags": ["home", "money"],
        "subtasks": [{"id": 1, "title": "Log in to bank", "completed": True}],
        "project": "Personal",
    }


class TestPriority:
    @pytest.mark.parametrize(
        "wire,expected",
        [(0, Priority.NONE), (1, Priority.LOW), (2, Priority.MEDIUM), (3, Priority.HIGH)],
    )
    def test_known_values(self, wire, expected):
        assert priority_from_wire(wire) is expected

    @pytest.mark.parametrize("wire", [-1, 4, 99, None, "3", 2.0, True])
    def test_unrecognized_values_are_none(self, wire):
        assert priority_from_wire(wire) is Priority.NONE

    def test_round_trip(self):
        for n in range(4):
            display = priority_from_wire(n)
            assert priority_from_wire(priority_to_wire(display)) is display

    def test_labels(self):
        assert Priority.HIGH.label == "High"
        assert Priority.LOW.label == "Low"
        assert Priority.NONE.label == ""

    def test_parse_priority_names(self):
        assert parse_priority("High") is Priority.HIGH
        assert parse_priority(" none ") is Priority.NONE

    def test_parse_priority_rejects_unknown(self):
        with pytest.raises(ValueError):
            parse_priority("urgent")


class TestParseDueDate:
    def test_none_and_empty(self):
        assert parse_due_date(None) is None
        assert parse_due_date("") is None

    def test_plain_date(self):
        assert parse_due_date("2024-01-01") == date(2024, 1, 1)

    def test_timestamp_keeps_calendar_day(self):
        assert parse_due_date("2024-03-05T18:30:00.000Z") == date(2024, 3, 5)

    def test_malformed_string(self):
        with pytest.raises(InvalidTaskData):
            parse_due_date("next tuesday")

    def test_wrong_type(self):
        with pytest.raises(InvalidTaskData):
            parse_due_date(20240101)


class TestTaskFromApi:
    def test_converts_all_fields(self, wire_task):
        task = Task.from_api(wire_task)
        assert task.id == "7"
        assert task.title == "Pay rent"
        assert task.description == "Transfer before noon"
        assert task.completed is False
        assert task.priority is Priority.HIGH
        assert task.due_date == date(2025, 1, 20)
        assert task.tags == ("home", "money")
        assert task.subtasks == (Subtask(id="1", title="Log in to bank", completed=True),)
        assert task.project == "Personal"

    def test_minimal_record(self):
        task = Task.from_api({"id": "a", "title": "Buy milk"})
        assert task.description == ""
        assert task.priority is Priority.NONE
        assert task.due_date is None
        assert task.tags == ()
        assert task.subtasks == ()

    def test_null_optional_fields(self):
        task = Task.from_api(
            {"id": "a", "title": "Buy milk", "description": None, "dueDate": None, "tags": None}
        )
        assert task.description == ""
        assert task.due_date is None
        assert task.tags == ()

    def test_list_is_accepted_as_project(self):
        task = Task.from_api({"id": "a", "title": "Buy milk", "list": "Groceries"})
        assert task.project == "Groceries"

    def test_duplicate_tags_are_kept_in_order(self):
        task = Task.from_api({"id": "a", "title": "x", "tags": ["b", "a", "b"]})
        assert task.tags == ("b", "a", "b")

    def test_malformed_due_date_raises(self, wire_task):
        wire_task["dueDate"] = "not-a-date"
        with pytest.raises(InvalidTaskData) as excinfo:
            Task.from_api(wire_task)
        assert excinfo.value.record is wire_task

    @pytest.mark.parametrize(
        "record",
        [
            {"title": "No id"},
            {"id": "1"},
            {"id": "1", "title": "   "},
            {"id": "1", "title": "x", "tags": "home"},
            {"id": "1", "title": "x", "subtasks": [{"title": "no id"}]},
            {"id": "1", "title": "x", "description": 5},
            {"id": "1", "title": "x", "project": ["home"]},
            {"id": "1", "title": "x", "list": 3},
            {"id": "1", "title": "x", "completed": "false"},
            {"id": "1", "title": "x", "completed": 1},
            {"id": "1", "title": "x", "subtasks": [{"id": "s", "title": "y", "completed": "true"}]},
            "not a dict",
        ],
    )
    def test_invalid_records(self, record):
        with pytest.raises(InvalidTaskData):
            Task.from_api(record)

    def test_to_api(self, wire_task):
        wire = Task.from_api(wire_task).to_api()
        assert wire["id"] == "7"
        assert wire["priority"] == 3
        assert wire["dueDate"] == "2025-01-20"
        assert wire["tags"] == ["home", "money"]
        assert wire["subtasks"] == [{"id": "1", "title": "Log in to bank", "completed": True}]


class TestDueClassification:
    def test_days_until_due(self, today):
        task = Task(id="1", title="t", due_date=today + timedelta(days=3))
        assert task.days_until_due(as_of=today) == 3

    def test_days_until_due_without_date(self, today):
        assert Task(id="1", title="t").days_until_due(as_of=today) is None

    def test_due_today(self, today):
        assert Task(id="1", title="t", due_date=today).is_due_today(as_of=today) is True
        assert Task(id="1", title="t", due_date=today + timedelta(days=1)).is_due_today(as_of=today) is False

    def test_overdue_only_when_open(self, today):
        yesterday = today - timedelta(days=1)
        assert Task(id="1", title="t", due_date=yesterday).is_overdue(as_of=today) is True
        assert Task(id="1", title="t", due_date=yesterday, completed=True).is_overdue(as_of=today) is False
        assert Task(id="1", title="t", due_date=today).is_overdue(as_of=today) is False


class TestSubtaskProgress:
    def test_progress(self):
        task = Task(
            id="1",
            title="t",
            subtasks=(
                Subtask(id="a", title="a", completed=True),
                Subtask(id="b", title="b"),
                Subtask(id="c", title="c"),
            ),
        )
        progress = task.subtask_progress
        assert (progress.total, progress.completed, progress.percentage) == (3, 1, 33)

    def test_no_subtasks(self):
        progress = Task(id="1", title="t").subtask_progress
        assert progress.total == 0
        assert progress.percentage == 0


class TestParseTasks:
    def test_skips_invalid_records(self):
        result = parse_tasks(
            [
                {"id": 1, "title": "Good"},
                {"id": 2, "title": "Bad date", "dueDate": "31/12/2024"},
                {"id": 3, "title": "Also good"},
            ]
        )
        assert [t.id for t in result.tasks] == ["1", "3"]
        assert len(result.rejected) == 1
        assert "Bad date" in str(result.rejected[0].record)

    def test_duplicate_ids_keep_first(self):
        result = parse_tasks([{"id": 1, "title": "First"}, {"id": "1", "title": "Second"}])
        assert [t.title for t in result.tasks] == ["First"]
        assert len(result.rejected) == 1

    def test_empty(self):
        result = parse_tasks([])
        assert result.tasks == []
        assert result.rejected == []
