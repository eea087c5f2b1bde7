"""In-memory stand-ins for the task API."""

import copy

from taskdash.core.errors import ApiError, NetworkError


class FakeTaskApi:
    """
    Implements TaskRepository over a list of wire-form records.

    `fail_updates` / `fail_deletes` / `fail_fetch` make the next calls raise,
    `calls` records every request for assertions.
    """

    def __init__(self, records: list[dict] | None = None):
        self.records = copy.deepcopy(records or [])
        self.calls: list[tuple] = []
        self.fail_fetch: Exception | None = None
        self.fail_updates: Exception | None = None
        self.fail_deletes: Exception | None = None
        self.fail_creates: Exception | None = None
        self._next_id = 100

    def _find(self, task_id: str) -> dict:
        for record in self.records:
            if str(record["id"]) == task_id:
                return record
        raise ApiError(f"Task {task_id} not found", 404)

    def fetch_all(self) -> list[dict]:
        self.calls.append(("GET",))
        if self.fail_fetch:
            raise self.fail_fetch
        return copy.deepcopy(self.records)

    def create(self, fields: dict) -> dict:
        self.calls.append(("POST", fields))
        if self.fail_creates:
            raise self.fail_creates
        record = dict(fields, id=str(self._next_id))
        self._next_id += 1
        self.records.append(record)
        return copy.deepcopy(record)

    def update(self, task_id: str, fields: dict) -> dict:
        self.calls.append(("PUT", task_id, fields))
        if self.fail_updates:
            raise self.fail_updates
        record = self._find(task_id)
        record.update(copy.deepcopy(fields))
        return copy.deepcopy(record)

    def delete(self, task_id: str) -> None:
        self.calls.append(("DELETE", task_id))
        if self.fail_deletes:
            raise self.fail_deletes
        record = self._find(task_id)
        self.records.remove(record)


def unreachable() -> NetworkError:
    return NetworkError("Cannot connect to API at http://api.test. Make sure the backend is running.")
