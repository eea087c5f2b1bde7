"""Task repository interface."""

from typing import Protocol


class TaskRepository(Protocol):
    """
    Interface to the remote task API.

    Works on wire-form records; conversion happens in the core. Failures are
    raised as NetworkError or ApiError.
    """

    def fetch_all(self) -> list[dict]:
        """Fetch every task record."""
        ...

    def create(self, fields: dict) -> dict:
        """Create a task and return the stored record."""
        ...

    def update(self, task_id: str, fields: dict) -> dict:
        """Send the changed fields of a task and return the stored record."""
        ...

    def delete(self, task_id: str) -> None:
        """Delete a task."""
        ...
