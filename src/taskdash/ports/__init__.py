"""Ports - interfaces/protocols for external dependencies."""

from .task_repo import TaskRepository
from .token_provider import TokenProvider

__all__ = [
    "TaskRepository",
    "TokenProvider",
]
