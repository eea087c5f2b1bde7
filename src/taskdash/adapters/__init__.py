"""Adapters - I/O implementations of ports."""

from .task_api import TaskApiAdapter
from .auth_session import SessionTokenProvider, fetch_jwks, verify_token

__all__ = [
    "TaskApiAdapter",
    "SessionTokenProvider",
    "fetch_jwks",
    "verify_token",
]
