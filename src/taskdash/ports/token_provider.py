"""Bearer token provider interface."""

from typing import Protocol


class TokenProvider(Protocol):
    """Interface for whatever hands out tokens for the task API."""

    def bearer_token(self) -> str:
        """Return a currently valid bearer token."""
        ...
