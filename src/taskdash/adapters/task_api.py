"""Task API adapter - HTTP client for the remote task service."""

import logging

import requests

from taskdash.config import Config, load_config
from taskdash.core.errors import ApiError, NetworkError
from taskdash.ports.token_provider import TokenProvider

logger = logging.getLogger(__name__)


class TaskApiAdapter:
    """
    Task API adapter.

    Implements TaskRepository protocol. Converts transport failures into
    NetworkError and non-2xx answers into ApiError. No business logic -
    just I/O.
    """

    def __init__(
        self,
        config: Config | None = None,
        token_provider: TokenProvider | None = None,
        session: requests.Session | None = None,
    ):
        self.config = config or load_config()
        self.base_url = self.config.require_api_url()
        self.token_provider = token_provider
        self._session = session or requests.Session()

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self.token_provider is not None:
            headers["Authorization"] = f"Bearer {self.token_provider.bearer_token()}"
        return headers

    def _api_request(self, method: str, endpoint: str, payload: dict | None = None) -> requests.Response:
        """Make an API request, translating failures into board errors."""
        url = f"{self.base_url}{endpoint}"
        logger.debug(f"{method} {url}")
        try:
            resp = self._session.request(
                method,
                url,
                json=payload,
                headers=self._headers(),
                timeout=self.config.request_timeout,
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            logger.error(f"Cannot reach task API at {self.base_url}: {e}")
            raise NetworkError(
                f"Cannot connect to API at {self.base_url}. Make sure the backend is running."
            ) from e
        except requests.RequestException as e:
            raise NetworkError(f"Request to {url} failed: {e}") from e

        if not resp.ok:
            body = (resp.text or "")[:200]
            logger.error(f"{method} {url} failed with {resp.status_code}: {body}")
            raise ApiError(f"{method} {endpoint} failed (Status: {resp.status_code})", resp.status_code)
        return resp

    def _json(self, resp: requests.Response):
        try:
            return resp.json()
        except ValueError as e:
            raise ApiError("Task API returned invalid JSON", resp.status_code) from e

    def fetch_all(self) -> list[dict]:
        """Fetch every task record."""
        data = self._json(self._api_request("GET", "/tasks"))
        if not isinstance(data, list):
            raise ApiError(f"Expected a list of tasks, got {type(data).__name__}")
        logger.debug(f"Fetched {len(data)} task records")
        return data

    def create(self, fields: dict) -> dict:
        """Create a task."""
        return self._json(self._api_request("POST", "/tasks", fields))

    def update(self, task_id: str, fields: dict) -> dict:
        """Send changed fields of a task."""
        resp = self._api_request("PUT", f"/tasks/{task_id}", fields)
        if not resp.content:
            return {}
        return self._json(resp)

    def delete(self, task_id: str) -> None:
        """Delete a task."""
        self._api_request("DELETE", f"/tasks/{task_id}")
