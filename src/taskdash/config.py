"""Configuration management for Taskdash."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from .core.errors import ConfigurationError

logger = logging.getLogger(__name__)

TASKDASH_HOME = Path(os.environ.get("TASKDASH_HOME", Path.home() / "taskdash"))
CONFIG_FILE = TASKDASH_HOME / "config" / "taskdash.conf"

ENV_OVERRIDES = {
    "TASKDASH_API_URL": "api_url",
    "TASKDASH_APP_URL": "app_url",
    "TASKDASH_AUTH_EMAIL": "auth_email",
    "TASKDASH_AUTH_PASSWORD": "auth_password",
}


@dataclass
class Config:
    """Taskdash configuration."""

    api_url: str = ""
    app_url: str = ""
    auth_email: str = ""
    auth_password: str = ""
    request_timeout: float = 10.0
    jwt_algorithms: list[str] = field(default_factory=lambda: ["RS256", "ES256"])

    def require_api_url(self) -> str:
        """Return the task API base URL, or fail before any request is made."""
        if not self.api_url:
            raise ConfigurationError(
                "Task API URL is not configured. "
                f"Set API_URL in {CONFIG_FILE} or the TASKDASH_API_URL environment variable."
            )
        return self.api_url.rstrip("/")

    @property
    def has_credentials(self) -> bool:
        return bool(self.app_url and self.auth_email and self.auth_password)


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from an unquoted value."""
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None, environ: dict | None = None) -> Config:
    """Load configuration from taskdash.conf, then apply environment overrides."""
    config = Config()
    path = path or CONFIG_FILE
    environ = os.environ if environ is None else environ

    if path.exists():
        for line in path.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            if "=" not in line:
                continue

            key, _, value = line.partition("=")
            key = key.strip().lower()
            value = _unquote(value.strip())

            match key:
                case "api_url":
                    config.api_url = value
                case "app_url":
                    config.app_url = value
                case "auth_email":
                    config.auth_email = value
                case "auth_password":
                    config.auth_password = value
                case "request_timeout":
                    try:
                        config.request_timeout = float(value)
                    except ValueError:
                        logger.warning(f"Invalid REQUEST_TIMEOUT {value!r}, keeping {config.request_timeout}")
                case "jwt_algorithms":
                    algorithms = [a.strip() for a in value.split(",") if a.strip()]
                    if algorithms:
                        config.jwt_algorithms = algorithms

    for env_name, attr in ENV_OVERRIDES.items():
        value = environ.get(env_name, "").strip()
        if value:
            setattr(config, attr, value)

    return config
