"""Auth adapter - session sign-in, bearer token issuance and verification."""

import logging
import time

import requests
from jose import JWTError, jwt

from taskdash.config import Config, load_config
from taskdash.core.errors import AuthenticationError, ConfigurationError, NetworkError

logger = logging.getLogger(__name__)

SIGN_IN_PATH = "/api/auth/sign-in/email"
TOKEN_PATH = "/api/auth/jwt"
JWKS_PATH = "/api/auth/jwks"
REQUIRED_CLAIMS = ("id", "email", "name")
REFRESH_MARGIN_SECONDS = 300
DEFAULT_TOKEN_LIFETIME = 3600


class SessionTokenProvider:
    """
    Bearer tokens obtained through an email/password session.

    Implements TokenProvider protocol. The session cookie lives in the
    requests.Session; the token is cached and refreshed shortly before it
    expires.
    """

    def __init__(self, config: Config | None = None, session: requests.Session | None = None):
        self.config = config or load_config()
        if not self.config.has_credentials:
            raise ConfigurationError(
                "Missing auth settings. Add APP_URL, AUTH_EMAIL and AUTH_PASSWORD to taskdash.conf"
            )
        self.app_url = self.config.app_url.rstrip("/")
        self._session = session or requests.Session()
        self._token = ""
        self._expires_at = 0.0
        self._signed_in = False

    def _request(self, method: str, path: str, payload: dict | None = None) -> requests.Response:
        try:
            return self._session.request(
                method,
                f"{self.app_url}{path}",
                json=payload,
                timeout=self.config.request_timeout,
            )
        except requests.RequestException as e:
            raise NetworkError(f"Cannot reach auth service at {self.app_url}: {e}") from e

    def sign_in(self) -> None:
        """Start a session with the configured email and password."""
        resp = self._request(
            "POST",
            SIGN_IN_PATH,
            {"email": self.config.auth_email, "password": self.config.auth_password},
        )
        if not resp.ok:
            raise AuthenticationError(f"Sign-in failed (Status: {resp.status_code})", resp.status_code)
        self._signed_in = True
        logger.info(f"Signed in as {self.config.auth_email}")

    def _refresh_token(self) -> None:
        """Exchange the session for a fresh token."""
        if not self._signed_in:
            self.sign_in()

        resp = self._request("GET", TOKEN_PATH)
        if resp.status_code == 401:
            self._signed_in = False
            raise AuthenticationError("Session rejected while requesting a token", 401)
        if not resp.ok:
            raise AuthenticationError(f"Token request failed (Status: {resp.status_code})", resp.status_code)

        try:
            token = resp.json()["token"]
        except (ValueError, KeyError, TypeError) as e:
            raise AuthenticationError("Token response did not contain a token") from e

        try:
            claims = jwt.get_unverified_claims(token)
        except JWTError as e:
            raise AuthenticationError(f"Received a malformed token: {e}") from e

        self._token = token
        self._expires_at = float(claims.get("exp") or time.time() + DEFAULT_TOKEN_LIFETIME)
        logger.debug(f"Obtained token expiring at {self._expires_at:.0f}")

    def bearer_token(self) -> str:
        """Return a token, refreshing it when missing or expiring soon."""
        if not self._token or time.time() >= self._expires_at - REFRESH_MARGIN_SECONDS:
            self._refresh_token()
        return self._token


def fetch_jwks(app_url: str, session: requests.Session | None = None, timeout: float = 10.0) -> dict:
    """Download the public key set the auth service signs tokens with."""
    session = session or requests.Session()
    try:
        resp = session.get(f"{app_url.rstrip('/')}{JWKS_PATH}", timeout=timeout)
    except requests.RequestException as e:
        raise NetworkError(f"Cannot fetch JWKS from {app_url}: {e}") from e
    if not resp.ok:
        raise AuthenticationError(f"JWKS request failed (Status: {resp.status_code})", resp.status_code)
    try:
        return resp.json()
    except ValueError as e:
        raise AuthenticationError("JWKS response is not valid JSON") from e


def verify_token(
    token: str,
    key: dict | str,
    issuer: str,
    audience: str,
    algorithms: list[str] | None = None,
) -> dict:
    """
    Check signature, issuer, audience and expiry of a token.

    `key` is a JWKS document or a shared secret. Returns the claims.
    """
    try:
        claims = jwt.decode(
            token,
            key,
            algorithms=algorithms or ["RS256", "ES256"],
            issuer=issuer,
            audience=audience,
            options={"require_aud": True, "require_iss": True, "require_exp": True},
        )
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        raise AuthenticationError("Invalid or expired token", 401) from e

    missing = [c for c in REQUIRED_CLAIMS if c not in claims]
    if missing:
        raise AuthenticationError(f"Token is missing claims: {', '.join(missing)}", 401)
    return claims
