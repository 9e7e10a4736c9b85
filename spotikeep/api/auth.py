#!/usr/bin/env python3
"""
🎟️ Spotify OAuth token lifecycle for SpotiKeep
- Authorization URL construction
- Authorization-code exchange
- Refresh-token grant whenever the stored access token is expired

Tokens are never cached outside the credential store: every successful
exchange or refresh is written through before it is used.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Optional
from urllib.parse import urlencode

import requests

from ..constants import SPOTIFY_ACCOUNTS_URL, TOKEN_SAFETY_MARGIN_SECONDS
from ..utils.state_store import CredentialStore
from .errors import AuthError, error_from_response
from .http import get_http_session

_TOKEN_ENDPOINT = f"{SPOTIFY_ACCOUNTS_URL}/api/token"
_AUTHORIZE_ENDPOINT = f"{SPOTIFY_ACCOUNTS_URL}/authorize"


@dataclass
class TokenResponse:
    """Normalized token response from the Spotify accounts service."""
    access_token: str
    expires_in: int
    refresh_token: Optional[str] = None
    scope: Optional[str] = None
    token_type: Optional[str] = None
    received_at: float = field(default_factory=time.time)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], received_at: float) -> "TokenResponse":
        token = payload.get("access_token")
        if not token:
            raise AuthError("Token response missing access_token", payload=payload)
        try:
            expires_in = int(payload.get("expires_in", 3600))
        except (TypeError, ValueError):
            raise AuthError("Token response has invalid expires_in", payload=payload)
        return cls(
            access_token=token,
            expires_in=expires_in,
            refresh_token=payload.get("refresh_token"),
            scope=payload.get("scope"),
            token_type=payload.get("token_type"),
            received_at=received_at,
        )

    def expires_at(self, safety_margin: float = TOKEN_SAFETY_MARGIN_SECONDS) -> float:
        """Absolute expiry with ``safety_margin`` seconds taken off."""
        return self.received_at + (self.expires_in - safety_margin)


class TokenManager:
    """
    Owns the OAuth2 code exchange and refresh for a single user.

    Refreshes are serialized so that a reconciliation tick and a control
    request racing on an expired token trigger only one refresh grant.
    """

    def __init__(
        self,
        store: CredentialStore,
        *,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.time,
        safety_margin: float = TOKEN_SAFETY_MARGIN_SECONDS,
    ):
        self._store = store
        self._client_id = client_id
        self._client_secret = client_secret
        self._redirect_uri = redirect_uri
        self._session = session
        self._clock = clock
        self._safety_margin = safety_margin
        self._refresh_lock = threading.Lock()
        self._logger = logging.getLogger('spotify.auth')

    @property
    def session(self) -> requests.Session:
        return self._session if self._session is not None else get_http_session()

    def authorize_url(self, scopes: Iterable[str], state: str) -> str:
        """Build the provider authorization URL for the code flow."""
        params = {
            "client_id": self._client_id,
            "response_type": "code",
            "redirect_uri": self._redirect_uri,
            "scope": " ".join(scopes),
            "state": state,
            "show_dialog": "false",
        }
        return f"{_AUTHORIZE_ENDPOINT}?{urlencode(params)}"

    def _request_token(self, data: Dict[str, str]) -> TokenResponse:
        grant = data.get("grant_type", "unknown")
        if not (self._client_id and self._client_secret):
            raise AuthError("Spotify client credentials are not configured")

        start = time.perf_counter()
        try:
            response = self.session.post(
                _TOKEN_ENDPOINT,
                data=data,
                auth=(self._client_id, self._client_secret),
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except requests.RequestException as exc:
            self._logger.error(
                "token.request.network_error",
                extra={"grant_type": grant, "error": exc.__class__.__name__},
            )
            raise AuthError(f"Network error contacting Spotify accounts: {exc}") from exc

        elapsed = round(time.perf_counter() - start, 3)
        if not 200 <= response.status_code < 300:
            error = error_from_response(response, AuthError)
            self._logger.error(
                "token.request.http_error",
                extra={"grant_type": grant, "status": response.status_code, "elapsed": elapsed},
            )
            raise AuthError(error.message, status=error.status, payload=error.payload, reason=error.reason)

        try:
            payload = response.json()
        except ValueError as exc:
            raise AuthError("Token response was not valid JSON") from exc
        if not isinstance(payload, dict):
            raise AuthError("Token response was not a JSON object")

        self._logger.info("token.request.ok", extra={"grant_type": grant, "elapsed": elapsed})
        return TokenResponse.from_payload(payload, received_at=self._clock())

    def exchange_code(self, code: str) -> None:
        """
        Exchange an authorization code for tokens and persist them.

        Raises:
            AuthError: If the provider rejects the code or cannot be reached
        """
        token = self._request_token(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self._redirect_uri,
            }
        )
        if not token.refresh_token:
            raise AuthError("Token response missing refresh_token")

        self._store.patch(
            access_token=token.access_token,
            refresh_token=token.refresh_token,
            token_expires_at=token.expires_at(self._safety_margin),
        )
        self._logger.info("✅ Spotify account connected")

    def _is_fresh(self, record: Dict[str, Any]) -> bool:
        expires_at = record.get("token_expires_at") or 0
        return bool(record.get("access_token")) and self._clock() < float(expires_at)

    def ensure_fresh_token(self) -> None:
        """
        Make sure the stored access token is usable.

        No-op without a refresh token (simply unauthenticated) or while the
        access token is still before its expiry. Otherwise performs exactly
        one refresh-token grant.

        Raises:
            AuthError: If the refresh grant fails
        """
        record = self._store.snapshot()
        if not record.get("refresh_token") or self._is_fresh(record):
            return

        with self._refresh_lock:
            # Another thread may have refreshed while we waited
            record = self._store.snapshot()
            if not record.get("refresh_token") or self._is_fresh(record):
                return

            refresh_token = record["refresh_token"]
            self._logger.debug("🔄 Refreshing Spotify access token")
            token = self._request_token(
                {"grant_type": "refresh_token", "refresh_token": refresh_token}
            )
            self._store.patch(
                access_token=token.access_token,
                refresh_token=token.refresh_token or refresh_token,
                token_expires_at=token.expires_at(self._safety_margin),
            )

    def access_token(self) -> str:
        """
        Return a usable bearer token, refreshing first if needed.

        Raises:
            AuthError: If not authenticated or the refresh failed
        """
        self.ensure_fresh_token()
        record = self._store.snapshot()
        # Without a refresh token an expired access token cannot be renewed
        if not self._is_fresh(record):
            raise AuthError("Not authenticated with Spotify")
        return record["access_token"]

    def token_state(self) -> Dict[str, Any]:
        """Summarize the stored token for diagnostics (never includes secrets)."""
        record = self._store.snapshot()
        expires_at = record.get("token_expires_at")
        expires_in = None
        if expires_at is not None:
            expires_in = int(float(expires_at) - self._clock())
        return {
            "authenticated": bool(record.get("refresh_token")),
            "has_access_token": bool(record.get("access_token")),
            "expires_in_seconds": expires_in,
            "is_expired": not self._is_fresh(record),
        }


__all__ = ["TokenManager", "TokenResponse"]
