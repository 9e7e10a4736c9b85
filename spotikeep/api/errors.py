"""
🚨 Spotify error taxonomy

- ``AuthError``: OAuth exchange/refresh failed, or no credentials are stored
- ``PlaybackError``: the provider rejected a playback command
- ``TransientFetchFailure``: live status could not be read; callers skip
"""

from typing import Any, Dict, Optional

import requests


class SpotifyApiError(Exception):
    """Base class for failures talking to Spotify."""

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        payload: Optional[Dict[str, Any]] = None,
        reason: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.payload = payload or {}
        self.reason = reason

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"message": self.message}
        if self.status is not None:
            data["status"] = self.status
        if self.reason:
            data["reason"] = self.reason
        if self.payload:
            data["provider"] = self.payload
        return data


class AuthError(SpotifyApiError):
    """OAuth failure or missing credentials."""


class PlaybackError(SpotifyApiError):
    """Playback command rejected (no active device, restricted action, ...)."""


class TransientFetchFailure(Exception):
    """Playback status unavailable this tick; treated as absence of information."""


def _parse_payload(response: requests.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        text = (response.text or "").strip()
        return {"error": text} if text else {}
    return body if isinstance(body, dict) else {"error": body}


def error_from_response(response: requests.Response, error_cls: type = SpotifyApiError) -> SpotifyApiError:
    """Build an exception from a non-2xx provider response.

    Spotify uses two error shapes:
    - Web API: ``{"error": {"status": 404, "message": "...", "reason": "NO_ACTIVE_DEVICE"}}``
    - Accounts: ``{"error": "invalid_grant", "error_description": "..."}``

    A ``401`` always maps to ``AuthError`` regardless of ``error_cls``.
    """
    payload = _parse_payload(response)
    status = response.status_code
    message: Optional[str] = None
    reason: Optional[str] = None

    error = payload.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        reason = error.get("reason")
    elif isinstance(error, str):
        reason = error
        message = payload.get("error_description") or error

    if not message:
        message = f"Spotify request failed with status {status}"

    if status == 401:
        error_cls = AuthError
    return error_cls(message, status=status, payload=payload, reason=reason)


__all__ = [
    "AuthError",
    "PlaybackError",
    "SpotifyApiError",
    "TransientFetchFailure",
    "error_from_response",
]
