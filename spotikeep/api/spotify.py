#!/usr/bin/env python3
"""
🎵 Spotify Web API client for SpotiKeep
Thin request wrappers for the playback, device and playlist endpoints.
Every call first asks the token manager for a fresh bearer token.
"""

import logging
import time
from typing import Any, Dict, List, Optional

import requests

from ..constants import SPOTIFY_API_URL
from .auth import TokenManager
from .errors import (PlaybackError, SpotifyApiError, TransientFetchFailure,
                     error_from_response)
from .http import get_http_session
from .models import Device, PlaybackStatus, PlaylistPage

__all__ = ["PlaybackClient"]

_OK_STATUSES = (200, 201, 202, 204)


class PlaybackClient:
    """Stateless wrapper over the Spotify Web API (besides the borrowed token)."""

    def __init__(
        self,
        token_manager: TokenManager,
        *,
        session: Optional[requests.Session] = None,
        base_url: str = SPOTIFY_API_URL,
    ):
        self._tokens = token_manager
        self._session = session
        self._base_url = base_url.rstrip("/")
        self._logger = logging.getLogger('spotify.api')

    @property
    def session(self) -> requests.Session:
        return self._session if self._session is not None else get_http_session()

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        error_cls: type = SpotifyApiError,
    ) -> requests.Response:
        """Issue an authenticated request; raise ``error_cls`` on any failure.

        Raises:
            AuthError: If no usable token is available (before any network call)
        """
        token = self._tokens.access_token()
        method_upper = method.upper()
        url = f"{self._base_url}{path}"
        start = time.perf_counter()

        try:
            response = self.session.request(
                method_upper,
                url,
                headers={"Authorization": f"Bearer {token}"},
                params=params,
                json=json,
            )
        except requests.RequestException as exc:
            self._logger.warning(
                "spotify.request.error",
                extra={
                    "method": method_upper,
                    "path": path,
                    "elapsed": round(time.perf_counter() - start, 3),
                    "error": exc.__class__.__name__,
                },
            )
            raise error_cls(f"Network error calling Spotify: {exc}") from exc

        if response.status_code not in _OK_STATUSES:
            error = error_from_response(response, error_cls)
            self._logger.warning(
                "spotify.request.rejected",
                extra={"method": method_upper, "path": path, "status": response.status_code, "reason": error.reason},
            )
            raise error
        return response

    @staticmethod
    def _json_body(response: requests.Response) -> Dict[str, Any]:
        if response.status_code == 204 or not response.content:
            return {}
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    # 🎧 Playback status
    def fetch_playback_status(self) -> Optional[PlaybackStatus]:
        """Read live playback state.

        Returns:
            Optional[PlaybackStatus]: None when no player is active (204 / empty body)

        Raises:
            TransientFetchFailure: On any authentication, network or provider error
        """
        try:
            response = self._request("GET", "/me/player")
        except SpotifyApiError as exc:
            raise TransientFetchFailure(str(exc)) from exc

        body = self._json_body(response)
        if not body:
            return None
        return PlaybackStatus.from_payload(body)

    def get_playback_status(self) -> Optional[PlaybackStatus]:
        """Live playback state, or None when it is unknown for any reason."""
        try:
            return self.fetch_playback_status()
        except TransientFetchFailure as exc:
            self._logger.warning("⚠️ Playback status unavailable: %s", exc)
            return None

    # 📱 Devices & playlists
    def get_devices(self) -> List[Device]:
        response = self._request("GET", "/me/player/devices")
        devices = self._json_body(response).get("devices")
        if not isinstance(devices, list):
            return []
        return [Device.from_payload(d) for d in devices if isinstance(d, dict) and d.get("id")]

    def get_playlists(self, limit: int = 50, offset: int = 0) -> PlaylistPage:
        """Fetch one page of the user's playlists.

        Args:
            limit: Page size (Spotify caps this at 50)
            offset: Index of the first playlist
        """
        limit = max(1, min(50, int(limit)))
        offset = max(0, int(offset))
        response = self._request("GET", "/me/playlists", params={"limit": limit, "offset": offset})
        return PlaylistPage.from_payload(self._json_body(response), limit=limit, offset=offset)

    def get_me(self) -> Dict[str, Any]:
        """Profile of the connected account."""
        return self._json_body(self._request("GET", "/me"))

    # ▶️ Playback commands
    def start_playback(self, context_uri: str, device_id: str) -> None:
        """Start ``context_uri`` from the top on ``device_id``.

        Safe to re-issue when the device already plays the context.

        Raises:
            PlaybackError: If the provider rejects the command
            AuthError: If not authenticated
        """
        self._logger.info("▶️ Starting context playback: %s on %s", context_uri, device_id)
        self._request(
            "PUT",
            "/me/player/play",
            params={"device_id": device_id},
            json={"context_uri": context_uri, "position_ms": 0},
            error_cls=PlaybackError,
        )

    def transfer_playback(self, device_id: str, play: bool = False) -> None:
        """Move the active player to ``device_id`` without necessarily starting it."""
        self._logger.info("🔀 Transferring playback to %s (play=%s)", device_id, play)
        self._request(
            "PUT",
            "/me/player",
            json={"device_ids": [device_id], "play": bool(play)},
            error_cls=PlaybackError,
        )

