"""
📚 Library Service - Playlists and devices
==========================================

Lists what the account can play on and stores the user's choices.
"""

from ..api.errors import SpotifyApiError
from ..api.spotify import PlaybackClient
from ..utils.state_store import CredentialStore
from . import BaseService, ServiceResult


class LibraryService(BaseService):
    """Service for playlist/device listings and selections."""

    def __init__(self, store: CredentialStore, client: PlaybackClient):
        super().__init__("library")
        self._store = store
        self._client = client

    def list_playlists(self, limit: int = 50, offset: int = 0) -> ServiceResult:
        """One page of the user's playlists.

        Returns:
            ServiceResult: ``data`` is the ``PlaylistPage``
        """
        try:
            page = self._client.get_playlists(limit=limit, offset=offset)
        except SpotifyApiError as exc:
            return self._handle_spotify_error(exc, "list_playlists")
        return self._success_result(data=page)

    def list_devices(self) -> ServiceResult:
        try:
            devices = self._client.get_devices()
        except SpotifyApiError as exc:
            return self._handle_spotify_error(exc, "list_devices")
        return self._success_result(data=devices)

    def choose_playlist(self, playlist_id: str) -> ServiceResult:
        record = self._store.patch(selected_playlist_id=playlist_id)
        self.logger.info(f"🎶 Playlist selected: {playlist_id}")
        return self._success_result(data=record)

    def choose_device(self, device_id: str) -> ServiceResult:
        """Persist the device choice, then move the player there without starting it."""
        record = self._store.patch(preferred_device_id=device_id)
        self.logger.info(f"📱 Device selected: {device_id}")
        try:
            self._client.transfer_playback(device_id, play=False)
        except SpotifyApiError as exc:
            return self._handle_spotify_error(exc, "choose_device")
        return self._success_result(data=record)

