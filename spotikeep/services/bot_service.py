"""
🤖 Bot Service - Flags and one-shot playback
============================================

Toggles the reconciliation flags and issues the manual "kick".
"""

from typing import Optional

from ..api.errors import SpotifyApiError
from ..api.spotify import PlaybackClient
from ..constants import playlist_context_uri
from ..utils.state_store import CredentialStore
from . import BaseService, ServiceResult


class BotService(BaseService):
    """Service for the bot/interrupt flags and manual playback starts."""

    def __init__(self, store: CredentialStore, client: PlaybackClient):
        super().__init__("bot")
        self._store = store
        self._client = client

    def enable(self) -> ServiceResult:
        """Turn the bot on; a fresh start also forgets any earlier interrupt."""
        record = self._store.patch(bot_enabled=True, user_interrupt=False)
        self.logger.info("🤖 Bot enabled")
        return self._success_result(data=record, message="Bot enabled")

    def disable(self) -> ServiceResult:
        record = self._store.patch(bot_enabled=False)
        self.logger.info("💤 Bot disabled")
        return self._success_result(data=record, message="Bot disabled")

    def set_interrupt(self, flag: bool) -> ServiceResult:
        record = self._store.patch(user_interrupt=bool(flag))
        self.logger.info(f"✋ user_interrupt forced to {bool(flag)}")
        return self._success_result(data={"user_interrupt": record.get("user_interrupt")})

    def kick(self) -> ServiceResult:
        """Start the selected playlist on the selected device once.

        Both selections must be stored; otherwise nothing is sent to Spotify.
        """
        record = self._store.snapshot()
        playlist_id: Optional[str] = record.get("selected_playlist_id")
        device_id: Optional[str] = record.get("preferred_device_id")
        if not playlist_id or not device_id:
            return self._error_result(
                "Select a playlist and a device first",
                error_code="selection_missing",
                data={"selected_playlist_id": playlist_id, "preferred_device_id": device_id},
            )

        context_uri = playlist_context_uri(playlist_id)
        try:
            self._client.start_playback(context_uri, device_id)
        except SpotifyApiError as exc:
            return self._handle_spotify_error(exc, "kick")
        return self._success_result(
            data={"context_uri": context_uri, "device_id": device_id},
            message="Playback started",
        )

    def state(self) -> ServiceResult:
        return self._success_result(data=self._store.snapshot())
