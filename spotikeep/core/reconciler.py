"""Level-triggered playback reconciliation.

- Compares live playback against the selected playlist and device
- Detects manual user playback and backs off (``user_interrupt``)
- Resumes the target context once the user's own playback stops

Each tick works from one snapshot of the credential record; a flag flipped
by a request handler mid-tick is seen on the next tick.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from ..api.errors import SpotifyApiError
from ..api.models import PlaybackStatus
from ..api.spotify import PlaybackClient
from ..constants import playlist_context_uri
from ..utils.logger import log_structured
from ..utils.state_store import CredentialStore, resolve_flag

_logger = logging.getLogger("spotikeep.reconciler")

INTERRUPT_MESSAGE = "Detected manual user playback; bot paused itself."


class TickOutcome(str, enum.Enum):
    DISABLED = "disabled"
    NO_DEVICE = "no_device"
    NO_PLAYLIST = "no_playlist"
    NO_STATUS = "no_status"
    INTERRUPT_DETECTED = "interrupt_detected"
    INTERRUPTED_WAITING = "interrupted_waiting"
    RESUMED = "resumed"
    REASSERTED = "reasserted"
    IN_SYNC = "in_sync"


@dataclass
class TickResult:
    """What a single tick decided and whether its corrective call went through."""
    outcome: TickOutcome
    device_id: Optional[str] = None
    context_uri: Optional[str] = None
    status: Optional[PlaybackStatus] = None
    error: Optional[str] = None


class Reconciler:
    """Runs one reconciliation tick against the store and the playback client."""

    def __init__(
        self,
        store: CredentialStore,
        client: PlaybackClient,
        *,
        fallback_device_id: Optional[str] = None,
    ):
        self._store = store
        self._client = client
        self._fallback_device_id = fallback_device_id

    def _resolve_device(self, record: Dict[str, Any]) -> Optional[str]:
        return record.get("preferred_device_id") or self._fallback_device_id or None

    def tick(self) -> TickResult:
        """Run one tick. Never raises for provider failures.

        Returns:
            TickResult: The decision taken and the error of a failed command, if any
        """
        record = self._store.snapshot()
        if not resolve_flag(record, "bot_enabled"):
            return TickResult(TickOutcome.DISABLED)

        device_id = self._resolve_device(record)
        if not device_id:
            return TickResult(TickOutcome.NO_DEVICE)

        playlist_id = record.get("selected_playlist_id")
        if not playlist_id:
            return TickResult(TickOutcome.NO_PLAYLIST, device_id=device_id)

        target = playlist_context_uri(playlist_id)
        status = self._client.get_playback_status()
        if status is None:
            return TickResult(TickOutcome.NO_STATUS, device_id=device_id, context_uri=target)

        interrupted = resolve_flag(record, "user_interrupt")
        result = TickResult(TickOutcome.IN_SYNC, device_id=device_id, context_uri=target, status=status)

        if interrupted:
            if status.is_playing:
                result.outcome = TickOutcome.INTERRUPTED_WAITING
                return result
            self._store.patch(user_interrupt=False)
            log_structured(_logger, logging.INFO, "▶️ User playback stopped; resuming target context",
                           device_id=device_id, context_uri=target)
            result.outcome = TickOutcome.RESUMED
            result.error = self._start(target, device_id)
            return result

        if status.is_playing and not status.is_in_context(target):
            self._store.patch(user_interrupt=True)
            log_structured(_logger, logging.INFO, INTERRUPT_MESSAGE,
                           device_id=status.device_id, context_uri=status.context_uri)
            result.outcome = TickOutcome.INTERRUPT_DETECTED
            return result

        if not status.is_playing or not status.is_on_device(device_id) or not status.is_in_context(target):
            log_structured(_logger, logging.INFO, "🔁 Re-asserting target playback",
                           device_id=device_id, context_uri=target,
                           live_device=status.device_id, is_playing=status.is_playing)
            result.outcome = TickOutcome.REASSERTED
            result.error = self._start(target, device_id)
            return result

        return result

    def _start(self, context_uri: str, device_id: str) -> Optional[str]:
        try:
            self._client.start_playback(context_uri, device_id)
        except (SpotifyApiError, requests.RequestException) as exc:
            log_structured(_logger, logging.WARNING, "⚠️ Corrective playback failed",
                           device_id=device_id, context_uri=context_uri, error=str(exc))
            return str(exc)
        return None


__all__ = ["INTERRUPT_MESSAGE", "Reconciler", "TickOutcome", "TickResult"]
