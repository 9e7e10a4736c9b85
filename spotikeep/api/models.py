"""
Typed views over Spotify Web API payloads.

The provider omits ``context``, ``device`` and ``item`` when nothing is
playing, so every nested field is optional.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


@dataclass(frozen=True)
class PlaybackStatus:
    """Live playback state as reported by ``GET /me/player``."""
    is_playing: bool
    context_uri: Optional[str] = None
    device_id: Optional[str] = None
    device_name: Optional[str] = None
    device_is_active: Optional[bool] = None
    item_name: Optional[str] = None
    progress_ms: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "PlaybackStatus":
        context = _as_dict(payload.get("context"))
        device = _as_dict(payload.get("device"))
        item = _as_dict(payload.get("item"))

        is_active = device.get("is_active")
        progress = payload.get("progress_ms")
        return cls(
            is_playing=bool(payload.get("is_playing", False)),
            context_uri=_as_str(context.get("uri")),
            device_id=_as_str(device.get("id")),
            device_name=_as_str(device.get("name")),
            device_is_active=is_active if isinstance(is_active, bool) else None,
            item_name=_as_str(item.get("name")),
            progress_ms=progress if isinstance(progress, int) else None,
        )

    def is_on_device(self, device_id: str) -> bool:
        return self.device_id is not None and self.device_id == device_id

    def is_in_context(self, context_uri: str) -> bool:
        return self.context_uri is not None and self.context_uri == context_uri


@dataclass(frozen=True)
class Device:
    """A Spotify Connect device."""
    id: str
    name: str
    type: str = "Unknown"
    is_active: bool = False
    volume_percent: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Device":
        volume = payload.get("volume_percent")
        return cls(
            id=str(payload.get("id") or ""),
            name=str(payload.get("name") or "Unnamed device"),
            type=str(payload.get("type") or "Unknown"),
            is_active=bool(payload.get("is_active", False)),
            volume_percent=volume if isinstance(volume, int) else None,
        )


@dataclass(frozen=True)
class Playlist:
    """A playlist owned or followed by the user."""
    id: str
    name: str
    uri: str
    track_count: int = 0
    owner: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Playlist":
        playlist_id = str(payload.get("id") or "")
        tracks = _as_dict(payload.get("tracks"))
        owner = _as_dict(payload.get("owner"))
        total = tracks.get("total")
        return cls(
            id=playlist_id,
            name=str(payload.get("name") or "Untitled playlist"),
            uri=str(payload.get("uri") or f"spotify:playlist:{playlist_id}"),
            track_count=total if isinstance(total, int) else 0,
            owner=_as_str(owner.get("display_name")),
        )


@dataclass(frozen=True)
class PlaylistPage:
    """One page of ``GET /me/playlists``."""
    items: List[Playlist] = field(default_factory=list)
    total: int = 0
    limit: int = 50
    offset: int = 0
    has_next: bool = False

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], *, limit: int, offset: int) -> "PlaylistPage":
        raw_items = payload.get("items")
        items = [
            Playlist.from_payload(item)
            for item in (raw_items if isinstance(raw_items, list) else [])
            if isinstance(item, dict) and item.get("id")
        ]
        total = payload.get("total")
        return cls(
            items=items,
            total=total if isinstance(total, int) else len(items),
            limit=limit,
            offset=offset,
            has_next=bool(payload.get("next")),
        )

    @property
    def next_offset(self) -> Optional[int]:
        return self.offset + self.limit if self.has_next else None

    @property
    def previous_offset(self) -> Optional[int]:
        return max(0, self.offset - self.limit) if self.offset > 0 else None
