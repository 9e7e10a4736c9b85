"""Spotify accounts and Web API access."""

from .auth import TokenManager
from .errors import AuthError, PlaybackError, SpotifyApiError, TransientFetchFailure
from .spotify import PlaybackClient

__all__ = [
    "AuthError",
    "PlaybackClient",
    "PlaybackError",
    "SpotifyApiError",
    "TokenManager",
    "TransientFetchFailure",
]
