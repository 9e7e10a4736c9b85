"""Central constants for SpotiKeep (light-weight, no runtime dependencies).

Only put small, stable primitives here, not runtime or config dependent values.
"""

SPOTIFY_ACCOUNTS_URL = "https://accounts.spotify.com"
SPOTIFY_API_URL = "https://api.spotify.com/v1"

# Seconds subtracted from ``expires_in`` so no request runs on a token expiring mid-flight
TOKEN_SAFETY_MARGIN_SECONDS = 60

DEFAULT_MONITOR_INTERVAL_SECONDS = 20.0
DEFAULT_PORT = 10000

OAUTH_SCOPES = (
    "user-read-playback-state",
    "user-modify-playback-state",
    "user-read-currently-playing",
    "playlist-read-private",
    "playlist-read-collaborative",
)

PLAYLIST_CONTEXT_PREFIX = "spotify:playlist:"


def playlist_context_uri(playlist_id: str) -> str:
    """Return the context URI Spotify uses for ``playlist_id``."""
    return f"{PLAYLIST_CONTEXT_PREFIX}{playlist_id}"
