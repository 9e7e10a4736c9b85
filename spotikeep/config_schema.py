"""
Pydantic models for SpotiKeep settings and the persisted credential record

Settings come from the environment (see ``config.py``); the record is the
single JSON document written by the credential store.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import DEFAULT_MONITOR_INTERVAL_SECONDS, DEFAULT_PORT


class Settings(BaseModel):
    """Runtime settings for SpotiKeep.

    Example:
        >>> settings = Settings(client_id="abc", client_secret="xyz", monitor_interval=30)
        >>> settings.redirect_uri
        'http://localhost:10000/callback'
    """

    client_id: str = Field(default="", description="Spotify application client id")
    client_secret: str = Field(default="", description="Spotify application client secret")
    redirect_uri: str = Field(default="", description="OAuth redirect URI registered with Spotify")
    base_url: str = Field(default="", description="Public base URL of this service")
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535, description="Listen port")
    monitor_interval: float = Field(
        default=DEFAULT_MONITOR_INTERVAL_SECONDS,
        gt=0,
        description="Reconciliation tick interval in seconds",
    )
    preferred_device_id: Optional[str] = Field(default=None, description="Fallback device id")
    state_path: str = Field(default="storage.json", description="Path of the persisted record")
    secret_key: Optional[str] = Field(default=None, description="Flask session signing key")
    debug: bool = Field(default=False, description="Run the Flask development server")
    log_level: str = Field(default="INFO", pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    model_config = {
        "str_strip_whitespace": True,
    }

    @field_validator("preferred_device_id", "secret_key")
    @classmethod
    def empty_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat blank environment values as unset."""
        if v is None or not v.strip():
            return None
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @model_validator(mode="after")
    def fill_urls(self) -> "Settings":
        """Derive base and redirect URLs from the port when not given."""
        if not self.base_url:
            self.base_url = f"http://localhost:{self.port}"
        self.base_url = self.base_url.rstrip("/")
        if not self.redirect_uri:
            self.redirect_uri = f"{self.base_url}/callback"
        return self

    @property
    def has_client_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)


class CredentialRecord(BaseModel):
    """Schema of the persisted credential/session record.

    Every field is optional; a fresh install starts with an empty record.
    Unknown keys are kept so older or newer files round-trip unchanged.
    """

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    token_expires_at: Optional[float] = Field(default=None, description="Unix timestamp (seconds)")
    selected_playlist_id: Optional[str] = None
    preferred_device_id: Optional[str] = None
    bot_enabled: Optional[bool] = None
    user_interrupt: Optional[bool] = None
    account_name: Optional[str] = Field(default=None, description="Display name cached at login")

    model_config = {
        "extra": "allow",
    }

    def to_dict(self) -> Dict[str, Any]:
        """Serialize without the fields that were never set."""
        return self.model_dump(exclude_unset=True, mode="json")


def validate_record_dict(record: Dict[str, Any]) -> Dict[str, Any]:
    """Validate a raw record dictionary loaded from disk.

    Args:
        record: Raw JSON object

    Returns:
        Normalized record dictionary

    Raises:
        ValueError: If a known field has the wrong type
    """
    if not isinstance(record, dict):
        raise ValueError("Credential record must be a JSON object")
    try:
        return CredentialRecord(**record).to_dict()
    except Exception as e:
        raise ValueError(f"Credential record validation failed: {e}")
