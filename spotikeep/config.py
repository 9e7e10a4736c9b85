"""
Centralized configuration management for SpotiKeep
Reads environment variables (optionally from a .env file) and validates them
against the pydantic ``Settings`` schema.
"""

import logging
import os
from typing import Dict, Mapping, Optional

from dotenv import load_dotenv

from .config_schema import Settings

# Environment variable -> Settings field
ENV_MAP: Dict[str, str] = {
    "SPOTIFY_CLIENT_ID": "client_id",
    "SPOTIFY_CLIENT_SECRET": "client_secret",
    "SPOTIFY_REDIRECT_URI": "redirect_uri",
    "BASE_URL": "base_url",
    "PORT": "port",
    "MONITOR_INTERVAL": "monitor_interval",
    "PREFERRED_DEVICE_ID": "preferred_device_id",
    "SPOTIKEEP_HOST": "host",
    "SPOTIKEEP_STATE_PATH": "state_path",
    "SPOTIKEEP_DEBUG": "debug",
    "SPOTIKEEP_LOG_LEVEL": "log_level",
    "FLASK_SECRET_KEY": "secret_key",
}

_TRUTHY = {"1", "true", "yes", "on"}


def _get_app_config_dir() -> str:
    """Get application configuration directory path-agnostically"""
    app_name = os.getenv("SPOTIKEEP_APP_NAME", "spotikeep")
    return os.path.expanduser(f"~/.{app_name}")


def load_environment() -> None:
    """Load ``~/.spotikeep/.env`` and the project-root ``.env`` into ``os.environ``.

    Existing environment variables always win over file values.
    """
    env_path = os.path.join(_get_app_config_dir(), ".env")
    if os.path.exists(env_path):
        load_dotenv(dotenv_path=env_path)
    load_dotenv()


def settings_from_mapping(environ: Mapping[str, str]) -> Settings:
    """Build validated settings from an environment-like mapping.

    Raises:
        ValueError: If a value fails validation
    """
    raw: Dict[str, object] = {}
    for env_name, field_name in ENV_MAP.items():
        value = environ.get(env_name)
        if value is None or value == "":
            continue
        if field_name == "debug":
            raw[field_name] = value.strip().lower() in _TRUTHY
        else:
            raw[field_name] = value
    try:
        return Settings(**raw)
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Load settings from ``environ`` or, when omitted, from the process environment.

    Args:
        environ: Mapping to read instead of ``os.environ`` (tests)

    Returns:
        Validated ``Settings`` instance
    """
    if environ is None:
        load_environment()
        environ = os.environ
    settings = settings_from_mapping(environ)
    if not settings.has_client_credentials:
        logging.getLogger(__name__).warning(
            "SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET not set; login will fail"
        )
    return settings
