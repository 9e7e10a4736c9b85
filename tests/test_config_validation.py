"""Settings loading from the environment."""

from __future__ import annotations

import pytest

from spotikeep.config import load_settings, settings_from_mapping
from spotikeep.config_schema import Settings, validate_record_dict


def test_defaults():
    settings = settings_from_mapping({})

    assert settings.port == 10000
    assert settings.monitor_interval == 20
    assert settings.base_url == "http://localhost:10000"
    assert settings.redirect_uri == "http://localhost:10000/callback"
    assert settings.preferred_device_id is None
    assert settings.state_path == "storage.json"
    assert settings.debug is False
    assert settings.has_client_credentials is False


def test_environment_values_are_mapped():
    settings = settings_from_mapping({
        "SPOTIFY_CLIENT_ID": "id",
        "SPOTIFY_CLIENT_SECRET": "secret",
        "BASE_URL": "https://keep.example.com/",
        "PORT": "8080",
        "MONITOR_INTERVAL": "7.5",
        "PREFERRED_DEVICE_ID": "dev-1",
        "SPOTIKEEP_DEBUG": "yes",
        "SPOTIKEEP_LOG_LEVEL": "debug",
    })

    assert settings.has_client_credentials is True
    assert settings.port == 8080
    assert settings.monitor_interval == 7.5
    assert settings.base_url == "https://keep.example.com"
    assert settings.redirect_uri == "https://keep.example.com/callback"
    assert settings.preferred_device_id == "dev-1"
    assert settings.debug is True
    assert settings.log_level == "DEBUG"


def test_explicit_redirect_uri_wins():
    settings = settings_from_mapping({"SPOTIFY_REDIRECT_URI": "https://other.example.com/cb"})

    assert settings.redirect_uri == "https://other.example.com/cb"


@pytest.mark.parametrize("env", [
    {"MONITOR_INTERVAL": "0"},
    {"MONITOR_INTERVAL": "-5"},
    {"MONITOR_INTERVAL": "soon"},
    {"PORT": "70000"},
    {"SPOTIKEEP_LOG_LEVEL": "chatty"},
])
def test_invalid_values_raise_value_error(env):
    with pytest.raises(ValueError, match="Configuration validation failed"):
        settings_from_mapping(env)


def test_blank_device_is_unset():
    assert Settings(preferred_device_id="  ").preferred_device_id is None


def test_load_settings_accepts_explicit_mapping():
    settings = load_settings({"SPOTIFY_CLIENT_ID": "id", "SPOTIFY_CLIENT_SECRET": "s"})

    assert settings.client_id == "id"


def test_record_validation_keeps_unknown_keys():
    record = validate_record_dict({"bot_enabled": True, "token_expires_at": 10, "legacy": 1})

    assert record == {"bot_enabled": True, "token_expires_at": 10.0, "legacy": 1}


def test_record_validation_rejects_wrong_types():
    with pytest.raises(ValueError):
        validate_record_dict({"selected_playlist_id": ["not", "a", "string"]})
