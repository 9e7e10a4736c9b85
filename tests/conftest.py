"""Shared pytest fixtures for the SpotiKeep test suite."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import pytest
import requests

from spotikeep.api.auth import TokenManager
from spotikeep.api.models import Device, Playlist, PlaylistPage
from spotikeep.app import create_app
from spotikeep.config_schema import Settings
from spotikeep.utils.state_store import CredentialStore


def make_response(status: int = 200, body: Any = None, *, text: Optional[str] = None) -> requests.Response:
    """Build a real ``requests.Response`` with the given status and JSON body."""
    response = requests.Response()
    response.status_code = status
    if text is not None:
        response._content = text.encode("utf-8")
    elif body is None:
        response._content = b""
    else:
        response._content = json.dumps(body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    response.encoding = "utf-8"
    return response


class FakeSession:
    """Stands in for ``requests.Session``: records calls, replays queued responses."""

    def __init__(self, responses: Optional[List[Any]] = None):
        self.responses: List[Any] = list(responses or [])
        self.calls: List[Dict[str, Any]] = []

    def queue(self, *responses: Any) -> None:
        self.responses.extend(responses)

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def post(self, url: str, **kwargs: Any) -> requests.Response:
        return self.request("POST", url, **kwargs)


class FakePlaybackClient:
    """Records playback commands; status and failures are set by the test."""

    def __init__(self):
        self.status = None
        self.start_error: Optional[Exception] = None
        self.transfer_error: Optional[Exception] = None
        self.listing_error: Optional[Exception] = None
        self.status_reads = 0
        self.started: List[tuple] = []
        self.transferred: List[tuple] = []
        self.devices = [Device(id="dev-1", name="Kitchen", type="Speaker", is_active=True)]
        self.playlists = PlaylistPage(
            items=[Playlist(id="pl-1", name="Focus <Mix>", uri="spotify:playlist:pl-1", track_count=12)],
            total=1,
        )
        self.profile: Dict[str, Any] = {"id": "user-1", "display_name": "Test User"}
        self.profile_error: Optional[Exception] = None
        self.profile_reads = 0

    @property
    def calls(self) -> int:
        return self.status_reads + len(self.started) + len(self.transferred)

    def get_playback_status(self):
        self.status_reads += 1
        return self.status

    def start_playback(self, context_uri: str, device_id: str) -> None:
        self.started.append((context_uri, device_id))
        if self.start_error is not None:
            raise self.start_error

    def transfer_playback(self, device_id: str, play: bool = False) -> None:
        self.transferred.append((device_id, play))
        if self.transfer_error is not None:
            raise self.transfer_error

    def get_devices(self):
        if self.listing_error is not None:
            raise self.listing_error
        return list(self.devices)

    def get_playlists(self, limit: int = 50, offset: int = 0):
        if self.listing_error is not None:
            raise self.listing_error
        return self.playlists

    def get_me(self):
        self.profile_reads += 1
        if self.profile_error is not None:
            raise self.profile_error
        return dict(self.profile)


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def store(tmp_path):
    return CredentialStore(tmp_path / "storage.json")


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def token_manager(store, fake_session, clock):
    return TokenManager(
        store,
        client_id="client-id",
        client_secret="client-secret",
        redirect_uri="http://localhost:10000/callback",
        session=fake_session,
        clock=clock,
    )


@pytest.fixture
def spotify():
    return FakePlaybackClient()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        client_id="client-id",
        client_secret="client-secret",
        state_path=str(tmp_path / "storage.json"),
        secret_key="test-secret",
        monitor_interval=20,
    )


@pytest.fixture
def app(settings, store, token_manager, spotify):
    flask_app = create_app(settings, store=store, token_manager=token_manager, client=spotify)
    flask_app.config.update({"TESTING": True})
    return flask_app


@pytest.fixture
def client(app):
    """Provide a fresh Flask test client for each test."""
    with app.test_client() as test_client:
        yield test_client
