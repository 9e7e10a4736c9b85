"""Token lifecycle: code exchange, refresh on expiry, error mapping."""

from __future__ import annotations

import threading
from urllib.parse import parse_qs, urlparse

import pytest
import requests

from spotikeep.api.auth import TokenManager
from spotikeep.api.errors import AuthError
from spotikeep.constants import OAUTH_SCOPES
from tests.conftest import FakeSession, make_response


def _token_body(access="new-access", expires_in=3600, refresh=None):
    body = {"access_token": access, "token_type": "Bearer", "expires_in": expires_in}
    if refresh:
        body["refresh_token"] = refresh
    return body


def test_authorize_url_contains_flow_parameters(token_manager):
    url = token_manager.authorize_url(OAUTH_SCOPES, "nonce-123")
    parsed = urlparse(url)
    query = parse_qs(parsed.query)

    assert parsed.netloc == "accounts.spotify.com"
    assert parsed.path == "/authorize"
    assert query["client_id"] == ["client-id"]
    assert query["response_type"] == ["code"]
    assert query["redirect_uri"] == ["http://localhost:10000/callback"]
    assert query["state"] == ["nonce-123"]
    assert query["show_dialog"] == ["false"]
    assert query["scope"][0].split(" ") == list(OAUTH_SCOPES)


def test_exchange_code_persists_tokens_with_margin(token_manager, fake_session, store, clock):
    fake_session.queue(make_response(200, _token_body("acc", 3600, "ref")))

    token_manager.exchange_code("the-code")

    record = store.snapshot()
    assert record["access_token"] == "acc"
    assert record["refresh_token"] == "ref"
    assert record["token_expires_at"] == pytest.approx(clock.now + 3600 - 60)

    call = fake_session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "https://accounts.spotify.com/api/token"
    assert call["auth"] == ("client-id", "client-secret")
    assert call["data"] == {
        "grant_type": "authorization_code",
        "code": "the-code",
        "redirect_uri": "http://localhost:10000/callback",
    }


def test_exchange_failure_carries_provider_message(token_manager, fake_session, store):
    fake_session.queue(make_response(400, {"error": "invalid_grant", "error_description": "Invalid authorization code"}))

    with pytest.raises(AuthError) as excinfo:
        token_manager.exchange_code("bad")

    assert excinfo.value.message == "Invalid authorization code"
    assert excinfo.value.status == 400
    assert excinfo.value.reason == "invalid_grant"
    assert store.snapshot() == {}


def test_fresh_token_makes_no_request(token_manager, fake_session, store, clock):
    store.patch(access_token="still-good", refresh_token="r", token_expires_at=clock.now + 100)

    assert token_manager.access_token() == "still-good"
    assert fake_session.calls == []


def test_expired_token_is_refreshed_exactly_once(token_manager, fake_session, store, clock):
    store.patch(access_token="stale", refresh_token="r", token_expires_at=clock.now - 1)
    fake_session.queue(make_response(200, _token_body("fresh", 3600)))

    assert token_manager.access_token() == "fresh"
    assert token_manager.access_token() == "fresh"

    assert len(fake_session.calls) == 1
    assert fake_session.calls[0]["data"] == {"grant_type": "refresh_token", "refresh_token": "r"}
    record = store.snapshot()
    assert record["refresh_token"] == "r"
    assert record["token_expires_at"] == pytest.approx(clock.now + 3540)


def test_rotated_refresh_token_is_stored(token_manager, fake_session, store, clock):
    store.patch(access_token="stale", refresh_token="old", token_expires_at=clock.now - 1)
    fake_session.queue(make_response(200, _token_body("fresh", 3600, "new-refresh")))

    token_manager.ensure_fresh_token()

    assert store.get("refresh_token") == "new-refresh"


def test_missing_refresh_token_is_a_no_op(token_manager, fake_session):
    token_manager.ensure_fresh_token()

    assert fake_session.calls == []
    with pytest.raises(AuthError, match="Not authenticated with Spotify"):
        token_manager.access_token()


def test_refresh_network_error_raises_auth_error(token_manager, fake_session, store, clock):
    store.patch(access_token="stale", refresh_token="r", token_expires_at=clock.now - 1)
    fake_session.queue(requests.ConnectionError("offline"))

    with pytest.raises(AuthError):
        token_manager.ensure_fresh_token()
    assert store.get("access_token") == "stale"


def test_malformed_token_body_raises_auth_error(token_manager, fake_session, store, clock):
    store.patch(refresh_token="r", token_expires_at=0)
    fake_session.queue(make_response(200, text="<html>oops</html>"))

    with pytest.raises(AuthError):
        token_manager.ensure_fresh_token()


def test_missing_client_credentials_fail_before_network(store, fake_session):
    manager = TokenManager(store, client_id="", client_secret="", redirect_uri="http://x/callback", session=fake_session)

    with pytest.raises(AuthError):
        manager.exchange_code("code")
    assert fake_session.calls == []


def test_concurrent_callers_share_one_refresh(store, clock):
    store.patch(access_token="stale", refresh_token="r", token_expires_at=clock.now - 1)
    release = threading.Event()

    class SlowSession(FakeSession):
        def request(self, method, url, **kwargs):
            release.wait(2)
            return super().request(method, url, **kwargs)

    session = SlowSession([make_response(200, _token_body("fresh", 3600))])
    manager = TokenManager(store, client_id="id", client_secret="s", redirect_uri="http://x/cb",
                           session=session, clock=clock)

    results = []
    threads = [threading.Thread(target=lambda: results.append(manager.access_token())) for _ in range(4)]
    for thread in threads:
        thread.start()
    release.set()
    for thread in threads:
        thread.join()

    assert results == ["fresh"] * 4
    assert len(session.calls) == 1


def test_token_state_reports_expiry(token_manager, store, clock):
    store.patch(access_token="a", refresh_token="r", token_expires_at=clock.now + 120)

    state = token_manager.token_state()

    assert state["authenticated"] is True
    assert state["expires_in_seconds"] == 120
    assert state["is_expired"] is False


def test_expired_token_without_refresh_token_is_rejected(token_manager, fake_session, store, clock):
    store.patch(access_token="expired", token_expires_at=clock.now - 100)

    token_manager.ensure_fresh_token()
    with pytest.raises(AuthError, match="Not authenticated with Spotify"):
        token_manager.access_token()

    assert fake_session.calls == []
    assert token_manager.token_state()["is_expired"] is True
