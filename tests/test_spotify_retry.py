"""Shared HTTP session: retries, timeouts and pooling."""

from __future__ import annotations

from unittest.mock import Mock

import pytest
from urllib3.util import Retry

from spotikeep.api import http
from spotikeep.api.http import (DEFAULT_TIMEOUT, _build_retry_configuration,
                                _with_default_timeout, build_session)


class TestRetryConfiguration:

    def test_retry_config_includes_transient_errors(self):
        retry = _build_retry_configuration()

        assert list(retry.status_forcelist) == [429, 500, 502, 503, 504]

    def test_retry_config_respects_retry_after_header(self):
        retry = _build_retry_configuration()

        assert retry.respect_retry_after_header is True
        assert retry.raise_on_status is False

    def test_retry_config_reads_environment(self, monkeypatch):
        monkeypatch.setenv("SPOTIKEEP_HTTP_RETRY_TOTAL", "5")
        monkeypatch.setenv("SPOTIKEEP_HTTP_BACKOFF_FACTOR", "1.5")

        retry = _build_retry_configuration()

        assert retry.total == 5
        assert retry.backoff_factor == 1.5

    def test_invalid_environment_falls_back(self, monkeypatch):
        monkeypatch.setenv("SPOTIKEEP_HTTP_RETRY_TOTAL", "many")

        assert _build_retry_configuration().total == 3

    def test_playback_commands_are_retryable(self):
        retry = _build_retry_configuration()

        assert {"GET", "POST", "PUT"} <= set(retry.allowed_methods)


class TestSession:

    def test_session_mounts_retry_adapter(self):
        session = build_session()

        adapter = session.get_adapter("https://api.spotify.com")
        assert isinstance(adapter.max_retries, Retry)
        assert session.headers["Accept"] == "application/json"
        assert session.headers["User-Agent"].startswith("SpotiKeep/")

    def test_default_timeout_is_injected(self):
        inner = Mock(return_value="ok")
        wrapped = _with_default_timeout(inner, (4.0, 15.0))

        wrapped("GET", "https://example.com")

        assert inner.call_args.kwargs["timeout"] == (4.0, 15.0)

    @pytest.mark.parametrize("given, expected", [(2, (2.0, 2.0)), ((1, 30), (1.0, 30.0)), ("bad", (4.0, 15.0))])
    def test_explicit_timeout_is_normalised(self, given, expected):
        inner = Mock(return_value="ok")
        wrapped = _with_default_timeout(inner, (4.0, 15.0))

        wrapped("GET", "https://example.com", timeout=given)

        assert inner.call_args.kwargs["timeout"] == expected

    def test_default_timeout_shape(self):
        connect, read = DEFAULT_TIMEOUT
        assert connect > 0 and read >= connect

    def test_shared_session_can_be_overridden(self):
        replacement = Mock()
        http.set_http_session(replacement)
        try:
            assert http.get_http_session() is replacement
        finally:
            http.set_http_session(None)
