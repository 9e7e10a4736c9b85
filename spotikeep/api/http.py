#!/usr/bin/env python3
"""Centralised HTTP session configuration for Spotify API access."""

import logging
import os
import platform
from threading import RLock
from typing import Any, Callable, Optional, Tuple, Union

import requests
from requests.adapters import HTTPAdapter
from urllib3.util import Retry

from ..version import get_version

TimeoutValue = Union[float, Tuple[float, float]]

_LOGGER = logging.getLogger("spotify.http")
_SESSION_LOCK = RLock()
_SESSION: Optional[requests.Session] = None


def _parse_timeout_tuple() -> Tuple[float, float]:
    """Parse ``SPOTIKEEP_HTTP_TIMEOUTS`` ("connect,read") with safe defaults."""
    raw = os.getenv("SPOTIKEEP_HTTP_TIMEOUTS")
    if raw:
        parts = [p.strip() for p in raw.replace(";", ",").split(",") if p.strip()]
        if len(parts) == 2:
            try:
                return max(0.5, float(parts[0])), max(1.0, float(parts[1]))
            except ValueError:
                _LOGGER.warning("Invalid SPOTIKEEP_HTTP_TIMEOUTS=%s; using defaults", raw)
    return 4.0, 15.0


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


DEFAULT_TIMEOUT: Tuple[float, float] = _parse_timeout_tuple()


def _coerce_timeout(value: TimeoutValue) -> Tuple[float, float]:
    """Normalise timeout values to a tuple of (connect, read)."""
    if isinstance(value, tuple):
        if len(value) == 2:
            return max(0.5, float(value[0])), max(1.0, float(value[1]))
        raise ValueError("Timeout tuples must be length 2 (connect, read)")
    numeric = max(0.5, float(value))
    return numeric, numeric


def _with_default_timeout(
    request_func: Callable[..., requests.Response],
    timeout: Tuple[float, float],
) -> Callable[..., requests.Response]:
    """Wrap session.request to inject default timeouts."""

    def wrapper(method: str, url: str, **kwargs: Any) -> requests.Response:
        provided = kwargs.get("timeout")
        if provided is None:
            kwargs["timeout"] = timeout
        else:
            try:
                kwargs["timeout"] = _coerce_timeout(provided)
            except (TypeError, ValueError):
                kwargs["timeout"] = timeout
        return request_func(method, url, **kwargs)

    return wrapper


def _build_retry_configuration() -> Retry:
    """Transport-level retries for rate limiting and provider hiccups only."""
    return Retry(
        total=_int_env("SPOTIKEEP_HTTP_RETRY_TOTAL", 3),
        connect=_int_env("SPOTIKEEP_HTTP_RETRY_CONNECT", 2),
        read=_int_env("SPOTIKEEP_HTTP_RETRY_READ", 2),
        backoff_factor=_float_env("SPOTIKEEP_HTTP_BACKOFF_FACTOR", 0.6),
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["GET", "POST", "PUT", "DELETE"],
        respect_retry_after_header=True,
        raise_on_status=False,
    )


def build_session() -> requests.Session:
    """Create a configured requests.Session with retries and timeouts."""
    session = requests.Session()

    adapter = HTTPAdapter(
        max_retries=_build_retry_configuration(),
        pool_connections=_int_env("SPOTIKEEP_HTTP_POOL_CONNECTIONS", 4),
        pool_maxsize=_int_env("SPOTIKEEP_HTTP_POOL_MAXSIZE", 8),
    )
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update(
        {
            "Accept": "application/json",
            "User-Agent": (
                f"SpotiKeep/{get_version()} (Python {platform.python_version()}; "
                f"Requests {requests.__version__})"
            ),
        }
    )
    session.request = _with_default_timeout(session.request, DEFAULT_TIMEOUT)  # type: ignore[method-assign]

    _LOGGER.debug(
        "HTTP session configured",
        extra={
            "http.timeout_connect": DEFAULT_TIMEOUT[0],
            "http.timeout_read": DEFAULT_TIMEOUT[1],
            "http.retry_total": adapter.max_retries.total,
        },
    )
    return session


def get_http_session() -> requests.Session:
    """Return the shared HTTP session, creating it if necessary."""
    global _SESSION
    if _SESSION is None:
        with _SESSION_LOCK:
            if _SESSION is None:
                _SESSION = build_session()
    return _SESSION


def set_http_session(session: Optional[requests.Session]) -> None:
    """
    Override the shared HTTP session (primarily for testing).

    Args:
        session: Preconfigured session instance, or None to rebuild lazily
    """
    global _SESSION
    with _SESSION_LOCK:
        _SESSION = session


__all__ = ["DEFAULT_TIMEOUT", "build_session", "get_http_session", "set_http_session"]
