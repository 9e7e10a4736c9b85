"""
🛠️ Route Helpers
Shared utilities for all route blueprints.
"""

import datetime
import logging
import uuid
from functools import wraps
from typing import Any, Callable, Dict, Optional

from flask import Response, current_app, jsonify, render_template

from ..api.errors import AuthError
from ..services import ServiceResult

logger = logging.getLogger(__name__)

RUNTIME_KEY = "spotikeep"

# ServiceResult.error_code -> HTTP status
ERROR_STATUS: Dict[str, int] = {
    "auth_required": 401,
    "selection_missing": 400,
    "playback_failed": 500,
    "spotify_error": 500,
    "auth_failed": 500,
}


def _iso_timestamp_now() -> str:
    """Return ISO 8601 timestamp in UTC with a trailing Z."""
    now_utc = datetime.datetime.now(tz=datetime.timezone.utc)
    return now_utc.isoformat(timespec="microseconds").replace("+00:00", "Z")


def get_runtime() -> Dict[str, Any]:
    """Store, client, monitor and settings attached by ``create_app``."""
    return current_app.extensions[RUNTIME_KEY]


def api_response(
    success: bool,
    *,
    data: Optional[Any] = None,
    message: str = "",
    status: int = 200,
    error_code: Optional[str] = None
) -> Response:
    """Create a standardized API response with consistent envelope.

    Args:
        success: Whether the operation succeeded
        data: Optional response data
        message: Optional message string
        status: HTTP status code (default 200)
        error_code: Optional error code for failures

    Returns:
        Flask Response object with JSON payload
    """
    req_id = str(uuid.uuid4())
    timestamp = _iso_timestamp_now()
    payload = {
        "success": success,
        "timestamp": timestamp,
        "request_id": req_id
    }
    if message:
        payload["message"] = message
    if data is not None:
        payload["data"] = data
    if error_code:
        payload["error_code"] = error_code
    resp = jsonify(payload)
    resp.status_code = status
    # Correlation headers
    resp.headers['X-Request-ID'] = req_id
    resp.headers['X-Response-Timestamp'] = timestamp
    return resp


def api_error(
    message: str,
    *,
    status: int = 400,
    error_code: Optional[str] = None,
    data: Optional[Any] = None,
) -> Response:
    """Convenience wrapper for standardized error responses."""
    return api_response(
        False,
        data=data,
        message=message,
        status=status,
        error_code=error_code,
    )


def result_response(result: ServiceResult, *, data: Optional[Any] = None) -> Response:
    """Translate a failed or successful ``ServiceResult`` into the JSON envelope."""
    if result.success:
        return api_response(True, data=result.data if data is None else data, message=result.message or "")
    code = result.error_code or "operation_failed"
    return api_error(
        result.message or "Request failed",
        status=ERROR_STATUS.get(code, 500),
        error_code=code,
        data=result.data,
    )


def render_error_page(message: str, status: int) -> tuple:
    return render_template("error.html", message=message, status=status), status


def api_error_handler(func: Callable) -> Callable:
    """Decorator for consistent API error handling.

    ``AuthError`` becomes a 401 envelope; anything else unexpected is logged
    with its traceback and answered with a 500 envelope.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except AuthError as e:
            logger.warning(f"Unauthenticated request to {func.__name__}: {e.message}")
            return api_error(e.message, status=401, error_code="auth_required")
        except Exception:
            logger.exception(f"Error in {func.__name__}")
            return api_error(
                "An internal error occurred",
                status=500,
                error_code="unhandled_exception",
            )
    return wrapper
