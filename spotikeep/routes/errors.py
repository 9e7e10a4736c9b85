"""
🚨 Error Handlers
Centralized HTTP error handling for JSON and browser routes.
"""

from __future__ import annotations

from flask import Flask, request

from .helpers import api_error, render_error_page

_JSON_PREFIXES = ("/state", "/healthz", "/interrupt", "/kick")


def _wants_json() -> bool:
    return request.is_json or request.path.startswith(_JSON_PREFIXES)


def register_error_handlers(app: Flask) -> None:
    """Register shared error handlers on the Flask app."""

    @app.errorhandler(404)
    def not_found_error(_error):  # type: ignore[unused-argument]
        if _wants_json():
            return api_error("Page not found", status=404, error_code="not_found")
        return render_error_page("Page not found", 404)

    @app.errorhandler(500)
    def internal_error(_error):  # type: ignore[unused-argument]
        if _wants_json():
            return api_error("Internal server error", status=500, error_code="internal_error")
        return render_error_page("Internal server error", 500)
