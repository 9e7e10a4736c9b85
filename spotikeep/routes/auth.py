"""
🔑 Auth Routes Blueprint
Spotify login redirect and OAuth callback.
"""

import logging
import secrets

from flask import Blueprint, redirect, request, session, url_for

from ..services.service_manager import get_service
from .helpers import render_error_page

auth_bp = Blueprint("auth", __name__)
logger = logging.getLogger(__name__)

_STATE_SESSION_KEY = "oauth_state"


@auth_bp.route("/login")
def login():
    """Redirect to the Spotify consent page with a fresh CSRF nonce."""
    state = secrets.token_urlsafe(16)
    session[_STATE_SESSION_KEY] = state
    result = get_service("auth").login_url(state)
    return redirect(result.data["url"])


@auth_bp.route("/callback")
def callback():
    code = request.args.get("code")
    state = request.args.get("state")
    expected = session.pop(_STATE_SESSION_KEY, None)

    if request.args.get("error"):
        logger.warning("Spotify authorization denied: %s", request.args.get("error"))
        return render_error_page(f"Spotify authorization failed: {request.args.get('error')}", 400)
    if not code or not state or state != expected:
        logger.warning("OAuth callback rejected: missing code or state mismatch")
        return render_error_page("Invalid OAuth callback (missing code or state mismatch)", 400)

    result = get_service("auth").complete_login(code)
    if not result.success:
        return render_error_page(f"Token exchange failed: {result.message}", 500)
    return redirect(url_for("main.index"))
