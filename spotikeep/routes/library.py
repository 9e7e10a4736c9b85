"""
📚 Library Routes Blueprint
Playlist and device listings plus the selection endpoints.
"""

import logging

from flask import Blueprint, redirect, render_template, request, url_for

from ..services.service_manager import get_service
from .helpers import ERROR_STATUS, render_error_page

library_bp = Blueprint("library", __name__)
logger = logging.getLogger(__name__)


def _failure_page(result):
    status = ERROR_STATUS.get(result.error_code or "", 500)
    return render_error_page(result.message or "Spotify request failed", status)


@library_bp.route("/playlists")
def playlists():
    try:
        offset = max(0, int(request.args.get("offset", 0)))
    except (TypeError, ValueError):
        offset = 0

    result = get_service("library").list_playlists(limit=50, offset=offset)
    if not result.success:
        return _failure_page(result)
    return render_template("playlists.html", page=result.data)


@library_bp.route("/devices")
def devices():
    result = get_service("library").list_devices()
    if not result.success:
        return _failure_page(result)
    return render_template("devices.html", devices=result.data)


@library_bp.route("/choose/playlist/<playlist_id>")
def choose_playlist(playlist_id: str):
    get_service("library").choose_playlist(playlist_id)
    return redirect(url_for("bot.state"))


@library_bp.route("/choose/device/<device_id>")
def choose_device(device_id: str):
    """Persist the device, then transfer playback there (paused)."""
    result = get_service("library").choose_device(device_id)
    if not result.success:
        return _failure_page(result)
    return redirect(url_for("bot.state"))
