"""
🏠 Main Routes Blueprint
Minimal HTML status/control page.
"""

import logging

from flask import Blueprint, render_template

from ..constants import playlist_context_uri
from ..utils.state_store import is_authenticated
from ..version import get_app_info
from .helpers import get_runtime

main_bp = Blueprint("main", __name__)
logger = logging.getLogger(__name__)


@main_bp.route("/")
def index():
    runtime = get_runtime()
    record = runtime["store"].snapshot()
    connected = is_authenticated(record)
    monitor = runtime.get("monitor")
    playlist_id = record.get("selected_playlist_id")

    return render_template(
        "index.html",
        record=record,
        connected=connected,
        account_name=record.get("account_name") if connected else None,
        target_context=playlist_context_uri(playlist_id) if playlist_id else None,
        fallback_device_id=runtime["settings"].preferred_device_id,
        monitor=monitor.status() if monitor is not None else None,
        app_info=get_app_info(),
    )
