"""
🩺 Health & Status Routes Blueprint
Monitor and token diagnostics.
"""

import logging

from flask import Blueprint

from ..services.service_manager import get_service_manager
from ..version import VERSION
from .helpers import api_error_handler, api_response, get_runtime

health_bp = Blueprint("health", __name__)
logger = logging.getLogger(__name__)


@health_bp.route("/healthz")
@api_error_handler
def healthz():
    runtime = get_runtime()
    monitor = runtime.get("monitor")
    services = get_service_manager().health_check_all().data
    payload = {
        "version": VERSION,
        "monitor": monitor.status() if monitor is not None else None,
        "token": get_service_manager().auth.status().data,
        "services": services,
    }
    return api_response(True, data=payload, message="ok")
