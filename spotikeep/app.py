"""
SpotiKeep Main Application
Flask application factory wiring settings, state, Spotify access,
services, blueprints and the reconciliation monitor.
"""

import logging
import os
import secrets
from typing import Optional

from flask import Flask
from flask_compress import Compress

from .api.auth import TokenManager
from .api.spotify import PlaybackClient
from .config import load_settings
from .config_schema import Settings
from .core.monitor import MonitorScheduler
from .core.reconciler import Reconciler
from .routes import auth_bp, bot_bp, health_bp, library_bp, main_bp
from .routes.errors import register_error_handlers
from .routes.helpers import RUNTIME_KEY
from .services.service_manager import EXTENSION_KEY, ServiceManager
from .utils.logger import setup_logging
from .utils.state_store import CredentialStore
from .version import get_app_info

logger = logging.getLogger("spotikeep")

compress = Compress()


def _configure_compression(app: Flask) -> None:
    app.config.setdefault('COMPRESS_REGISTER', True)
    app.config.setdefault('COMPRESS_ALGORITHM', os.getenv('SPOTIKEEP_COMPRESS_ALGO', 'gzip'))
    app.config.setdefault('COMPRESS_MIMETYPES', ('text/html', 'application/json'))
    try:
        app.config['COMPRESS_LEVEL'] = max(1, min(9, int(os.getenv('SPOTIKEEP_COMPRESS_LEVEL', '6'))))
    except ValueError:
        app.config['COMPRESS_LEVEL'] = 6
    try:
        app.config['COMPRESS_MIN_SIZE'] = max(256, int(os.getenv('SPOTIKEEP_COMPRESS_MIN_BYTES', '1024')))
    except ValueError:
        app.config['COMPRESS_MIN_SIZE'] = 1024
    compress.init_app(app)


def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[CredentialStore] = None,
    token_manager: Optional[TokenManager] = None,
    client: Optional[PlaybackClient] = None,
    start_monitor: bool = False,
) -> Flask:
    """Build a SpotiKeep Flask application.

    Collaborators that are not passed in are built from ``settings``.

    Args:
        settings: Validated settings; loaded from the environment when omitted
        store: Credential store (defaults to ``settings.state_path``)
        token_manager: Token manager bound to ``store``
        client: Spotify playback client
        start_monitor: Start the reconciliation thread immediately

    Returns:
        Flask: The configured application
    """
    if settings is None:
        settings = load_settings()
    setup_logging(settings.log_level)

    if store is None:
        store = CredentialStore(settings.state_path)
    if token_manager is None:
        token_manager = TokenManager(
            store,
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            redirect_uri=settings.redirect_uri,
        )
    if client is None:
        client = PlaybackClient(token_manager)

    app = Flask(__name__)
    app.secret_key = settings.secret_key or secrets.token_hex(32)
    app.config['DEBUG'] = settings.debug
    _configure_compression(app)

    reconciler = Reconciler(store, client, fallback_device_id=settings.preferred_device_id)
    monitor = MonitorScheduler(reconciler, settings.monitor_interval)

    app.extensions[RUNTIME_KEY] = {
        "settings": settings,
        "store": store,
        "token_manager": token_manager,
        "client": client,
        "reconciler": reconciler,
        "monitor": monitor,
    }
    app.extensions[EXTENSION_KEY] = ServiceManager(store, token_manager, client)

    for blueprint in (main_bp, auth_bp, library_bp, bot_bp, health_bp):
        app.register_blueprint(blueprint)
    register_error_handlers(app)

    if start_monitor:
        monitor.start()

    logger.info("🚀 %s ready (state: %s, redirect: %s)", get_app_info(), settings.state_path, settings.redirect_uri)
    return app


def get_monitor(app: Flask) -> MonitorScheduler:
    return app.extensions[RUNTIME_KEY]["monitor"]


__all__ = ["create_app", "get_monitor"]
