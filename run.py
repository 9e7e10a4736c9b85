#!/usr/bin/env python3
"""
SpotiKeep Runner - Loads settings, starts the monitor and serves the app
"""

import os
import sys

from waitress import serve

from spotikeep.app import create_app, get_monitor
from spotikeep.config import load_settings
from spotikeep.utils.logger import setup_logger


def main() -> int:
    logger = setup_logger("spotikeep.runner")
    try:
        settings = load_settings()
    except ValueError as exc:
        logger.error("❌ %s", exc)
        return 1

    app = create_app(settings, start_monitor=True)
    monitor = get_monitor(app)

    print(f"🚀 Starting SpotiKeep on {settings.host}:{settings.port}")
    print(f"🔗 Redirect URI: {settings.redirect_uri}")
    print(f"🔧 Debug mode: {settings.debug}")

    try:
        if settings.debug:
            # The reloader would start a second monitor thread
            app.run(host=settings.host, port=settings.port, debug=settings.debug, use_reloader=False)
        else:
            threads = int(os.environ.get("SPOTIKEEP_WAITRESS_THREADS", "4"))
            print(f"🍽️ Using Waitress WSGI server (threads={threads})")
            serve(app, host=settings.host, port=settings.port, threads=threads)
    finally:
        monitor.stop(timeout=5)
    return 0


if __name__ == "__main__":
    sys.exit(main())
