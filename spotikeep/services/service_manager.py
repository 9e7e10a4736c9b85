"""
🔧 Service Manager - Central Service Coordination
===============================================

Holds the services of one Flask app and exposes them to the blueprints.
"""

import logging
from typing import Any, Dict, Optional

from flask import current_app

from ..api.auth import TokenManager
from ..api.spotify import PlaybackClient
from ..utils.state_store import CredentialStore
from . import ServiceResult
from .auth_service import AuthService
from .bot_service import BotService
from .library_service import LibraryService

EXTENSION_KEY = "spotikeep.services"


class ServiceManager:
    """Central manager for all application services."""

    def __init__(self, store: CredentialStore, token_manager: TokenManager, client: PlaybackClient):
        self.logger = logging.getLogger("spotikeep.service_manager")

        self.auth = AuthService(store, token_manager, client)
        self.bot = BotService(store, client)
        self.library = LibraryService(store, client)

        # Service registry
        self.services = {
            "auth": self.auth,
            "bot": self.bot,
            "library": self.library,
        }
        self.logger.debug("Services registered: %s", ", ".join(self.services))

    def get_service(self, name: str) -> Optional[Any]:
        """Get a specific service by name."""
        return self.services.get(name)

    def health_check_all(self) -> ServiceResult:
        """Perform health check on all services."""
        results: Dict[str, Any] = {}
        overall_healthy = True
        for name, service in self.services.items():
            health = service.health_check()
            status_payload = health.data if isinstance(health.data, dict) else {"error": health.message}
            healthy = health.success and status_payload.get("status") == "healthy"
            results[name] = {"healthy": healthy, "status": status_payload}
            overall_healthy = overall_healthy and healthy

        return ServiceResult(
            success=True,
            data={
                "overall_healthy": overall_healthy,
                "services": results,
                "total_services": len(self.services),
                "healthy_services": sum(1 for r in results.values() if r["healthy"]),
            },
        )


def get_service_manager() -> ServiceManager:
    """Service manager of the current Flask app."""
    return current_app.extensions[EXTENSION_KEY]


def get_service(name: str) -> Any:
    """Convenience function to get a service from the current app."""
    service = get_service_manager().get_service(name)
    if service is None:
        raise KeyError(f"Unknown service: {name}")
    return service
