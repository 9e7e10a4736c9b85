"""
🏗️ Service Layer - Base Service Interface
==========================================

Business operations behind the HTTP routes. Every operation returns a
``ServiceResult`` so routes only translate results into responses.
"""

import logging
from abc import ABC
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..api.errors import AuthError, PlaybackError, SpotifyApiError


@dataclass
class ServiceResult:
    """Standardized result object for service operations."""
    success: bool
    data: Optional[Any] = None
    message: Optional[str] = None
    error_code: Optional[str] = None
    timestamp: datetime = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now(tz=timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses."""
        result = {
            "success": self.success,
            "timestamp": self.timestamp.isoformat()
        }

        if self.data is not None:
            result["data"] = self.data
        if self.message:
            result["message"] = self.message
        if self.error_code:
            result["error_code"] = self.error_code

        return result


class BaseService(ABC):
    """Base class for all services with common functionality."""

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(f"spotikeep.service.{name}")

    def health_check(self) -> ServiceResult:
        """Perform health check. Override in subclasses for specific checks."""
        return ServiceResult(
            success=True,
            data={"status": "healthy", "service": self.name}
        )

    def _handle_spotify_error(self, error: SpotifyApiError, operation: str) -> ServiceResult:
        """Map a Spotify failure onto the error codes the routes understand."""
        if isinstance(error, AuthError):
            error_code = "auth_required"
        elif isinstance(error, PlaybackError):
            error_code = "playback_failed"
        else:
            error_code = "spotify_error"
        self.logger.warning(f"{self.name}.{operation} failed ({error_code}): {error.message}")
        return ServiceResult(
            success=False,
            data=error.to_dict(),
            message=error.message,
            error_code=error_code
        )

    def _success_result(self, data: Any = None, message: str = None) -> ServiceResult:
        """Helper to create success results."""
        return ServiceResult(
            success=True,
            data=data,
            message=message
        )

    def _error_result(self, message: str, error_code: str = "ERROR", data: Any = None) -> ServiceResult:
        """Helper to create error results."""
        return ServiceResult(
            success=False,
            data=data,
            message=message,
            error_code=error_code
        )


__all__ = ["BaseService", "ServiceResult"]
