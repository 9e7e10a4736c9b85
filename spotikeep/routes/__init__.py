"""
SpotiKeep Route Blueprints
Modular Flask blueprints for the control surface.
"""

from .auth import auth_bp
from .bot import bot_bp
from .health import health_bp
from .library import library_bp
from .main import main_bp

__all__ = [
    "auth_bp",
    "bot_bp",
    "health_bp",
    "library_bp",
    "main_bp",
]
