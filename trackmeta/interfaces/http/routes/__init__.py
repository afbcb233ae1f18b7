"""Route blueprints exposed via Flask."""

from .tracks import track_bp
from .health import health_bp

__all__ = [
    "track_bp",
    "health_bp",
]
