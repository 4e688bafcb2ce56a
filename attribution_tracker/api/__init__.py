"""API blueprints package."""
from attribution_tracker.api.health import health_bp
from attribution_tracker.api.conversions import conversions_bp

__all__ = [
    "health_bp",
    "conversions_bp",
]
