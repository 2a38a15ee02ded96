"""equiroute-transports: Transport records, routes and country codes."""

__version__ = "0.1.0"

__all__ = [
    "Transport",
    "TransportStatus",
    "Route",
]


def __getattr__(name):
    """Lazy imports to prevent AppRegistryNotReady errors."""
    if name in ("Transport", "TransportStatus"):
        from . import models
        return getattr(models, name)
    if name == "Route":
        from .route import Route
        return Route
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
