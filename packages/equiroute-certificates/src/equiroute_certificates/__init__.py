"""equiroute-certificates: Certificates attached to organizations, vehicles and horses."""

__version__ = "0.1.0"

__all__ = [
    "Certificate",
]


def __getattr__(name):
    """Lazy imports to prevent AppRegistryNotReady errors."""
    if name == "Certificate":
        from .models import Certificate
        return Certificate
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
