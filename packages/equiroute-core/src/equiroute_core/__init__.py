"""EquiRoute core - shared base models, errors and settings helpers."""

__version__ = "0.1.0"

__all__ = [
    "TimeStampedModel",
    "UUIDModel",
    "BaseModel",
]


def __getattr__(name):
    """Lazy import models to avoid AppRegistryNotReady errors."""
    if name in __all__:
        from equiroute_core import models
        return getattr(models, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
