"""equiroute-fleet: Vehicles and horses owned by a private actor or an organization."""

__version__ = "0.1.0"

__all__ = [
    "EntityType",
    "Vehicle",
    "VehicleType",
    "Horse",
]


def __getattr__(name):
    """Lazy imports to prevent AppRegistryNotReady errors."""
    if name in __all__:
        from . import models
        return getattr(models, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
