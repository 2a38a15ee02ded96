"""
equiroute-traces: Cross-border (TRACES) registration of transports.

Provides:
- Registration: phase and reference number per transport
- RegistrationEvent: audit log of phase changes
- start_registration(): the registration state machine
- Pluggable authority providers
"""

__version__ = "0.1.0"

__all__ = [
    "Registration",
    "RegistrationEvent",
    "RegistrationPhase",
]


def __getattr__(name):
    """Lazy imports to prevent AppRegistryNotReady errors."""
    if name in __all__:
        from . import models
        return getattr(models, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
