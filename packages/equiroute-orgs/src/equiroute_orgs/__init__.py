"""
equiroute-orgs: Organizations, memberships and the active data context.

Provides:
- Organization, Membership, Invitation, ActorProfile models
- can_perform(): pure permission resolution
- ContextSwitchManager: private/organization context switching
"""

__version__ = "0.1.0"

__all__ = [
    "ActorProfile",
    "Organization",
    "Membership",
    "Invitation",
    "ContextMode",
    "Role",
    "Permission",
    "ActiveContext",
    "ContextSwitchManager",
    "can_perform",
]


def __getattr__(name):
    """Lazy imports to prevent AppRegistryNotReady errors."""
    if name in ("ActorProfile", "Organization", "Membership", "Invitation", "ContextMode", "Role", "Permission"):
        from . import models
        return getattr(models, name)
    if name in ("ActiveContext", "ContextSwitchManager"):
        from . import context
        return getattr(context, name)
    if name == "can_perform":
        from .permissions import can_perform
        return can_perform
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
