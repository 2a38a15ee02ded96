"""
equiroute-compliance: Required-document checklists for transports.

Provides:
- evaluate(): route + entities -> RequirementSet
- reconcile(): requirement set + certificates -> manual/auto confirmations
- TransportCompliance: persisted confirmation state per transport
"""

__version__ = "0.1.0"

__all__ = [
    "TransportCompliance",
    "evaluate",
    "reconcile",
]


def __getattr__(name):
    """Lazy imports to prevent AppRegistryNotReady errors."""
    if name == "TransportCompliance":
        from .models import TransportCompliance
        return TransportCompliance
    if name == "evaluate":
        from .evaluator import evaluate
        return evaluate
    if name == "reconcile":
        from .reconciliation import reconcile
        return reconcile
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
