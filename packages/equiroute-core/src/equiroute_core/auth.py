"""Actor preconditions for mutating operations."""

from .exceptions import NotAuthenticated


def is_authenticated(actor) -> bool:
    """Return True for an active, authenticated user."""
    if actor is None:
        return False
    if not getattr(actor, "is_authenticated", False):
        return False
    return getattr(actor, "is_active", True)


def require_authenticated(actor):
    """
    Raise NotAuthenticated unless actor is an active, authenticated user.

    Returns the actor so it can be used inline.
    """
    if not is_authenticated(actor):
        raise NotAuthenticated()
    return actor
