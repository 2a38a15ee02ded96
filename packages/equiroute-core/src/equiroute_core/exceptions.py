"""Error taxonomy shared by all EquiRoute apps.

Each app subclasses one of these so callers can handle a whole
category (authorization, not found, validation, external failure)
without knowing every concrete error.
"""


class EquirouteError(Exception):
    """Base exception for EquiRoute errors."""
    pass


class NotAuthenticated(EquirouteError):
    """Raised when a mutating operation is attempted without an actor."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class AuthorizationError(EquirouteError):
    """Raised when the actor lacks permission for a mutation."""
    pass


class MissingPermission(AuthorizationError):
    """Raised when the active context does not grant an action."""

    def __init__(self, action: str, reason: str = None):
        self.action = action
        self.reason = reason or f"Permission '{action}' is required"
        super().__init__(self.reason)


class NotFoundError(EquirouteError):
    """Raised when a referenced record no longer exists."""
    pass


class InvalidInputError(EquirouteError):
    """Raised for malformed input, duplicates or missing fields."""
    pass


class ExternalServiceError(EquirouteError):
    """Raised when a blob store, registry or authority call fails."""

    def __init__(self, service: str, reason: str):
        self.service = service
        self.reason = reason
        super().__init__(f"{service} failed: {reason}")


class ConfigurationError(EquirouteError):
    """Raised when a configured class or setting cannot be used."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load '{path}': {reason}")
