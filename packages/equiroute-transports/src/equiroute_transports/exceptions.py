"""Custom exceptions for equiroute-transports."""

from equiroute_core.exceptions import EquirouteError, InvalidInputError, NotFoundError


class TransportError(EquirouteError):
    """Base exception for transport errors."""
    pass


class TransportNotFound(NotFoundError, TransportError):
    def __init__(self, transport_id):
        self.transport_id = transport_id
        super().__init__(f"Transport '{transport_id}' not found")


class InvalidTransport(InvalidInputError, TransportError):
    """Raised when a transport plan is incomplete or inconsistent."""
    pass


class InvalidStatusChange(InvalidInputError, TransportError):
    def __init__(self, from_status: str, to_status: str):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"Cannot change transport status from '{from_status}' to '{to_status}'")
