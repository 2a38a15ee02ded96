"""Custom exceptions for equiroute-traces."""

from equiroute_core.exceptions import (
    EquirouteError,
    ExternalServiceError,
    InvalidInputError,
)


class RegistrationError(EquirouteError):
    """Base exception for registration errors."""
    pass


class NotCrossBorder(InvalidInputError, RegistrationError):
    """Raised when a transport does not cross a border."""

    def __init__(self, transport):
        self.transport = transport
        super().__init__(f"Transport {transport.pk} does not cross a border")


class TransportNotRegistrable(InvalidInputError, RegistrationError):
    """Raised for transports that are completed or cancelled."""

    def __init__(self, transport):
        self.transport = transport
        super().__init__(f"Transport {transport.pk} is {transport.status} and cannot be registered")


class ComplianceIncomplete(InvalidInputError, RegistrationError):
    """Raised when required documents are still missing."""

    def __init__(self, missing_ids):
        self.missing_ids = list(missing_ids)
        super().__init__(f"Missing required documents: {', '.join(self.missing_ids)}")


class RegistrationInProgress(InvalidInputError, RegistrationError):
    """Raised when a registration for the transport is already running."""

    def __init__(self, registration):
        self.registration = registration
        self.phase = registration.phase
        super().__init__(f"Registration for transport {registration.transport_id} is already {registration.phase}")


class RegistrationAlreadyComplete(InvalidInputError, RegistrationError):
    """Raised when the transport already has a reference number."""

    def __init__(self, registration):
        self.registration = registration
        self.reference_number = registration.reference_number
        super().__init__(
            f"Transport {registration.transport_id} is already registered as {registration.reference_number}"
        )


class InvalidPhaseTransition(RegistrationError):
    """Raised when attempting a phase change outside the allowed graph."""

    def __init__(self, from_phase: str, to_phase: str):
        self.from_phase = from_phase
        self.to_phase = to_phase
        super().__init__(f"Cannot move registration from '{from_phase}' to '{to_phase}'")


class ImmutableReferenceError(RegistrationError):
    """Raised when attempting to change a stored reference number."""

    def __init__(self, registration_id):
        self.registration_id = registration_id
        super().__init__(f"Reference number of registration {registration_id} cannot be changed")


class AuthorityError(ExternalServiceError, RegistrationError):
    """Raised when the registration authority fails or cannot be reached."""

    def __init__(self, reason: str):
        super().__init__("Registration authority", reason)
