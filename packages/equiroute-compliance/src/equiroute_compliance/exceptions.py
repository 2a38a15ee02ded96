"""Custom exceptions for equiroute-compliance."""

from equiroute_core.exceptions import EquirouteError, NotFoundError


class ComplianceError(EquirouteError):
    """Base exception for compliance errors."""
    pass


class RequirementNotFound(NotFoundError, ComplianceError):
    """Raised when a requirement id is not part of a transport's checklist."""

    def __init__(self, requirement_id: str, transport_id=None):
        self.requirement_id = requirement_id
        self.transport_id = transport_id
        super().__init__(f"Requirement '{requirement_id}' is not required for transport {transport_id}")
