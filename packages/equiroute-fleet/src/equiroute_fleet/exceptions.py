"""Custom exceptions for equiroute-fleet."""

from equiroute_core.exceptions import (
    EquirouteError,
    ExternalServiceError,
    NotFoundError,
)


class FleetError(EquirouteError):
    """Base exception for fleet errors."""
    pass


class EntityNotFound(NotFoundError, FleetError):
    """Raised when an entity reference does not resolve."""

    def __init__(self, entity_type: str, entity_id):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} '{entity_id}' not found")


class RegistryError(ExternalServiceError, FleetError):
    """Base exception for vehicle registry failures."""

    def __init__(self, reason: str):
        super().__init__("Vehicle registry", reason)


class VehicleNotInRegistry(RegistryError):
    """Raised when the registry has no vehicle with the plate."""

    def __init__(self, license_plate: str):
        self.license_plate = license_plate
        super().__init__(f"No vehicle registered with plate '{license_plate}'")


class RegistryUnavailable(RegistryError):
    """Raised when the registry cannot be reached or answers with an error."""
    pass
