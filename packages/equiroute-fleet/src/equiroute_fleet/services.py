"""Service functions for vehicles and horses.

Provides:
- create_vehicle / create_horse: create in the active context
- list_vehicles / list_horses: context-scoped listings
- get_owned_entity: resolve an entity reference owned by the context
"""

import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from equiroute_core.auth import require_authenticated
from equiroute_core.exceptions import AuthorizationError, InvalidInputError, MissingPermission
from equiroute_orgs.models import ContextMode, Organization, Permission
from equiroute_orgs.permissions import can_perform, get_active_membership

from .exceptions import EntityNotFound
from .models import EntityType, Horse, Vehicle, VehicleType
from .registry import normalize_plate

logger = logging.getLogger(__name__)


def authorize_create(context, action: str, settings_flag: str):
    """
    Check that the context may create a record guarded by action.

    In organization mode an ordinary member passes when either the
    explicit permission or the organization's member-creation flag is
    set. Returns the organization, or None in private mode.
    """
    require_authenticated(context.actor)
    if context.mode == ContextMode.PRIVATE:
        return None

    membership = get_active_membership(context)
    if membership is None:
        raise MissingPermission(action, "No active membership in the selected organization")

    organization = membership.organization
    if can_perform(context, membership, action) or getattr(organization, settings_flag):
        return organization
    raise MissingPermission(action)


def _owner_fields(context, organization):
    if organization is None:
        return {"owner": context.actor, "organization": None, "created_by": context.actor}
    return {"owner": None, "organization": organization, "created_by": context.actor}


@transaction.atomic
def create_vehicle(
    context,
    *,
    license_plate: str,
    make: str = "",
    model: str = "",
    vehicle_type: str = VehicleType.TRAILER,
    capacity: int = 2,
    vin: str = "",
    registry_data: dict = None,
) -> Vehicle:
    """
    Create a vehicle owned by the active context.

    Raises:
        MissingPermission: In organization mode without the right to create vehicles
        InvalidInputError: Missing plate, unknown type, or duplicate plate in the context
    """
    organization = authorize_create(context, Permission.MANAGE_VEHICLES, "allow_members_to_create_vehicles")

    plate = normalize_plate(license_plate)
    if not plate:
        raise InvalidInputError("License plate is required")
    if vehicle_type not in VehicleType.values:
        raise InvalidInputError(f"Unknown vehicle type '{vehicle_type}'")
    if capacity is None or capacity < 1:
        raise InvalidInputError("Capacity must be at least 1")
    if Vehicle.objects.for_context(context).filter(license_plate=plate).exists():
        raise InvalidInputError(f"Vehicle '{plate}' already exists")

    vehicle = Vehicle.objects.create(
        license_plate=plate,
        make=make,
        model=model,
        vehicle_type=vehicle_type,
        capacity=capacity,
        vin=vin,
        registry_data=registry_data or {},
        **_owner_fields(context, organization),
    )
    logger.info(f"Vehicle {vehicle.pk} ({plate}) created by actor {context.actor_id}")
    return vehicle


@transaction.atomic
def create_horse(
    context,
    *,
    name: str,
    ueln: str = "",
    breed: str = "",
    birth_year: int = None,
) -> Horse:
    """
    Create a horse owned by the active context.

    Raises:
        MissingPermission: In organization mode without the right to create horses
        InvalidInputError: Missing name
    """
    organization = authorize_create(context, Permission.MANAGE_HORSES, "allow_members_to_create_horses")

    name = (name or "").strip()
    if not name:
        raise InvalidInputError("Horse name is required")

    horse = Horse(
        name=name,
        ueln=(ueln or "").strip().upper(),
        breed=breed,
        birth_year=birth_year,
        **_owner_fields(context, organization),
    )
    try:
        horse.full_clean(exclude=["owner", "organization", "created_by"])
    except ValidationError as e:
        raise InvalidInputError(str(e)) from e
    horse.save()
    return horse


def list_vehicles(context):
    """Vehicles owned by the active context."""
    return Vehicle.objects.for_context(context)


def list_horses(context):
    """Horses owned by the active context."""
    return Horse.objects.for_context(context)


ENTITY_MODELS = {
    EntityType.VEHICLE: Vehicle,
    EntityType.HORSE: Horse,
}


def resolve_entity(entity_type: str, entity_id):
    """
    Fetch the record behind an entity reference.

    Raises:
        InvalidInputError: Unknown entity type
        EntityNotFound: No record with that id
    """
    if entity_type not in EntityType.values:
        raise InvalidInputError(f"Unknown entity type '{entity_type}'")

    model = Organization if entity_type == EntityType.ORGANIZATION else ENTITY_MODELS[entity_type]
    try:
        return model.objects.get(pk=entity_id)
    except (model.DoesNotExist, ValidationError, ValueError):
        raise EntityNotFound(entity_type, entity_id)


def get_owned_entity(context, entity_type: str, entity_id):
    """
    Resolve an entity reference and check the context owns it.

    An organization is owned by a context in organization mode for
    that same organization. Vehicles and horses must belong to the
    context (private owner or organization).

    Raises:
        EntityNotFound: The entity does not exist
        AuthorizationError: The entity belongs to another context
    """
    entity = resolve_entity(entity_type, entity_id)

    if entity_type == EntityType.ORGANIZATION:
        owned = (
            context.mode == ContextMode.ORGANIZATION
            and str(context.organization_id) == str(entity.pk)
            and entity.is_active
        )
    else:
        owned = entity.belongs_to(context)

    if not owned:
        raise AuthorizationError(f"{entity_type} '{entity_id}' does not belong to the active context")
    return entity
