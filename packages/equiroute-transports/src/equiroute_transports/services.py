"""Service functions for transports.

Provides:
- plan_transport: create a planned transport in the active context
- get_transport / list_transports
- change_status: move a transport along its lifecycle
"""

import logging
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from equiroute_core.auth import require_authenticated
from equiroute_core.exceptions import AuthorizationError
from equiroute_fleet.services import authorize_create
from equiroute_orgs.models import Permission
from equiroute_orgs.permissions import authorize

from .exceptions import InvalidStatusChange, InvalidTransport, TransportNotFound
from .models import STATUS_TRANSITIONS, Transport, TransportStatus
from .route import Route

logger = logging.getLogger(__name__)


def _clean_distance(distance_km) -> Decimal:
    try:
        distance = Decimal(str(distance_km))
        if not distance.is_finite():
            raise InvalidOperation
        distance = distance.quantize(Decimal("0.1"))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidTransport(f"Invalid distance '{distance_km}'")
    if distance < 0:
        raise InvalidTransport("Distance cannot be negative")
    return distance


@transaction.atomic
def plan_transport(
    context,
    *,
    vehicle,
    horses,
    from_location: str,
    to_location: str,
    distance_km,
    countries=(),
    border_crossing: bool = None,
    departure_at=None,
    notes: str = "",
) -> Transport:
    """
    Create a planned transport.

    In organization mode ordinary members need can_manage_tours or the
    organization's allow_members_to_create_transports flag. The vehicle
    and every horse must belong to the active context, and the vehicle
    must have room for all horses.

    Raises:
        MissingPermission: Not allowed to create transports
        AuthorizationError: Vehicle or horse from another context
        InvalidTransport: Missing locations, no horses, over capacity
    """
    organization = authorize_create(context, Permission.MANAGE_TOURS, "allow_members_to_create_transports")

    from_location = (from_location or "").strip()
    to_location = (to_location or "").strip()
    if not from_location or not to_location:
        raise InvalidTransport("Both from and to locations are required")

    horses = list(horses or ())
    if not horses:
        raise InvalidTransport("At least one horse is required")
    if len({h.pk for h in horses}) != len(horses):
        raise InvalidTransport("The same horse is listed twice")

    if not vehicle.belongs_to(context):
        raise AuthorizationError(f"Vehicle {vehicle.pk} does not belong to the active context")
    for horse in horses:
        if not horse.belongs_to(context):
            raise AuthorizationError(f"Horse {horse.pk} does not belong to the active context")
    if len(horses) > vehicle.capacity:
        raise InvalidTransport(
            f"Vehicle {vehicle.license_plate} carries {vehicle.capacity} horses, {len(horses)} requested"
        )

    countries = [c.strip() for c in countries or () if c and c.strip()]
    distance = _clean_distance(distance_km)
    route = Route(distance_km=float(distance), countries=tuple(countries), border_crossing=border_crossing)

    transport = Transport(
        owner=None if organization else context.actor,
        organization=organization,
        created_by=context.actor,
        vehicle=vehicle,
        from_location=from_location,
        to_location=to_location,
        distance_km=distance,
        countries=countries,
        border_crossing=route.border_crossing,
        departure_at=departure_at,
        notes=notes or "",
    )
    try:
        transport.full_clean(exclude=["owner", "organization", "created_by", "vehicle"])
    except ValidationError as e:
        raise InvalidTransport(str(e)) from e
    transport.save()
    transport.horses.set(horses)

    logger.info(
        f"Transport {transport.pk} planned by actor {context.actor_id}: "
        f"{from_location} -> {to_location}, {transport.distance_km} km, {'/'.join(route.country_codes)}"
    )
    return transport


def get_transport(transport_id) -> Transport:
    try:
        return Transport.objects.select_related("vehicle", "organization").get(pk=transport_id)
    except (Transport.DoesNotExist, ValidationError, ValueError):
        raise TransportNotFound(transport_id)


def get_owned_transport(context, transport_id) -> Transport:
    """Fetch a transport and check it belongs to the active context."""
    transport = get_transport(transport_id)
    if not transport.belongs_to(context):
        raise AuthorizationError(f"Transport {transport_id} does not belong to the active context")
    return transport


def list_transports(context, status: str = None):
    """Transports of the active context, newest first."""
    transports = Transport.objects.for_context(context).select_related("vehicle")
    if status:
        transports = transports.filter(status=status)
    return transports.prefetch_related("horses")


@transaction.atomic
def change_status(context, transport, to_status: str) -> Transport:
    """
    Move a transport to a new status.

    Requires can_manage_tours. Setting active records started_at and
    completed records completed_at.
    """
    require_authenticated(context.actor)
    if not transport.belongs_to(context):
        raise AuthorizationError(f"Transport {transport.pk} does not belong to the active context")
    authorize(context, Permission.MANAGE_TOURS)

    transport = Transport.objects.select_for_update().get(pk=transport.pk)
    if to_status not in STATUS_TRANSITIONS.get(transport.status, set()):
        raise InvalidStatusChange(transport.status, to_status)

    return mark_status(transport, to_status)


def mark_status(transport, to_status: str) -> Transport:
    """Persist a status change without permission checks."""
    now = timezone.now()
    transport.status = to_status
    update_fields = ["status", "updated_at"]
    if to_status == TransportStatus.ACTIVE:
        transport.started_at = now
        update_fields.append("started_at")
    elif to_status == TransportStatus.COMPLETED:
        transport.completed_at = now
        update_fields.append("completed_at")
    transport.save(update_fields=update_fields)
    logger.info(f"Transport {transport.pk} is now {to_status}")
    return transport
