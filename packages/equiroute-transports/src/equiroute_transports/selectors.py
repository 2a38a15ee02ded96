"""Read-only queries over transports and fleet usage."""

import logging
from dataclasses import dataclass

from django.db import DatabaseError

from equiroute_fleet.models import Horse, Vehicle

from .models import OPEN_STATUSES, Transport, TransportStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrganizationUsage:
    vehicles: int
    horses: int
    open_transports: int
    completed_transports: int


def get_organization_usage(organization):
    """
    Counts shown next to an organization.

    Purely informational: a database failure is logged and None is
    returned so the caller can render without the numbers.
    """
    try:
        transports = Transport.objects.filter(organization=organization)
        return OrganizationUsage(
            vehicles=Vehicle.objects.filter(organization=organization).count(),
            horses=Horse.objects.filter(organization=organization).count(),
            open_transports=transports.filter(status__in=OPEN_STATUSES).count(),
            completed_transports=transports.filter(status=TransportStatus.COMPLETED).count(),
        )
    except DatabaseError as e:
        logger.warning(f"Could not load usage for organization {organization.pk}: {e}")
        return None


def get_open_transports_for_entity(entity_type: str, entity_id):
    """Planned or active transports involving an organization, vehicle or horse."""
    transports = Transport.objects.filter(status__in=OPEN_STATUSES)
    if entity_type == "organization":
        return transports.filter(organization_id=entity_id)
    if entity_type == "vehicle":
        return transports.filter(vehicle_id=entity_id)
    if entity_type == "horse":
        return transports.filter(horses__pk=entity_id).distinct()
    return transports.none()
