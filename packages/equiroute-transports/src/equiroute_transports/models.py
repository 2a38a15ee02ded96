"""
Transport records.

A transport moves one or more horses with one vehicle along a route.
Its status follows a small lifecycle:

    planned -> active -> completed
    planned/active -> cancelled
"""

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from equiroute_fleet.models import ContextOwnedModel

from .route import Route


class TransportStatus(models.TextChoices):
    PLANNED = "planned", _("Planned")
    ACTIVE = "active", _("Active")
    COMPLETED = "completed", _("Completed")
    CANCELLED = "cancelled", _("Cancelled")


STATUS_TRANSITIONS = {
    TransportStatus.PLANNED.value: {TransportStatus.ACTIVE.value, TransportStatus.CANCELLED.value},
    TransportStatus.ACTIVE.value: {TransportStatus.COMPLETED.value, TransportStatus.CANCELLED.value},
}

OPEN_STATUSES = (TransportStatus.PLANNED, TransportStatus.ACTIVE)


class Transport(ContextOwnedModel):
    """A planned or running horse transport.

    countries holds the route's countries in travel order, as free-text
    names. border_crossing is stored because the map provider may know
    better than the country list (e.g. a detour through a neighbour).
    """

    vehicle = models.ForeignKey(
        "equiroute_fleet.Vehicle",
        on_delete=models.PROTECT,
        related_name="transports",
    )
    horses = models.ManyToManyField(
        "equiroute_fleet.Horse",
        related_name="transports",
    )
    from_location = models.CharField(_("from"), max_length=255)
    to_location = models.CharField(_("to"), max_length=255)
    distance_km = models.DecimalField(max_digits=8, decimal_places=1)
    countries = models.JSONField(default=list, blank=True)
    border_crossing = models.BooleanField(default=False)
    status = models.CharField(
        max_length=20,
        choices=TransportStatus.choices,
        default=TransportStatus.PLANNED,
        db_index=True,
    )
    departure_at = models.DateTimeField(null=True, blank=True)
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")

    class Meta:
        verbose_name = _("transport")
        verbose_name_plural = _("transports")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    (models.Q(owner__isnull=False) & models.Q(organization__isnull=True)) |
                    models.Q(organization__isnull=False)
                ),
                name="transport_has_owner_context",
            ),
        ]

    def __str__(self):
        return f"{self.from_location} -> {self.to_location} ({self.status})"

    @property
    def route(self) -> Route:
        return Route(
            distance_km=float(self.distance_km),
            countries=tuple(self.countries or ()),
            border_crossing=self.border_crossing,
        )

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES

    def horse_ids(self) -> list:
        return list(self.horses.values_list("pk", flat=True))
