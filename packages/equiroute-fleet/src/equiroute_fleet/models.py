"""
Fleet models: the vehicles and horses that take part in transports.

Every record is owned by exactly one context: a private actor (owner)
or an organization. ContextOwnedModel carries that pair and the
queryset filter that scopes reads to an ActiveContext.
"""

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _

from equiroute_core.models import BaseModel
from equiroute_orgs.models import ContextMode


class EntityType(models.TextChoices):
    """Kinds of record that can own certificates."""

    ORGANIZATION = "organization", _("Organization")
    VEHICLE = "vehicle", _("Vehicle")
    HORSE = "horse", _("Horse")


class VehicleType(models.TextChoices):
    TRUCK = "truck", _("Truck")
    TRAILER = "trailer", _("Trailer")
    VAN = "van", _("Van")


class ContextOwnedQuerySet(models.QuerySet):
    def for_context(self, context):
        """Records visible in the given ActiveContext."""
        if context.mode == ContextMode.ORGANIZATION:
            return self.filter(organization_id=context.organization_id)
        return self.filter(owner_id=context.actor_id, organization__isnull=True)


class ContextOwnedModel(BaseModel):
    """Abstract base for records owned by an actor or an organization."""

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="+",
    )
    organization = models.ForeignKey(
        "equiroute_orgs.Organization",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    objects = ContextOwnedQuerySet.as_manager()

    class Meta:
        abstract = True

    def belongs_to(self, context) -> bool:
        """True if the record is owned by the given ActiveContext."""
        if context.mode == ContextMode.ORGANIZATION:
            return self.organization_id is not None and str(self.organization_id) == str(context.organization_id)
        return self.organization_id is None and self.owner_id == context.actor_id


class Vehicle(ContextOwnedModel):
    """A vehicle used for horse transport.

    license_plate is stored normalized (no spaces, uppercase).
    registry_data keeps the raw attributes returned by the vehicle
    registry when the record was pre-filled.
    """

    license_plate = models.CharField(_("license plate"), max_length=20)
    make = models.CharField(max_length=100, blank=True)
    model = models.CharField(max_length=100, blank=True)
    vehicle_type = models.CharField(
        max_length=20,
        choices=VehicleType.choices,
        default=VehicleType.TRAILER,
    )
    capacity = models.PositiveSmallIntegerField(
        default=2,
        help_text=_("Number of horses the vehicle can carry"),
    )
    vin = models.CharField(_("VIN"), max_length=32, blank=True)
    registry_data = models.JSONField(default=dict, blank=True)

    class Meta:
        verbose_name = _("vehicle")
        verbose_name_plural = _("vehicles")
        ordering = ["license_plate"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    (Q(owner__isnull=False) & Q(organization__isnull=True)) |
                    (Q(organization__isnull=False))
                ),
                name="vehicle_has_owner_context",
            ),
        ]

    def __str__(self):
        label = " ".join(part for part in (self.make, self.model) if part)
        return f"{self.license_plate} {label}".strip()


class Horse(ContextOwnedModel):
    """A horse that can be transported."""

    name = models.CharField(_("name"), max_length=100)
    ueln = models.CharField(
        _("UELN"),
        max_length=32,
        blank=True,
        help_text=_("Universal Equine Life Number from the horse passport"),
    )
    breed = models.CharField(max_length=100, blank=True)
    birth_year = models.PositiveSmallIntegerField(null=True, blank=True)

    class Meta:
        verbose_name = _("horse")
        verbose_name_plural = _("horses")
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    (Q(owner__isnull=False) & Q(organization__isnull=True)) |
                    (Q(organization__isnull=False))
                ),
                name="horse_has_owner_context",
            ),
        ]

    def __str__(self):
        return self.name
