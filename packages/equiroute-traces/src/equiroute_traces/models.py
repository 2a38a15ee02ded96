"""
Cross-border (TRACES) registration records.

Phases:

    idle -> creating_transport -> registering_with_authority -> complete

A failure in either working phase returns the registration to idle.
complete is terminal and the reference number is write-once.
"""

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from equiroute_core.models import BaseModel

from .exceptions import ImmutableReferenceError


class RegistrationPhase(models.TextChoices):
    IDLE = "idle", _("Not started")
    CREATING_TRANSPORT = "creating_transport", _("Creating transport")
    REGISTERING = "registering_with_authority", _("Registering with authority")
    COMPLETE = "complete", _("Complete")


ALLOWED_TRANSITIONS = {
    RegistrationPhase.IDLE.value: {RegistrationPhase.CREATING_TRANSPORT.value},
    RegistrationPhase.CREATING_TRANSPORT.value: {
        RegistrationPhase.REGISTERING.value,
        RegistrationPhase.IDLE.value,
    },
    RegistrationPhase.REGISTERING.value: {
        RegistrationPhase.COMPLETE.value,
        RegistrationPhase.IDLE.value,
    },
    RegistrationPhase.COMPLETE.value: set(),
}

PHASE_STEPS = {
    RegistrationPhase.IDLE.value: 0,
    RegistrationPhase.CREATING_TRANSPORT.value: 1,
    RegistrationPhase.REGISTERING.value: 2,
    RegistrationPhase.COMPLETE.value: 3,
}


class Registration(BaseModel):
    """Registration state of one transport with the authority."""

    transport = models.OneToOneField(
        "equiroute_transports.Transport",
        on_delete=models.CASCADE,
        related_name="registration",
    )
    phase = models.CharField(
        max_length=40,
        choices=RegistrationPhase.choices,
        default=RegistrationPhase.IDLE,
        db_index=True,
    )
    reference_number = models.CharField(
        _("reference number"),
        max_length=100,
        blank=True,
        default="",
    )
    countries = models.JSONField(
        default=list,
        blank=True,
        help_text=_("ISO country codes along the route, in travel order"),
    )
    attempts = models.PositiveIntegerField(default=0)
    last_error = models.TextField(blank=True, default="")
    started_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = _("registration")
        verbose_name_plural = _("registrations")

    def __str__(self):
        return f"Registration of transport {self.transport_id}: {self.phase}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            original = (
                Registration.objects.filter(pk=self.pk)
                .values_list("reference_number", flat=True)
                .first()
            )
            if original and original != self.reference_number:
                raise ImmutableReferenceError(self.pk)
        super().save(*args, **kwargs)

    @property
    def is_idle(self) -> bool:
        return self.phase == RegistrationPhase.IDLE

    @property
    def is_complete(self) -> bool:
        return self.phase == RegistrationPhase.COMPLETE

    @property
    def step(self) -> int:
        return PHASE_STEPS.get(self.phase, 0)


class RegistrationEvent(BaseModel):
    """
    Audit log of registration phase changes.

    sequence orders the events of one registration.
    """

    registration = models.ForeignKey(
        Registration,
        on_delete=models.CASCADE,
        related_name="events",
    )
    sequence = models.PositiveIntegerField()
    from_phase = models.CharField(max_length=40)
    to_phase = models.CharField(max_length=40)
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    occurred_at = models.DateTimeField(auto_now_add=True)
    detail = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ["registration", "sequence"]
        constraints = [
            models.UniqueConstraint(
                fields=["registration", "sequence"],
                name="unique_registration_event_sequence",
            ),
        ]

    def __str__(self):
        return f"{self.from_phase} -> {self.to_phase}"
