"""Persisted compliance state per transport."""

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from equiroute_core.models import BaseModel

from .values import Confirmation, RequirementSet


class TransportCompliance(BaseModel):
    """Requirement snapshot and confirmation sets of one transport.

    manual_confirmed and auto_confirmed are JSON lists of requirement
    ids and are kept disjoint by the services that write them. The
    compliance verdict is never stored; it is recomputed from these.
    """

    transport = models.OneToOneField(
        "equiroute_transports.Transport",
        on_delete=models.CASCADE,
        related_name="compliance",
    )
    requirements = models.JSONField(default=dict, blank=True)
    manual_confirmed = models.JSONField(default=list, blank=True)
    auto_confirmed = models.JSONField(default=list, blank=True)
    evaluated_at = models.DateTimeField(default=timezone.now)
    reconciled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = _("transport compliance")
        verbose_name_plural = _("transport compliance")

    def __str__(self):
        return f"Compliance for transport {self.transport_id}"

    @property
    def requirement_set(self) -> RequirementSet:
        return RequirementSet.from_dict(self.requirements)

    @property
    def confirmation(self) -> Confirmation:
        return Confirmation(
            manual=frozenset(self.manual_confirmed or ()),
            auto=frozenset(self.auto_confirmed or ()),
        )

    def set_confirmation(self, confirmation: Confirmation):
        self.manual_confirmed = sorted(confirmation.manual)
        self.auto_confirmed = sorted(confirmation.auto)
