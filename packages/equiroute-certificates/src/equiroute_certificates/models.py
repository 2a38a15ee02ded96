"""
Certificate records attached to organizations, vehicles and horses.

A certificate is keyed by (entity_type, entity_id) rather than a
foreign key, so one table serves every kind of owner. entity_id is a
CharField to hold UUIDs from any model.
"""

import hashlib
import os

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from equiroute_core.models import BaseModel
from equiroute_fleet.models import EntityType

from .conf import get_certificate_storage, upload_root
from .exceptions import ImmutableChecksumError


def certificate_upload_path(instance, filename):
    """certificates/<entity_type>/<entity_id>/<timestamp>_<filename>"""
    stamp = timezone.now().strftime("%Y%m%d%H%M%S%f")
    return f"{upload_root()}/{instance.entity_type}/{instance.entity_id}/{stamp}_{os.path.basename(filename)}"


class CertificateQuerySet(models.QuerySet):
    def for_entity(self, entity_type: str, entity_id):
        return self.filter(entity_type=entity_type, entity_id=str(entity_id))

    def for_entities(self, entity_type: str, entity_ids):
        return self.filter(entity_type=entity_type, entity_id__in=[str(i) for i in entity_ids])

    def valid_on(self, day):
        """Certificates without an expiry date or expiring after day."""
        return self.filter(models.Q(expires_on__isnull=True) | models.Q(expires_on__gt=day))


class Certificate(BaseModel):
    """An uploaded certificate file and its user-editable metadata.

    checksum is computed at upload and cannot change afterwards.
    Listing order is newest upload first.
    """

    entity_type = models.CharField(
        max_length=20,
        choices=EntityType.choices,
        db_index=True,
    )
    entity_id = models.CharField(
        max_length=255,
        db_index=True,
        help_text="Primary key of the owning organization, vehicle or horse",
    )
    file = models.FileField(
        upload_to=certificate_upload_path,
        storage=get_certificate_storage,
        max_length=500,
    )
    file_name = models.CharField(
        max_length=255,
        help_text="Original filename",
    )
    display_name = models.CharField(_("display name"), max_length=255)
    content_type = models.CharField(
        max_length=100,
        help_text="MIME content type (e.g., application/pdf)",
    )
    file_size = models.PositiveBigIntegerField(default=0)
    checksum = models.CharField(
        max_length=64,
        blank=True,
        default="",
        help_text="SHA-256 checksum for integrity verification",
    )
    certificate_type = models.CharField(
        _("certificate type"),
        max_length=100,
        blank=True,
        help_text="Free-text label used to match compliance requirements",
    )
    notes = models.TextField(blank=True, default="")
    expires_on = models.DateField(null=True, blank=True)
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    uploaded_at = models.DateTimeField(default=timezone.now, db_index=True)

    objects = CertificateQuerySet.as_manager()

    class Meta:
        verbose_name = _("certificate")
        verbose_name_plural = _("certificates")
        ordering = ["-uploaded_at", "-id"]
        indexes = [
            models.Index(fields=["entity_type", "entity_id"], name="certificate_entity_idx"),
        ]

    def __str__(self):
        return f"{self.display_name} ({self.entity_type} {self.entity_id})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            original = Certificate.objects.filter(pk=self.pk).values_list("checksum", flat=True).first()
            if original and original != self.checksum:
                raise ImmutableChecksumError(self.pk)

        if self.entity_id is not None:
            self.entity_id = str(self.entity_id)
        super().save(*args, **kwargs)

    @property
    def url(self) -> str:
        return self.file.url

    def is_expired(self, day=None) -> bool:
        if self.expires_on is None:
            return False
        return self.expires_on <= (day or timezone.localdate())

    def compute_checksum(self) -> str:
        sha256_hash = hashlib.sha256()
        with self.file.open("rb") as f:
            for chunk in iter(lambda: f.read(8192), b""):
                sha256_hash.update(chunk)
        return sha256_hash.hexdigest()

    def verify_checksum(self) -> bool:
        if not self.checksum:
            return False
        return self.compute_checksum() == self.checksum
