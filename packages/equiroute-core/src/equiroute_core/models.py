"""Abstract base models shared by every EquiRoute app.

- TimeStampedModel: created_at/updated_at bookkeeping
- UUIDModel: UUID primary key
- BaseModel: UUID + timestamps (the default for domain records)

Usage:
    from equiroute_core.models import BaseModel

    class Horse(BaseModel):
        name = models.CharField(max_length=100)
"""
import uuid

from django.db import models


class TimeStampedModel(models.Model):
    """Abstract base model with created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class UUIDModel(models.Model):
    """Abstract base model with UUID primary key.

    Record ids are handed to clients (join links, certificate paths),
    so they should not be guessable.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    class Meta:
        abstract = True


class BaseModel(UUIDModel, TimeStampedModel):
    """UUID primary key plus timestamps.

    Records in this domain are either hard-deleted (certificates) or
    never deleted at all (organizations, memberships), so there is no
    soft-delete layer here.
    """

    class Meta:
        abstract = True
