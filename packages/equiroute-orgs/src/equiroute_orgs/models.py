"""
Organization and membership models.

This module provides:
- ActorProfile: Per-user profile and persisted context preference
- Organization: A shared data context with a human-shareable join code
- Membership: Binds an actor to an organization with a role and permissions
- Invitation: Email invitation to join an organization

Role semantics:
| Role   | Authority                                   |
|--------|---------------------------------------------|
| owner  | Everything; cannot be removed or demoted    |
| admin  | Everything                                  |
| member | Only what the permissions map grants        |
"""

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from equiroute_core.models import BaseModel


class ContextMode(models.TextChoices):
    PRIVATE = "private", _("Private")
    ORGANIZATION = "organization", _("Organization")


class Role(models.TextChoices):
    OWNER = "owner", _("Owner")
    ADMIN = "admin", _("Admin")
    MEMBER = "member", _("Member")


class Permission(models.TextChoices):
    """Actions a member can be granted inside an organization."""

    MANAGE_MEMBERS = "can_manage_members", _("Manage members")
    MANAGE_VEHICLES = "can_manage_vehicles", _("Manage vehicles")
    MANAGE_HORSES = "can_manage_horses", _("Manage horses")
    MANAGE_TOURS = "can_manage_tours", _("Manage tours")


class MembershipStatus(models.TextChoices):
    ACTIVE = "active", _("Active")
    SUSPENDED = "suspended", _("Suspended")


class InvitationStatus(models.TextChoices):
    PENDING = "pending", _("Pending")
    ACCEPTED = "accepted", _("Accepted")
    REVOKED = "revoked", _("Revoked")


class ActorProfile(BaseModel):
    """Profile and persisted context preference for an authenticated user.

    The active mode/organization stored here is the source of truth for
    which context the actor works in. context_revision is bumped on every
    persisted switch so concurrent writers can be told apart.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="equiroute_profile",
    )
    display_name = models.CharField(_("display name"), max_length=255, blank=True)
    profile_completed = models.BooleanField(default=False)
    active_mode = models.CharField(
        max_length=20,
        choices=ContextMode.choices,
        default=ContextMode.PRIVATE,
    )
    active_organization = models.ForeignKey(
        "Organization",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    context_revision = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = _("actor profile")
        verbose_name_plural = _("actor profiles")
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(active_mode="private", active_organization__isnull=True)
                    | Q(active_mode="organization", active_organization__isnull=False)
                ),
                name="actorprofile_mode_matches_organization",
            ),
        ]

    def __str__(self):
        return self.display_name or str(self.user)


class Organization(BaseModel):
    """An organization whose vehicles, horses and transports are shared.

    Organizations are never hard-deleted; is_active=False hides them.
    The allow_members_to_create_* flags let ordinary members create
    records even without the matching explicit permission.
    """

    name = models.CharField(_("name"), max_length=255)
    description = models.TextField(_("description"), blank=True)
    code = models.CharField(
        _("join code"),
        max_length=16,
        unique=True,
        help_text=_("Uppercase alphanumeric code shared with new members"),
    )
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="owned_organizations",
    )
    allow_members_to_create_vehicles = models.BooleanField(default=True)
    allow_members_to_create_horses = models.BooleanField(default=True)
    allow_members_to_create_transports = models.BooleanField(default=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        verbose_name = _("organization")
        verbose_name_plural = _("organizations")
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.code})"

    def save(self, *args, **kwargs):
        self.code = (self.code or "").upper()
        super().save(*args, **kwargs)


class Membership(BaseModel):
    """Binds an actor to an organization.

    Exactly one row per (organization, actor). The permissions map is
    only consulted for role=member; owners and admins have blanket
    authority.
    """

    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name="memberships",
    )
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="equiroute_memberships",
    )
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.MEMBER,
    )
    permissions = models.JSONField(default=dict, blank=True)
    status = models.CharField(
        max_length=20,
        choices=MembershipStatus.choices,
        default=MembershipStatus.ACTIVE,
    )
    joined_at = models.DateTimeField(default=timezone.now)
    invited_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        verbose_name = _("membership")
        verbose_name_plural = _("memberships")
        ordering = ["joined_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "actor"],
                name="unique_membership_per_actor",
            ),
        ]

    def __str__(self):
        return f"{self.actor} @ {self.organization.name} ({self.role})"

    @property
    def is_active(self) -> bool:
        return self.status == MembershipStatus.ACTIVE

    @property
    def is_owner(self) -> bool:
        return self.role == Role.OWNER


class Invitation(BaseModel):
    """Pending invitation for an email address to join an organization."""

    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name="invitations",
    )
    email = models.EmailField()
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.MEMBER,
    )
    token = models.CharField(max_length=64, unique=True)
    status = models.CharField(
        max_length=20,
        choices=InvitationStatus.choices,
        default=InvitationStatus.PENDING,
    )
    invited_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    expires_at = models.DateTimeField()
    accepted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = _("invitation")
        verbose_name_plural = _("invitations")
        ordering = ["-created_at"]

    def __str__(self):
        return f"Invitation for {self.email} to {self.organization.name}"

    @property
    def is_expired(self) -> bool:
        return timezone.now() >= self.expires_at
