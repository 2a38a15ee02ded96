"""Active context resolution and switching.

The active context is explicit state: every service takes an
ActiveContext argument instead of reading a global. The
ContextSwitchManager builds that value from the persisted preference on
ActorProfile and keeps it in step with the database.

Usage:
    manager = ContextSwitchManager(request.user)
    manager.load()
    manager.switch_mode("organization", organization.pk)
    create_vehicle(manager.context, license_plate="AB12345")
"""

import logging
from dataclasses import dataclass

from django.db import transaction
from django.db.models import F

from equiroute_core.auth import require_authenticated

from .exceptions import InvalidContextTarget
from .models import ActorProfile, ContextMode, Membership, MembershipStatus
from .permissions import can_perform

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActiveContext:
    """The data context an actor is working in."""

    actor: object
    mode: str = ContextMode.PRIVATE
    organization_id: object = None

    @classmethod
    def private(cls, actor) -> "ActiveContext":
        return cls(actor=actor, mode=ContextMode.PRIVATE)

    @classmethod
    def for_organization(cls, actor, organization_id) -> "ActiveContext":
        return cls(actor=actor, mode=ContextMode.ORGANIZATION, organization_id=organization_id)

    @property
    def actor_id(self):
        return self.actor.pk

    @property
    def is_private(self) -> bool:
        return self.mode == ContextMode.PRIVATE


@dataclass(frozen=True)
class OrganizationEntry:
    """An organization the actor belongs to, with their own membership."""

    organization: object
    member_info: object

    @property
    def id(self):
        return self.organization.pk


def fetch_organization_entries(actor) -> list[OrganizationEntry]:
    """Load every organization where the actor has an active membership."""
    memberships = (
        Membership.objects.select_related("organization")
        .filter(
            actor=actor,
            status=MembershipStatus.ACTIVE,
            organization__is_active=True,
        )
        .order_by("organization__name", "joined_at")
    )
    return [OrganizationEntry(organization=m.organization, member_info=m) for m in memberships]


class ContextSwitchManager:
    """Owns an actor's active mode and the organizations they can switch to.

    switch_mode() persists the new preference before touching local
    state, then adopts whatever was persisted. reload() fails closed to
    private mode when the active organization is no longer available.
    """

    def __init__(self, actor):
        self.actor = require_authenticated(actor)
        self._organizations: list[OrganizationEntry] = []
        self._context = ActiveContext.private(actor)
        self._revision = None

    @property
    def context(self) -> ActiveContext:
        return self._context

    @property
    def organizations(self) -> list[OrganizationEntry]:
        return list(self._organizations)

    @property
    def revision(self):
        return self._revision

    @property
    def active_entry(self):
        if self._context.is_private:
            return None
        return self._find_entry(self._context.organization_id)

    @property
    def active_organization(self):
        entry = self.active_entry
        return entry.organization if entry else None

    @property
    def active_member_info(self):
        entry = self.active_entry
        return entry.member_info if entry else None

    def has_permission(self, action: str) -> bool:
        """Check action against the loaded membership for the active context."""
        return can_perform(self._context, self.active_member_info, action)

    def load(self) -> ActiveContext:
        """Load organizations and the persisted preference."""
        return self._sync()

    def reload(self) -> ActiveContext:
        """
        Re-fetch organizations and the persisted preference.

        If the active organization disappeared (membership removed,
        suspended or organization deactivated), the context is reset to
        private and that reset is persisted.
        """
        return self._sync()

    def switch_mode(self, mode: str, organization_id=None) -> ActiveContext:
        """
        Switch the active context.

        Raises InvalidContextTarget for unknown modes, a missing
        organization id, or an organization that is not in the loaded
        list. Nothing is written in that case.
        """
        if mode not in ContextMode.values:
            raise InvalidContextTarget(mode, organization_id, f"Unknown mode '{mode}'")

        if mode == ContextMode.ORGANIZATION:
            if organization_id is None:
                raise InvalidContextTarget(mode, None, "An organization is required for organization mode")
            if self._find_entry(organization_id) is None:
                raise InvalidContextTarget(mode, organization_id)
        else:
            organization_id = None

        with transaction.atomic():
            profile = self._lock_profile()
            if organization_id is not None and not self._membership_exists(organization_id):
                raise InvalidContextTarget(
                    mode, organization_id, "Membership is no longer active"
                )
            ActorProfile.objects.filter(pk=profile.pk).update(
                active_mode=mode,
                active_organization_id=organization_id,
                context_revision=F("context_revision") + 1,
            )
            profile.refresh_from_db()

        self._adopt(profile)
        logger.info(
            f"Actor {self.actor.pk} switched to {profile.active_mode} "
            f"context {profile.active_organization_id} (revision {profile.context_revision})"
        )
        return self._context

    def _sync(self) -> ActiveContext:
        self._organizations = fetch_organization_entries(self.actor)
        profile = self._get_profile()

        if (
            profile.active_mode == ContextMode.ORGANIZATION
            and self._find_entry(profile.active_organization_id) is None
        ):
            logger.warning(
                f"Actor {self.actor.pk} lost access to organization "
                f"{profile.active_organization_id}; resetting to private context"
            )
            profile = self._persist_private(profile)

        self._adopt(profile)
        return self._context

    def _adopt(self, profile):
        if profile.active_mode == ContextMode.ORGANIZATION:
            self._context = ActiveContext.for_organization(self.actor, profile.active_organization_id)
        else:
            self._context = ActiveContext.private(self.actor)
        self._revision = profile.context_revision

    def _persist_private(self, stale_profile):
        # Only reset if nobody switched in the meantime.
        with transaction.atomic():
            updated = ActorProfile.objects.filter(
                pk=stale_profile.pk,
                context_revision=stale_profile.context_revision,
            ).update(
                active_mode=ContextMode.PRIVATE,
                active_organization=None,
                context_revision=F("context_revision") + 1,
            )
            profile = ActorProfile.objects.get(pk=stale_profile.pk)

        if not updated and profile.active_mode == ContextMode.ORGANIZATION:
            if self._find_entry(profile.active_organization_id) is None:
                return self._persist_private(profile)
        return profile

    def _find_entry(self, organization_id):
        for entry in self._organizations:
            if str(entry.id) == str(organization_id):
                return entry
        return None

    def _membership_exists(self, organization_id) -> bool:
        return Membership.objects.filter(
            organization_id=organization_id,
            actor=self.actor,
            status=MembershipStatus.ACTIVE,
            organization__is_active=True,
        ).exists()

    def _get_profile(self):
        from .services import get_or_create_profile

        return get_or_create_profile(self.actor)

    def _lock_profile(self):
        self._get_profile()
        return ActorProfile.objects.select_for_update().get(user=self.actor)
