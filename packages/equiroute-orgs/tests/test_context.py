"""Tests for the context switch manager."""

import pytest

from equiroute_core.exceptions import NotAuthenticated
from equiroute_orgs.context import ActiveContext, ContextSwitchManager
from equiroute_orgs.exceptions import InvalidContextTarget
from equiroute_orgs.models import ActorProfile, ContextMode, Membership, MembershipStatus, Permission
from equiroute_orgs.services import create_organization, remove_member


@pytest.mark.django_db
class TestLoad:
    """Tests for loading the persisted context."""

    def test_new_actor_starts_private(self, outsider):
        """An actor without preference works in private mode."""
        manager = ContextSwitchManager(outsider)

        context = manager.load()

        assert context == ActiveContext.private(outsider)
        assert manager.organizations == []
        assert manager.active_organization is None

    def test_loads_persisted_organization(self, owner, organization):
        """Creating an organization leaves the owner working in it."""
        manager = ContextSwitchManager(owner)

        context = manager.load()

        assert context.mode == ContextMode.ORGANIZATION
        assert str(context.organization_id) == str(organization.pk)
        assert manager.active_organization == organization
        assert manager.active_member_info.role == "owner"

    def test_requires_authenticated_actor(self):
        """Anonymous actors cannot get a manager."""
        with pytest.raises(NotAuthenticated):
            ContextSwitchManager(None)


@pytest.mark.django_db
class TestSwitchMode:
    """Tests for switch_mode."""

    def test_switch_to_private_persists(self, owner, organization):
        """Switching to private is written before local state changes."""
        manager = ContextSwitchManager(owner)
        manager.load()
        revision = manager.revision

        context = manager.switch_mode(ContextMode.PRIVATE)

        profile = ActorProfile.objects.get(user=owner)
        assert context.is_private
        assert profile.active_mode == ContextMode.PRIVATE
        assert profile.active_organization is None
        assert manager.revision == revision + 1

    def test_switch_between_organizations(self, owner, organization):
        """An actor can switch to any organization they belong to."""
        second = create_organization(owner, "Second Stable")
        manager = ContextSwitchManager(owner)
        manager.load()

        manager.switch_mode(ContextMode.ORGANIZATION, organization.pk)

        assert manager.active_organization == organization
        assert ActorProfile.objects.get(user=owner).active_organization == organization
        assert {entry.id for entry in manager.organizations} == {organization.pk, second.pk}

    def test_unknown_organization_rejected(self, outsider, organization):
        """Organizations outside the loaded list are rejected without writes."""
        manager = ContextSwitchManager(outsider)
        manager.load()

        with pytest.raises(InvalidContextTarget):
            manager.switch_mode(ContextMode.ORGANIZATION, organization.pk)

        assert manager.context.is_private
        assert ActorProfile.objects.get(user=outsider).active_mode == ContextMode.PRIVATE

    def test_organization_mode_requires_id(self, owner, organization):
        """Organization mode without an id is rejected."""
        manager = ContextSwitchManager(owner)
        manager.load()

        with pytest.raises(InvalidContextTarget):
            manager.switch_mode(ContextMode.ORGANIZATION)

    def test_unknown_mode_rejected(self, owner):
        """Only private and organization modes exist."""
        manager = ContextSwitchManager(owner)
        manager.load()

        with pytest.raises(InvalidContextTarget):
            manager.switch_mode("shared")

    def test_membership_removed_after_load_rejected(self, owner, organization, member, membership):
        """The switch re-checks the membership under lock."""
        manager = ContextSwitchManager(member)
        manager.load()
        manager.switch_mode(ContextMode.PRIVATE)
        Membership.objects.filter(pk=membership.pk).delete()

        with pytest.raises(InvalidContextTarget):
            manager.switch_mode(ContextMode.ORGANIZATION, organization.pk)

        assert manager.context.is_private

    def test_permissions_follow_switch(self, owner, organization, member, membership):
        """has_permission reflects the newly active context."""
        manager = ContextSwitchManager(member)
        manager.load()

        assert manager.has_permission(Permission.MANAGE_TOURS) is False

        manager.switch_mode(ContextMode.PRIVATE)

        assert manager.has_permission(Permission.MANAGE_TOURS) is True


@pytest.mark.django_db
class TestReload:
    """Tests for fail-closed reload."""

    def test_removed_member_falls_back_to_private(self, org_context, organization, member, membership):
        """Losing the active membership resets and persists private mode."""
        manager = ContextSwitchManager(member)
        manager.load()
        assert manager.active_organization == organization

        remove_member(org_context, organization, member)
        context = manager.reload()

        profile = ActorProfile.objects.get(user=member)
        assert context.is_private
        assert manager.organizations == []
        assert profile.active_mode == ContextMode.PRIVATE
        assert profile.active_organization is None

    def test_suspended_member_falls_back_to_private(self, organization, member, membership):
        """Suspension counts as losing access."""
        manager = ContextSwitchManager(member)
        manager.load()
        Membership.objects.filter(pk=membership.pk).update(status=MembershipStatus.SUSPENDED)

        assert manager.reload().is_private

    def test_deactivated_organization_falls_back_to_private(self, owner, organization):
        """A deactivated organization is no longer a valid context."""
        manager = ContextSwitchManager(owner)
        manager.load()
        organization.is_active = False
        organization.save()

        assert manager.reload().is_private
        assert manager.has_permission(Permission.MANAGE_MEMBERS) is True

    def test_reload_keeps_valid_context(self, owner, organization):
        """Reload leaves a still-valid organization context alone."""
        manager = ContextSwitchManager(owner)
        manager.load()
        revision = manager.revision

        context = manager.reload()

        assert str(context.organization_id) == str(organization.pk)
        assert manager.revision == revision

    def test_reload_adopts_switch_made_elsewhere(self, owner, organization):
        """A second manager for the same actor sees the persisted switch."""
        first = ContextSwitchManager(owner)
        second = ContextSwitchManager(owner)
        first.load()
        second.load()

        first.switch_mode(ContextMode.PRIVATE)

        assert second.reload().is_private
        assert second.revision == first.revision
