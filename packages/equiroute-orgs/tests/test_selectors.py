"""Tests for organization selectors."""

import pytest

from equiroute_orgs.models import MembershipStatus, Role
from equiroute_orgs.selectors import (
    get_actor_organizations,
    get_membership,
    get_organization_by_code,
    get_organization_members,
)


@pytest.mark.django_db
class TestSelectors:
    """Read-only organization queries."""

    def test_members_owner_first(self, organization, membership, owner, member):
        """Members come back in join order, owner first."""
        members = list(get_organization_members(organization))

        assert [m.actor for m in members] == [owner, member]
        assert members[0].role == Role.OWNER

    def test_code_lookup_ignores_case_and_whitespace(self, organization):
        assert get_organization_by_code(f"  {organization.code.lower()} ") == organization

    def test_code_lookup_skips_inactive(self, organization):
        organization.is_active = False
        organization.save()

        assert get_organization_by_code(organization.code) is None

    def test_actor_organizations_only_active_memberships(self, organization, membership, member):
        """Suspended memberships drop out of the actor's organizations."""
        assert list(get_actor_organizations(member)) == [organization]

        membership.status = MembershipStatus.SUSPENDED
        membership.save()

        assert list(get_actor_organizations(member)) == []

    def test_get_membership(self, organization, membership, member, outsider):
        assert get_membership(organization, member) == membership
        assert get_membership(organization, outsider) is None
