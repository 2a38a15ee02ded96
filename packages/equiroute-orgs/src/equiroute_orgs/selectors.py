"""Read-only queries for organizations and memberships."""

from .models import Membership, MembershipStatus, Organization


def get_actor_organizations(actor):
    """Active organizations where the actor holds an active membership."""
    return Organization.objects.filter(
        is_active=True,
        memberships__actor=actor,
        memberships__status=MembershipStatus.ACTIVE,
    ).distinct()


def get_organization_by_code(code: str):
    """Case-insensitive lookup by join code. Returns None if not found."""
    return Organization.objects.filter(code=(code or "").strip().upper(), is_active=True).first()


def get_organization_members(organization):
    """Memberships of an organization, owner first."""
    return (
        Membership.objects.filter(organization=organization)
        .select_related("actor")
        .order_by("joined_at")
    )


def get_membership(organization, actor):
    """The membership row for (organization, actor), or None."""
    return Membership.objects.filter(organization=organization, actor=actor).first()
