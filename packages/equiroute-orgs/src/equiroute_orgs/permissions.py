"""Permission resolution for the active context.

can_perform() is a pure function of its inputs and is meant to be
called on every permission-sensitive action. authorize() fetches the
membership fresh from the database each time, so a permission granted
before a context switch or a role change is never reused afterwards.
"""

from equiroute_core.auth import require_authenticated
from equiroute_core.exceptions import MissingPermission

from .models import ContextMode, Membership, MembershipStatus, Permission, Role

PERMISSION_KEYS = tuple(Permission.values)

BLANKET_ROLES = frozenset({Role.OWNER.value, Role.ADMIN.value})


def default_permissions(role: str) -> dict:
    """Permission map a new membership starts with for the given role."""
    granted = role in BLANKET_ROLES
    return {key: granted for key in PERMISSION_KEYS}


def can_perform(context, membership, action: str) -> bool:
    """
    Decide whether the active context may perform action.

    - Private mode: always True, the actor controls their own data.
    - Organization mode without a membership: False.
    - Owner or admin: True regardless of the permissions map.
    - Member: the boolean stored at permissions[action], False if absent.
    """
    if context.mode == ContextMode.PRIVATE:
        return True

    if membership is None:
        return False

    if membership.role in BLANKET_ROLES:
        return True

    permissions = membership.permissions or {}
    return bool(permissions.get(action, False))


def get_active_membership(context):
    """
    Fetch the actor's active membership for the context's organization.

    Returns None in private mode, or when the membership is missing,
    suspended, or belongs to a deactivated organization.
    """
    if context.mode != ContextMode.ORGANIZATION or context.organization_id is None:
        return None

    return (
        Membership.objects.select_related("organization")
        .filter(
            organization_id=context.organization_id,
            actor_id=context.actor_id,
            status=MembershipStatus.ACTIVE,
            organization__is_active=True,
        )
        .first()
    )


def authorize(context, action: str):
    """
    Raise MissingPermission unless the context may perform action.

    Returns the membership used for the decision (None in private mode).
    """
    require_authenticated(context.actor)
    membership = get_active_membership(context)
    if not can_perform(context, membership, action):
        if context.mode == ContextMode.ORGANIZATION and membership is None:
            raise MissingPermission(action, "No active membership in the selected organization")
        raise MissingPermission(action)
    return membership
