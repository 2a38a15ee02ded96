"""Service functions for organizations and memberships.

Provides:
- get_or_create_profile / complete_profile: actor profile lifecycle
- generate_organization_code: random join code
- create_organization: create an organization owned by the actor
- join_organization_by_code: join with a shared code
- invite_member / accept_invitation: email invitation flow
- update_member_role / remove_member / leave_organization
- update_organization_settings
"""

import logging
import re
import secrets
from datetime import timedelta

from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from equiroute_core.auth import require_authenticated
from equiroute_core.exceptions import InvalidInputError, MissingPermission

from .conf import (
    invitation_ttl_days,
    org_code_alphabet,
    org_code_length,
    org_code_max_attempts,
)
from .exceptions import (
    AlreadyMember,
    InvalidOrganizationCode,
    InvalidRole,
    InvitationEmailMismatch,
    InvitationExpired,
    InvitationNotFound,
    MembershipNotFound,
    OrganizationCodeExhausted,
    OrganizationNotFound,
    OwnerProtected,
)
from .models import (
    ActorProfile,
    ContextMode,
    Invitation,
    InvitationStatus,
    Membership,
    MembershipStatus,
    Organization,
    Permission,
    Role,
)
from .permissions import (
    BLANKET_ROLES,
    PERMISSION_KEYS,
    authorize,
    default_permissions,
    get_active_membership,
)

logger = logging.getLogger(__name__)

CODE_PATTERN = re.compile(r"^[A-Z0-9]+$")

SETTINGS_FLAGS = (
    "allow_members_to_create_vehicles",
    "allow_members_to_create_horses",
    "allow_members_to_create_transports",
)


def get_or_create_profile(actor) -> ActorProfile:
    """Return the actor's profile, creating it on first access."""
    require_authenticated(actor)
    profile, created = ActorProfile.objects.get_or_create(
        user=actor,
        defaults={"display_name": actor.get_full_name() or actor.get_username()},
    )
    if created:
        logger.info(f"Created profile for actor {actor.pk}")
    return profile


def complete_profile(actor, display_name: str) -> ActorProfile:
    """Set the display name and mark the profile as completed."""
    display_name = (display_name or "").strip()
    if not display_name:
        raise InvalidInputError("Display name is required")

    profile = get_or_create_profile(actor)
    profile.display_name = display_name
    profile.profile_completed = True
    profile.save(update_fields=["display_name", "profile_completed", "updated_at"])
    return profile


def normalize_code(code: str) -> str:
    """Uppercase and strip a join code, rejecting malformed input."""
    normalized = (code or "").strip().upper()
    if len(normalized) != org_code_length() or not CODE_PATTERN.match(normalized):
        raise InvalidOrganizationCode(code)
    return normalized


def generate_organization_code() -> str:
    """Random uppercase alphanumeric code of the configured length."""
    alphabet = org_code_alphabet()
    return "".join(secrets.choice(alphabet) for _ in range(org_code_length()))


def _unused_code() -> str:
    attempts = org_code_max_attempts()
    for _ in range(attempts):
        code = generate_organization_code()
        if not Organization.objects.filter(code=code).exists():
            return code
        logger.warning(f"Organization code collision on {code}; retrying")
    raise OrganizationCodeExhausted(attempts)


def _set_active_organization(actor, organization):
    profile = get_or_create_profile(actor)
    ActorProfile.objects.filter(pk=profile.pk).update(
        active_mode=ContextMode.ORGANIZATION,
        active_organization=organization,
        context_revision=F("context_revision") + 1,
    )


def create_organization(actor, name: str, description: str = "") -> Organization:
    """
    Create an organization with the actor as owner.

    The join code is re-checked against the store before insert and
    regenerated on collision, up to ORG_CODE_MAX_ATTEMPTS times. The
    unique constraint on Organization.code backs this up for races.
    The actor's active context switches to the new organization.

    Raises:
        InvalidInputError: If name is blank
        OrganizationCodeExhausted: If no unused code was found
    """
    require_authenticated(actor)
    name = (name or "").strip()
    if not name:
        raise InvalidInputError("Organization name is required")

    attempts = org_code_max_attempts()
    for attempt in range(attempts):
        code = _unused_code()
        try:
            with transaction.atomic():
                organization = Organization.objects.create(
                    name=name,
                    description=description or "",
                    code=code,
                    owner=actor,
                )
                Membership.objects.create(
                    organization=organization,
                    actor=actor,
                    role=Role.OWNER,
                    permissions=default_permissions(Role.OWNER),
                )
                _set_active_organization(actor, organization)
        except IntegrityError:
            logger.warning(f"Organization code {code} taken concurrently (attempt {attempt + 1})")
            continue

        logger.info(f"Actor {actor.pk} created organization {organization.pk} with code {code}")
        return organization

    raise OrganizationCodeExhausted(attempts)


@transaction.atomic
def join_organization_by_code(actor, code: str) -> Membership:
    """
    Join an organization using its shared code.

    The code is matched case-insensitively. The new membership has role
    member and every permission set to False. If the actor is not yet
    working in an organization, the joined one becomes active.

    Raises:
        InvalidOrganizationCode: Malformed code
        OrganizationNotFound: No active organization has that code
        AlreadyMember: The actor already has a membership row
    """
    require_authenticated(actor)
    normalized = normalize_code(code)

    try:
        organization = Organization.objects.get(code=normalized, is_active=True)
    except Organization.DoesNotExist:
        raise OrganizationNotFound(normalized)

    if Membership.objects.filter(organization=organization, actor=actor).exists():
        raise AlreadyMember(organization, actor)

    membership = Membership.objects.create(
        organization=organization,
        actor=actor,
        role=Role.MEMBER,
        permissions=default_permissions(Role.MEMBER),
    )

    profile = get_or_create_profile(actor)
    if profile.active_organization_id is None:
        _set_active_organization(actor, organization)

    logger.info(f"Actor {actor.pk} joined organization {organization.pk}")
    return membership


def _check_context_organization(context, organization):
    if context.is_private or str(context.organization_id) != str(organization.pk):
        raise MissingPermission(
            Permission.MANAGE_MEMBERS,
            "The active context must be the organization being managed",
        )


@transaction.atomic
def invite_member(context, organization, email: str, role: str = Role.MEMBER) -> Invitation:
    """
    Invite an email address to join the organization.

    Requires can_manage_members in the organization's context. Owners
    cannot be invited; ownership is fixed at creation.
    """
    _check_context_organization(context, organization)
    authorize(context, Permission.MANAGE_MEMBERS)

    email = (email or "").strip().lower()
    if not email:
        raise InvalidInputError("Email is required")
    if role not in (Role.ADMIN, Role.MEMBER):
        raise InvalidRole(role)

    invitation = Invitation.objects.create(
        organization=organization,
        email=email,
        role=role,
        token=secrets.token_urlsafe(32),
        invited_by=context.actor,
        expires_at=timezone.now() + timedelta(days=invitation_ttl_days()),
    )
    logger.info(f"Invitation {invitation.pk} issued for organization {organization.pk}")
    return invitation


@transaction.atomic
def accept_invitation(actor, token: str) -> Membership:
    """
    Accept an invitation and create the membership.

    The actor's email must match the invited address.
    """
    require_authenticated(actor)

    try:
        invitation = Invitation.objects.select_for_update().select_related("organization").get(
            token=token,
            status=InvitationStatus.PENDING,
        )
    except Invitation.DoesNotExist:
        raise InvitationNotFound(token)

    if invitation.is_expired:
        raise InvitationExpired(invitation)

    actor_email = (actor.email or "").strip().lower()
    if actor_email != invitation.email:
        raise InvitationEmailMismatch(invitation, actor_email)

    organization = invitation.organization
    if Membership.objects.filter(organization=organization, actor=actor).exists():
        raise AlreadyMember(organization, actor)

    membership = Membership.objects.create(
        organization=organization,
        actor=actor,
        role=invitation.role,
        permissions=default_permissions(invitation.role),
        invited_by=invitation.invited_by,
    )
    invitation.status = InvitationStatus.ACCEPTED
    invitation.accepted_at = timezone.now()
    invitation.save(update_fields=["status", "accepted_at", "updated_at"])

    profile = get_or_create_profile(actor)
    if profile.active_organization_id is None:
        _set_active_organization(actor, organization)

    return membership


def _get_membership(organization, actor) -> Membership:
    try:
        return Membership.objects.select_for_update().get(organization=organization, actor=actor)
    except Membership.DoesNotExist:
        raise MembershipNotFound(organization, actor)


def _clean_permissions(permissions: dict) -> dict:
    unknown = set(permissions) - set(PERMISSION_KEYS)
    if unknown:
        raise InvalidInputError(f"Unknown permissions: {', '.join(sorted(unknown))}")
    return {key: bool(value) for key, value in permissions.items()}


@transaction.atomic
def update_member_role(context, organization, member_actor, role: str, permissions: dict = None) -> Membership:
    """
    Change a member's role and, optionally, their permissions map.

    Requires can_manage_members. The owner membership cannot be changed
    and nobody can be promoted to owner.
    """
    _check_context_organization(context, organization)
    authorize(context, Permission.MANAGE_MEMBERS)

    if role not in Role.values:
        raise InvalidRole(role)
    if role == Role.OWNER:
        raise InvalidRole(role, "Ownership cannot be granted through a role change")

    membership = _get_membership(organization, member_actor)
    if membership.is_owner:
        raise OwnerProtected()

    membership.role = role
    if permissions is not None:
        merged = dict(membership.permissions or {})
        merged.update(_clean_permissions(permissions))
        membership.permissions = merged
    elif role != Role.MEMBER:
        membership.permissions = default_permissions(role)
    membership.save(update_fields=["role", "permissions", "updated_at"])

    logger.info(f"Membership {membership.pk} changed to role {role} by actor {context.actor_id}")
    return membership


@transaction.atomic
def remove_member(context, organization, member_actor) -> None:
    """
    Remove a member from the organization.

    Requires can_manage_members. The owner cannot be removed. A removed
    actor's context preference is left as is; their context manager
    falls back to private on its next reload.
    """
    _check_context_organization(context, organization)
    authorize(context, Permission.MANAGE_MEMBERS)

    membership = _get_membership(organization, member_actor)
    if membership.is_owner:
        raise OwnerProtected()

    membership.delete()
    logger.info(f"Actor {member_actor.pk} removed from organization {organization.pk}")


@transaction.atomic
def leave_organization(actor, organization) -> None:
    """Leave an organization. Owners cannot leave their own organization."""
    require_authenticated(actor)
    membership = _get_membership(organization, actor)
    if membership.is_owner:
        raise OwnerProtected("The owner cannot leave the organization")

    membership.delete()
    ActorProfile.objects.filter(user=actor, active_organization=organization).update(
        active_mode=ContextMode.PRIVATE,
        active_organization=None,
        context_revision=F("context_revision") + 1,
    )


@transaction.atomic
def update_organization_settings(context, organization, **changes) -> Organization:
    """
    Update name, description or member-creation flags.

    Only owners and admins may change settings.
    """
    require_authenticated(context.actor)
    _check_context_organization(context, organization)
    membership = get_active_membership(context)
    if membership is None or membership.role not in BLANKET_ROLES:
        raise MissingPermission("update_organization_settings", "Only owners and admins can change settings")

    allowed = {"name", "description", *SETTINGS_FLAGS}
    unknown = set(changes) - allowed
    if unknown:
        raise InvalidInputError(f"Cannot update fields: {', '.join(sorted(unknown))}")

    if "name" in changes:
        changes["name"] = (changes["name"] or "").strip()
        if not changes["name"]:
            raise InvalidInputError("Organization name is required")

    for field, value in changes.items():
        setattr(organization, field, bool(value) if field in SETTINGS_FLAGS else value)
    organization.save(update_fields=[*changes, "updated_at"])
    return organization


def suspend_member(context, organization, member_actor) -> Membership:
    """Suspend a member without deleting the membership row."""
    _check_context_organization(context, organization)
    authorize(context, Permission.MANAGE_MEMBERS)

    with transaction.atomic():
        membership = _get_membership(organization, member_actor)
        if membership.is_owner:
            raise OwnerProtected()
        membership.status = MembershipStatus.SUSPENDED
        membership.save(update_fields=["status", "updated_at"])
    return membership
