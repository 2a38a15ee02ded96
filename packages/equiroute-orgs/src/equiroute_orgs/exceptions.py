"""Custom exceptions for equiroute-orgs."""

from equiroute_core.exceptions import (
    AuthorizationError,
    EquirouteError,
    InvalidInputError,
    NotFoundError,
)


class OrganizationError(EquirouteError):
    """Base exception for organization errors."""
    pass


class OrganizationNotFound(NotFoundError, OrganizationError):
    """Raised when no organization matches an id or join code."""

    def __init__(self, lookup: str):
        self.lookup = lookup
        super().__init__(f"Organization '{lookup}' not found")


class InvalidOrganizationCode(InvalidInputError, OrganizationError):
    """Raised when a join code is malformed."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"'{code}' is not a valid organization code")


class OrganizationCodeExhausted(OrganizationError):
    """Raised when no unused join code could be generated."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"Could not generate a unique organization code after {attempts} attempts")


class AlreadyMember(InvalidInputError, OrganizationError):
    """Raised when an actor already belongs to the organization."""

    def __init__(self, organization, actor):
        self.organization = organization
        self.actor = actor
        super().__init__(f"{actor} is already a member of {organization.name}")


class MembershipNotFound(NotFoundError, OrganizationError):
    """Raised when an actor has no membership in the organization."""

    def __init__(self, organization, actor):
        self.organization = organization
        self.actor = actor
        super().__init__(f"{actor} is not a member of {organization.name}")


class OwnerProtected(AuthorizationError, OrganizationError):
    """Raised when an operation would remove or demote the owner."""

    def __init__(self, reason: str = None):
        super().__init__(reason or "The organization owner cannot be removed or demoted")


class InvalidRole(InvalidInputError, OrganizationError):
    """Raised for unknown roles or role changes that are not allowed."""

    def __init__(self, role: str, reason: str = None):
        self.role = role
        super().__init__(reason or f"Invalid role '{role}'")


class InvalidContextTarget(InvalidInputError, OrganizationError):
    """Raised when switching to a mode or organization that is not available."""

    def __init__(self, mode: str, organization_id=None, reason: str = None):
        self.mode = mode
        self.organization_id = organization_id
        super().__init__(reason or f"Cannot switch to {mode} context '{organization_id}'")


class InvitationError(OrganizationError):
    """Base exception for invitation problems."""
    pass


class InvitationNotFound(NotFoundError, InvitationError):
    def __init__(self, token: str):
        self.token = token
        super().__init__("Invitation not found")


class InvitationExpired(InvalidInputError, InvitationError):
    def __init__(self, invitation):
        self.invitation = invitation
        super().__init__(f"Invitation for {invitation.email} expired at {invitation.expires_at}")


class InvitationEmailMismatch(AuthorizationError, InvitationError):
    def __init__(self, invitation, email: str):
        self.invitation = invitation
        self.email = email
        super().__init__("Invitation was issued for a different email address")
