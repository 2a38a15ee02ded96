"""Reconciliation of a requirement set against certificates and manual ticks.

All functions here are pure: they take a requirement set, certificate
lists and previous confirmations and return new values.
"""

from django.utils import timezone

from .matching import REQUIREMENT_ALIASES, get_matcher
from .values import SEVERITY_ORDER, ComplianceStatus, Confirmation, Scope


def certificates_in_scope(certificates_by_entity, scope: str) -> list:
    """Certificates that may satisfy a requirement of the given scope.

    Horse requirements look at horse certificates, vehicle requirements
    at the vehicle's, and everything else at the organization's.
    """
    if scope not in (Scope.HORSE, Scope.VEHICLE):
        scope = Scope.ORGANIZATION
    return list(certificates_by_entity.get(str(scope), ()) or ())


def is_expired(certificate, today) -> bool:
    expires_on = getattr(certificate, "expires_on", None)
    return expires_on is not None and expires_on <= today


def find_matching_certificate(requirement, certificates_by_entity, matcher=None, today=None):
    """First unexpired certificate in scope that satisfies the requirement."""
    matcher = matcher or get_matcher()
    today = today or timezone.localdate()
    for certificate in certificates_in_scope(certificates_by_entity, requirement.scope):
        if is_expired(certificate, today):
            continue
        if matcher.matches(certificate, requirement):
            return certificate
    return None


def reconcile(requirement_set, certificates_by_entity, manual=(), matcher=None, today=None) -> Confirmation:
    """
    Split confirmations into manual and auto sets.

    A requirement with a matching, unexpired certificate in its scope is
    auto-confirmed. A manual confirmation for the same requirement is
    dropped: auto confirmation dominates because it carries provenance.
    Manual ids that are no longer part of the set are dropped too.

    Args:
        requirement_set: RequirementSet from evaluate()
        certificates_by_entity: Mapping of scope ("organization",
            "vehicle", "horse") to certificate lists
        manual: Previously manually confirmed requirement ids
        matcher: Matching strategy; defaults to the configured one
        today: Date used for expiry checks

    Returns:
        Confirmation with disjoint manual and auto sets
    """
    matcher = matcher or get_matcher()
    today = today or timezone.localdate()

    auto = set()
    for requirement in requirement_set.all_documents():
        if find_matching_certificate(requirement, certificates_by_entity, matcher, today) is not None:
            auto.add(requirement.id)

    known = requirement_set.ids()
    remaining_manual = {rid for rid in manual if rid in known and rid not in auto}
    return Confirmation(manual=frozenset(remaining_manual), auto=frozenset(auto))


def toggle_manual(confirmation: Confirmation, requirement_id: str) -> Confirmation:
    """
    Flip the manual confirmation of a requirement.

    Auto-confirmed requirements are left as they are.
    """
    if requirement_id in confirmation.auto:
        return confirmation
    manual = set(confirmation.manual)
    if requirement_id in manual:
        manual.remove(requirement_id)
    else:
        manual.add(requirement_id)
    return Confirmation(manual=frozenset(manual), auto=confirmation.auto)


def compliance_status(requirement_set, confirmation: Confirmation, exclude=()) -> ComplianceStatus:
    """
    Count confirmed required documents against required documents.

    Args:
        exclude: Requirement ids left out of both counts
    """
    excluded = set(exclude)
    required = [r.id for r in requirement_set.required_documents() if r.id not in excluded]
    confirmed = [rid for rid in required if confirmation.is_confirmed(rid)]
    return ComplianceStatus(
        required=len(required),
        confirmed=len(confirmed),
        auto_confirmed=len([rid for rid in required if rid in confirmation.auto]),
        manually_confirmed=len([rid for rid in required if rid in confirmation.manual]),
        missing_ids=tuple(rid for rid in required if not confirmation.is_confirmed(rid)),
    )


def sort_advisories(advisories) -> list:
    """Advisories ordered critical, warning, info; stable within a severity."""
    return sorted(advisories, key=lambda a: SEVERITY_ORDER.get(a.severity, len(SEVERITY_ORDER)))


def suggest_certificates(requirement_set, missing_ids) -> list[dict]:
    """Certificate types to upload for missing requirements."""
    suggestions = []
    for requirement_id in missing_ids:
        requirement = requirement_set.get(requirement_id)
        if requirement is None:
            continue
        aliases = REQUIREMENT_ALIASES.get(requirement_id, ())
        certificate_type = aliases[0] if aliases else requirement.name
        suggestions.append({
            "requirement_id": requirement_id,
            "certificate_type": certificate_type,
            "scope": requirement.scope,
            "description": f"Upload et {certificate_type} certifikat",
        })
    return suggestions
