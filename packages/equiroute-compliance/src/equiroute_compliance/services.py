"""Compliance services for transports.

Provides:
- evaluate_transport: (re)build a transport's checklist and confirmations
- refresh_confirmations: re-reconcile against current certificates
- toggle_requirement: manual tick/untick by the user
- confirm_requirement: system confirmation (e.g. after TRACES registration)
- get_compliance_status / get_checklist: live views for rendering
- missing_requirements: required documents still unconfirmed
"""

import logging
from dataclasses import dataclass

from django.db import transaction
from django.utils import timezone

from equiroute_certificates.services import certificates_for_transport
from equiroute_core.exceptions import AuthorizationError
from equiroute_orgs.models import Permission
from equiroute_orgs.permissions import authorize

from .evaluator import evaluate
from .exceptions import RequirementNotFound
from .matching import get_matcher
from .models import TransportCompliance
from .reconciliation import (
    compliance_status,
    reconcile,
    sort_advisories,
    suggest_certificates,
    toggle_manual,
)
from .values import ComplianceStatus, Confirmation, RequirementSet, TransportEntities

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Checklist:
    """Everything needed to render a transport's compliance checklist."""

    requirement_set: RequirementSet
    confirmation: Confirmation
    status: ComplianceStatus
    advisories: list
    suggestions: list


def transport_certificates(transport) -> dict:
    """Freshly fetched certificates of the transport's entities, keyed by scope."""
    snapshot = certificates_for_transport(
        organization_id=transport.organization_id,
        vehicle_id=transport.vehicle_id,
        horse_ids=transport.horse_ids(),
    )
    return snapshot.as_mapping()


def _locked(transport) -> TransportCompliance:
    compliance = (
        TransportCompliance.objects.select_for_update()
        .filter(transport=transport)
        .first()
    )
    if compliance is None:
        compliance = TransportCompliance.objects.create(transport=transport)
        compliance = TransportCompliance.objects.select_for_update().get(pk=compliance.pk)
    return compliance


def _reconcile_and_save(compliance, transport, requirement_set, manual) -> TransportCompliance:
    confirmation = reconcile(
        requirement_set,
        transport_certificates(transport),
        manual=manual,
        matcher=get_matcher(),
    )
    superseded = set(manual) & confirmation.auto
    if superseded:
        logger.info(
            f"Transport {transport.pk}: manual confirmations superseded by certificates: "
            f"{', '.join(sorted(superseded))}"
        )

    compliance.requirements = requirement_set.to_dict()
    compliance.set_confirmation(confirmation)
    compliance.reconciled_at = timezone.now()
    compliance.save()
    return compliance


@transaction.atomic
def evaluate_transport(transport) -> TransportCompliance:
    """
    Evaluate the transport's requirements and reconcile confirmations.

    Manual confirmations survive re-evaluation as long as their
    requirement is still part of the checklist.
    """
    compliance = _locked(transport)
    requirement_set = evaluate(transport.route, TransportEntities.for_transport(transport))
    compliance.evaluated_at = timezone.now()
    return _reconcile_and_save(compliance, transport, requirement_set, compliance.manual_confirmed or [])


@transaction.atomic
def refresh_confirmations(transport) -> TransportCompliance:
    """Re-reconcile the stored checklist against current certificates."""
    compliance = TransportCompliance.objects.select_for_update().filter(transport=transport).first()
    if compliance is None or not compliance.requirements:
        return evaluate_transport(transport)
    return _reconcile_and_save(
        compliance, transport, compliance.requirement_set, compliance.manual_confirmed or []
    )


def get_compliance(transport) -> TransportCompliance:
    """Stored compliance for the transport, evaluating it on first access."""
    compliance = TransportCompliance.objects.filter(transport=transport).first()
    if compliance is None or not compliance.requirements:
        return evaluate_transport(transport)
    return compliance


def _check_transport_access(context, transport):
    if not transport.belongs_to(context):
        raise AuthorizationError(f"Transport {transport.pk} does not belong to the active context")
    authorize(context, Permission.MANAGE_TOURS)


@transaction.atomic
def toggle_requirement(context, transport, requirement_id: str) -> TransportCompliance:
    """
    Tick or untick a requirement manually.

    Requirements that are auto-confirmed stay as they are; the call is
    a no-op rather than an error.

    Raises:
        MissingPermission: The context cannot manage transports
        RequirementNotFound: The id is not part of the transport's checklist
    """
    _check_transport_access(context, transport)
    compliance = refresh_confirmations(transport)
    compliance = TransportCompliance.objects.select_for_update().get(pk=compliance.pk)

    if compliance.requirement_set.get(requirement_id) is None:
        raise RequirementNotFound(requirement_id, transport.pk)

    current = compliance.confirmation
    updated = toggle_manual(current, requirement_id)
    if updated == current:
        return compliance

    compliance.set_confirmation(updated)
    compliance.save(update_fields=["manual_confirmed", "auto_confirmed", "updated_at"])
    logger.info(
        f"Requirement {requirement_id} on transport {transport.pk} "
        f"{'confirmed' if requirement_id in updated.manual else 'unconfirmed'} by actor {context.actor_id}"
    )
    return compliance


@transaction.atomic
def confirm_requirement(transport, requirement_id: str) -> TransportCompliance:
    """Record a requirement as confirmed on behalf of the system."""
    compliance = refresh_confirmations(transport)
    compliance = TransportCompliance.objects.select_for_update().get(pk=compliance.pk)

    if compliance.requirement_set.get(requirement_id) is None:
        raise RequirementNotFound(requirement_id, transport.pk)

    current = compliance.confirmation
    if current.is_confirmed(requirement_id):
        return compliance

    compliance.set_confirmation(Confirmation(manual=current.manual | {requirement_id}, auto=current.auto))
    compliance.save(update_fields=["manual_confirmed", "auto_confirmed", "updated_at"])
    return compliance


def get_compliance_status(transport, exclude=()) -> ComplianceStatus:
    """Live compliance count after re-reconciling with current certificates."""
    compliance = refresh_confirmations(transport)
    return compliance_status(compliance.requirement_set, compliance.confirmation, exclude=exclude)


def missing_requirements(transport, exclude=()) -> list:
    """Required documents that are neither manually nor auto confirmed."""
    compliance = refresh_confirmations(transport)
    requirement_set = compliance.requirement_set
    status = compliance_status(requirement_set, compliance.confirmation, exclude=exclude)
    return [requirement_set.get(rid) for rid in status.missing_ids]


def get_checklist(transport) -> Checklist:
    """Checklist with live status, sorted advisories and upload suggestions."""
    compliance = refresh_confirmations(transport)
    requirement_set = compliance.requirement_set
    confirmation = compliance.confirmation
    status = compliance_status(requirement_set, confirmation)
    return Checklist(
        requirement_set=requirement_set,
        confirmation=confirmation,
        status=status,
        advisories=sort_advisories(requirement_set.all_warnings()),
        suggestions=suggest_certificates(requirement_set, status.missing_ids),
    )
