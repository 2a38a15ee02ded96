"""TRACES registration state machine.

Provides:
- start_registration: run idle -> creating_transport ->
  registering_with_authority -> complete for one transport
- get_registration / get_registration_progress: read the current phase
- transition: move a registration along the phase graph with an audit row

Each phase change commits on its own, before the next step starts. A
second start_registration for the same transport therefore sees a
non-idle phase and is rejected without calling the authority.
"""

import logging
from dataclasses import dataclass

from django.db import transaction
from django.utils import timezone

from equiroute_compliance.rules import TRACES_REQUIREMENT_ID
from equiroute_compliance.services import confirm_requirement, missing_requirements
from equiroute_core.auth import require_authenticated
from equiroute_core.exceptions import AuthorizationError, EquirouteError
from equiroute_orgs.models import Permission
from equiroute_orgs.permissions import authorize
from equiroute_transports.models import Transport, TransportStatus
from equiroute_transports.services import mark_status

from .authorities import get_authority
from .exceptions import (
    AuthorityError,
    ComplianceIncomplete,
    InvalidPhaseTransition,
    NotCrossBorder,
    RegistrationAlreadyComplete,
    RegistrationInProgress,
    TransportNotRegistrable,
)
from .models import ALLOWED_TRANSITIONS, Registration, RegistrationEvent, RegistrationPhase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistrationProgress:
    """What a caller needs to render registration progress."""

    phase: str
    step: int
    total_steps: int
    reference_number: str
    countries: tuple
    last_error: str

    @property
    def is_complete(self) -> bool:
        return self.phase == RegistrationPhase.COMPLETE


def transition(registration, to_phase: str, actor=None, detail: dict = None):
    """
    Move a locked registration to to_phase and record the change.

    Must run inside a transaction holding the registration row lock.

    Raises:
        InvalidPhaseTransition: to_phase is not reachable from the current phase
    """
    from_phase = registration.phase
    if to_phase not in ALLOWED_TRANSITIONS.get(from_phase, set()):
        raise InvalidPhaseTransition(from_phase, to_phase)

    registration.phase = to_phase
    registration.save()

    RegistrationEvent.objects.create(
        registration=registration,
        sequence=registration.events.count() + 1,
        from_phase=from_phase,
        to_phase=to_phase,
        actor=actor,
        detail=detail or {},
    )
    logger.info(f"Registration {registration.pk} of transport {registration.transport_id}: {from_phase} -> {to_phase}")
    return registration


def _lock(registration_pk):
    return Registration.objects.select_for_update().get(pk=registration_pk)


def _begin(transport, actor, country_codes) -> Registration:
    with transaction.atomic():
        registration, _ = Registration.objects.get_or_create(transport=transport)
        registration = _lock(registration.pk)

        if registration.is_complete:
            raise RegistrationAlreadyComplete(registration)
        if not registration.is_idle:
            raise RegistrationInProgress(registration)

        registration.countries = list(country_codes)
        registration.attempts += 1
        registration.started_by = actor
        registration.started_at = timezone.now()
        registration.last_error = ""
        return transition(registration, RegistrationPhase.CREATING_TRANSPORT, actor=actor)


def _fail(registration_pk, actor, error) -> Registration:
    with transaction.atomic():
        registration = _lock(registration_pk)
        if registration.is_idle or registration.is_complete:
            return registration
        registration.last_error = str(error)
        return transition(
            registration,
            RegistrationPhase.IDLE,
            actor=actor,
            detail={"error": str(error), "error_type": type(error).__name__},
        )


def _check_transport(context, transport):
    require_authenticated(context.actor)
    if not transport.belongs_to(context):
        raise AuthorizationError(f"Transport {transport.pk} does not belong to the active context")
    authorize(context, Permission.MANAGE_TOURS)

    if not transport.is_open:
        raise TransportNotRegistrable(transport)
    if not transport.route.border_crossing:
        raise NotCrossBorder(transport)

    missing = missing_requirements(transport, exclude=(TRACES_REQUIREMENT_ID,))
    if missing:
        raise ComplianceIncomplete([r.id for r in missing])


def start_registration(context, transport, *, authority=None, on_phase_change=None) -> Registration:
    """
    Register a cross-border transport with the authority.

    Steps:
    1. idle -> creating_transport (committed before anything else)
    2. the transport is persisted as active with its route countries,
       then creating_transport -> registering_with_authority
    3. the authority is called with the route and ordered country codes
    4. registering_with_authority -> complete with the reference number,
       committed on its own
    5. the TRACES certificate requirement is confirmed

    Any failure in steps 2-4 returns the registration to idle, records
    the error, and re-raises it to the caller. Once the reference is
    stored the registration stays complete; a failure in step 5 is
    re-raised but never reopens the registration. There is no timeout in
    the state machine itself; HttpAuthority applies a request timeout.

    Args:
        context: ActiveContext of the acting user
        transport: Transport to register
        authority: BaseAuthority instance; defaults to the configured one
        on_phase_change: Optional callable receiving the Registration
            after every committed phase change

    Raises:
        MissingPermission / AuthorizationError: Not allowed to manage the transport
        NotCrossBorder: The route stays within one country
        TransportNotRegistrable: The transport is completed or cancelled
        ComplianceIncomplete: Required documents other than the TRACES
            certificate are unconfirmed
        RegistrationInProgress: A registration is already running
        RegistrationAlreadyComplete: The transport already has a reference number
        AuthorityError: The authority failed
    """
    _check_transport(context, transport)
    owns_authority = authority is None
    actor = context.actor
    route = transport.route

    def notify(registration):
        if on_phase_change is not None:
            on_phase_change(registration)

    registration = _begin(transport, actor, route.country_codes)
    notify(registration)

    try:
        with transaction.atomic():
            locked = Transport.objects.select_for_update().get(pk=transport.pk)
            locked.countries = list(route.countries)
            locked.save(update_fields=["countries", "updated_at"])
            if locked.status == TransportStatus.PLANNED:
                mark_status(locked, TransportStatus.ACTIVE)
            registration = transition(_lock(registration.pk), RegistrationPhase.REGISTERING, actor=actor)
        notify(registration)

        if owns_authority:
            authority = get_authority()
        try:
            reference = authority.register(route, list(route.country_codes), transport=transport)
        except EquirouteError:
            raise
        except Exception as e:
            raise AuthorityError(str(e)) from e
        finally:
            if owns_authority:
                authority.close()
        if not reference:
            raise AuthorityError("Authority returned an empty reference number")

        with transaction.atomic():
            registration = _lock(registration.pk)
            registration.reference_number = reference
            registration.completed_at = timezone.now()
            registration = transition(
                registration,
                RegistrationPhase.COMPLETE,
                actor=actor,
                detail={"reference_number": reference},
            )
    except Exception as e:
        logger.error(f"Registration of transport {transport.pk} failed: {e}")
        notify(_fail(registration.pk, actor, e))
        raise

    notify(registration)

    try:
        confirm_requirement(transport, TRACES_REQUIREMENT_ID)
    except Exception:
        logger.exception(
            f"Transport {transport.pk} registered as {registration.reference_number} "
            f"but confirming {TRACES_REQUIREMENT_ID} failed"
        )
        raise
    return registration


def get_registration(transport):
    """The transport's registration, or None if never started."""
    return Registration.objects.filter(transport=transport).first()


def get_registration_progress(transport) -> RegistrationProgress:
    """Current phase, step and reference number of a transport's registration."""
    registration = get_registration(transport)
    if registration is None:
        return RegistrationProgress(
            phase=RegistrationPhase.IDLE.value,
            step=0,
            total_steps=3,
            reference_number="",
            countries=tuple(transport.route.country_codes),
            last_error="",
        )
    return RegistrationProgress(
        phase=registration.phase,
        step=registration.step,
        total_steps=3,
        reference_number=registration.reference_number,
        countries=tuple(registration.countries or ()),
        last_error=registration.last_error,
    )
