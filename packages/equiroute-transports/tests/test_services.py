"""Tests for transport services."""

import uuid
from decimal import Decimal

import pytest

from equiroute_core.exceptions import AuthorizationError, MissingPermission
from equiroute_fleet.services import create_horse, create_vehicle
from equiroute_orgs.services import update_organization_settings
from equiroute_transports.exceptions import InvalidStatusChange, InvalidTransport, TransportNotFound
from equiroute_transports.models import TransportStatus
from equiroute_transports.selectors import get_open_transports_for_entity, get_organization_usage
from equiroute_transports.services import (
    change_status,
    get_owned_transport,
    get_transport,
    list_transports,
    plan_transport,
)


def plan(context, vehicle, horses, **overrides):
    kwargs = {
        "vehicle": vehicle,
        "horses": horses,
        "from_location": "Herning",
        "to_location": "Hamburg",
        "distance_km": 420,
        "countries": ["Denmark", "Germany"],
    }
    kwargs.update(overrides)
    return plan_transport(context, **kwargs)


@pytest.mark.django_db
class TestPlanTransport:
    """Tests for plan_transport."""

    def test_plan_organization_transport(self, org_context, organization, vehicle, horses):
        """A planned transport stores the route and its horses."""
        transport = plan(org_context, vehicle, horses, distance_km="420.04")

        assert transport.status == TransportStatus.PLANNED
        assert transport.organization == organization
        assert transport.distance_km == Decimal("420.0")
        assert transport.countries == ["Denmark", "Germany"]
        assert transport.border_crossing is True
        assert set(transport.horse_ids()) == {h.pk for h in horses}
        assert transport.route.country_codes == ("DK", "DE")

    def test_domestic_transport(self, domestic_transport):
        """A single-country route does not cross a border."""
        assert domestic_transport.border_crossing is False

    def test_blank_countries_dropped(self, org_context, vehicle, horses):
        """Empty country entries are ignored."""
        transport = plan(org_context, vehicle, horses, countries=["Denmark", " ", ""])

        assert transport.countries == ["Denmark"]
        assert transport.border_crossing is False

    def test_capacity_enforced(self, org_context, horses):
        """A vehicle cannot carry more horses than its capacity."""
        small = create_vehicle(org_context, license_plate="SM 11 111", capacity=1)

        with pytest.raises(InvalidTransport):
            plan(org_context, small, horses)

    def test_horse_listed_twice(self, org_context, vehicle, horses):
        """The same horse cannot be loaded twice."""
        with pytest.raises(InvalidTransport):
            plan(org_context, vehicle, [horses[0], horses[0]])

    def test_no_horses(self, org_context, vehicle):
        """A transport needs at least one horse."""
        with pytest.raises(InvalidTransport, match="At least one horse"):
            plan(org_context, vehicle, [])

    @pytest.mark.parametrize("overrides", [
        {"from_location": " "},
        {"distance_km": -5},
        {"distance_km": "far"},
        {"distance_km": float("nan")},
    ])
    def test_invalid_plans(self, org_context, vehicle, horses, overrides):
        """Incomplete or inconsistent plans are rejected."""
        with pytest.raises(InvalidTransport):
            plan(org_context, vehicle, horses, **overrides)

    def test_foreign_horse_rejected(self, org_context, private_context, vehicle):
        """Horses of another context cannot be loaded."""
        private_horse = create_horse(private_context, name="Private")

        with pytest.raises(AuthorizationError):
            plan(org_context, vehicle, [private_horse])

    def test_foreign_vehicle_rejected(self, private_context, vehicle):
        """Vehicles of another context cannot be used."""
        own_horse = create_horse(private_context, name="Private")

        with pytest.raises(AuthorizationError):
            plan(private_context, vehicle, [own_horse])

    def test_member_blocked_when_flag_off(self, org_context, organization, member_context, vehicle, horses):
        """Without the flag, members need can_manage_tours."""
        update_organization_settings(org_context, organization, allow_members_to_create_transports=False)

        with pytest.raises(MissingPermission):
            plan(member_context, vehicle, horses)

    def test_private_transport(self, private_context):
        """Private transports are owned by the actor."""
        own_vehicle = create_vehicle(private_context, license_plate="PR 11 111")
        own_horse = create_horse(private_context, name="Private")

        transport = plan(private_context, own_vehicle, [own_horse])

        assert transport.owner == private_context.actor
        assert transport.organization is None


@pytest.mark.django_db
class TestLookupAndListing:
    """Tests for fetching and listing transports."""

    def test_get_transport(self, transport):
        """Transports are fetched by id."""
        assert get_transport(transport.pk) == transport

    @pytest.mark.parametrize("transport_id", [uuid.uuid4(), "garbage"])
    def test_get_unknown(self, db, transport_id):
        """Unknown or malformed ids are not found."""
        with pytest.raises(TransportNotFound):
            get_transport(transport_id)

    def test_get_owned_checks_context(self, private_context, transport):
        """Transports of other contexts are not handed out."""
        with pytest.raises(AuthorizationError):
            get_owned_transport(private_context, transport.pk)

    def test_list_filters_by_status(self, org_context, transport, domestic_transport):
        """Status filters narrow the listing."""
        change_status(org_context, domestic_transport, TransportStatus.ACTIVE)

        assert set(list_transports(org_context)) == {transport, domestic_transport}
        assert list(list_transports(org_context, TransportStatus.ACTIVE)) == [domestic_transport]


@pytest.mark.django_db
class TestChangeStatus:
    """Tests for change_status."""

    def test_lifecycle_timestamps(self, org_context, transport):
        """Starting and completing record their timestamps."""
        transport = change_status(org_context, transport, TransportStatus.ACTIVE)
        assert transport.started_at is not None

        transport = change_status(org_context, transport, TransportStatus.COMPLETED)
        assert transport.completed_at is not None
        assert transport.is_open is False

    def test_completed_is_terminal(self, org_context, transport):
        """Completed transports cannot move again."""
        change_status(org_context, transport, TransportStatus.ACTIVE)
        change_status(org_context, transport, TransportStatus.COMPLETED)

        with pytest.raises(InvalidStatusChange):
            change_status(org_context, transport, TransportStatus.ACTIVE)

    def test_cannot_skip_to_completed(self, org_context, transport):
        """Planned transports must start before completing."""
        with pytest.raises(InvalidStatusChange):
            change_status(org_context, transport, TransportStatus.COMPLETED)

    def test_member_needs_manage_tours(self, member_context, transport):
        """Status changes need can_manage_tours."""
        with pytest.raises(MissingPermission):
            change_status(member_context, transport, TransportStatus.CANCELLED)


@pytest.mark.django_db
class TestSelectors:
    """Tests for read-only selectors."""

    def test_open_transports_for_horse(self, org_context, transport, horses):
        """Open transports are found through any of their horses."""
        assert list(get_open_transports_for_entity("horse", horses[1].pk)) == [transport]

        change_status(org_context, transport, TransportStatus.CANCELLED)

        assert list(get_open_transports_for_entity("horse", horses[1].pk)) == []

    def test_open_transports_unknown_type(self, transport):
        """Unknown entity types match nothing."""
        assert list(get_open_transports_for_entity("trailer", transport.pk)) == []

    def test_organization_usage(self, organization, transport, domestic_transport):
        """Usage counts vehicles, horses and transports."""
        usage = get_organization_usage(organization)

        assert usage.vehicles == 1
        assert usage.horses == 2
        assert usage.open_transports == 2
        assert usage.completed_transports == 0
