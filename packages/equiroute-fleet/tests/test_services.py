"""Tests for vehicle and horse services."""

import uuid

import pytest

from equiroute_core.exceptions import AuthorizationError, InvalidInputError, MissingPermission
from equiroute_fleet.exceptions import EntityNotFound
from equiroute_fleet.models import EntityType
from equiroute_fleet.services import (
    create_horse,
    create_vehicle,
    get_owned_entity,
    list_horses,
    list_vehicles,
)
from equiroute_orgs.context import ActiveContext
from equiroute_orgs.services import update_organization_settings


@pytest.mark.django_db
class TestCreateVehicle:
    """Tests for create_vehicle."""

    def test_organization_vehicle(self, org_context, organization):
        """Vehicles created in organization mode belong to the organization."""
        vehicle = create_vehicle(org_context, license_plate="ab 12 345", vehicle_type="truck")

        assert vehicle.license_plate == "AB12345"
        assert vehicle.organization == organization
        assert vehicle.owner is None
        assert vehicle.created_by == org_context.actor

    def test_private_vehicle(self, private_context):
        """Vehicles created in private mode belong to the actor."""
        vehicle = create_vehicle(private_context, license_plate="XY 99 999")

        assert vehicle.organization is None
        assert vehicle.owner == private_context.actor

    def test_duplicate_plate_in_context(self, org_context, vehicle):
        """The same plate cannot be added twice in one context."""
        with pytest.raises(InvalidInputError):
            create_vehicle(org_context, license_plate="AB12345")

    def test_same_plate_in_other_context(self, private_context, vehicle):
        """Plates are only unique within a context."""
        other = create_vehicle(private_context, license_plate="AB 12 345")

        assert other.pk != vehicle.pk

    @pytest.mark.parametrize("kwargs", [
        {"license_plate": "  "},
        {"license_plate": "AB1", "vehicle_type": "boat"},
        {"license_plate": "AB1", "capacity": 0},
    ])
    def test_invalid_input(self, org_context, kwargs):
        """Blank plates, unknown types and zero capacity are rejected."""
        with pytest.raises(InvalidInputError):
            create_vehicle(org_context, **kwargs)

    def test_member_allowed_by_organization_flag(self, member_context):
        """Members without the permission may create while the flag is on."""
        vehicle = create_vehicle(member_context, license_plate="CD 45 678")

        assert vehicle.organization_id == member_context.organization_id

    def test_member_blocked_when_flag_off(self, org_context, organization, member_context):
        """Turning the flag off requires the explicit permission."""
        update_organization_settings(org_context, organization, allow_members_to_create_vehicles=False)

        with pytest.raises(MissingPermission):
            create_vehicle(member_context, license_plate="CD 45 678")

    def test_outsider_blocked(self, outsider, organization):
        """Organization mode without membership cannot create."""
        context = ActiveContext.for_organization(outsider, organization.pk)

        with pytest.raises(MissingPermission):
            create_vehicle(context, license_plate="CD 45 678")


@pytest.mark.django_db
class TestCreateHorse:
    """Tests for create_horse."""

    def test_create_horse(self, org_context):
        """Horses are created in the active context with normalized UELN."""
        horse = create_horse(org_context, name=" Bella ", ueln="208001dwb123456", birth_year=2015)

        assert horse.name == "Bella"
        assert horse.ueln == "208001DWB123456"
        assert horse.organization_id == org_context.organization_id

    def test_name_required(self, org_context):
        """Horses need a name."""
        with pytest.raises(InvalidInputError):
            create_horse(org_context, name="")

    def test_member_blocked_when_flag_off(self, org_context, organization, member_context):
        """The horse flag gates members without can_manage_horses."""
        update_organization_settings(org_context, organization, allow_members_to_create_horses=False)

        with pytest.raises(MissingPermission):
            create_horse(member_context, name="Storm")


@pytest.mark.django_db
class TestListing:
    """Tests for context-scoped listings."""

    def test_lists_are_context_scoped(self, org_context, private_context, vehicle, horses):
        """Private and organization records never mix."""
        private_vehicle = create_vehicle(private_context, license_plate="PR 11 111")
        create_horse(private_context, name="Solo")

        assert list(list_vehicles(org_context)) == [vehicle]
        assert list(list_vehicles(private_context)) == [private_vehicle]
        assert {h.name for h in list_horses(org_context)} == {"Bella", "Storm"}
        assert [h.name for h in list_horses(private_context)] == ["Solo"]


@pytest.mark.django_db
class TestGetOwnedEntity:
    """Tests for get_owned_entity."""

    def test_owned_vehicle(self, org_context, vehicle):
        """A vehicle of the active organization resolves."""
        assert get_owned_entity(org_context, EntityType.VEHICLE, vehicle.pk) == vehicle

    def test_organization_entity(self, org_context, organization):
        """The active organization itself is owned."""
        assert get_owned_entity(org_context, EntityType.ORGANIZATION, organization.pk) == organization

    def test_other_context_rejected(self, private_context, vehicle):
        """Entities of another context are not accessible."""
        with pytest.raises(AuthorizationError):
            get_owned_entity(private_context, EntityType.VEHICLE, vehicle.pk)

    def test_missing_entity(self, org_context):
        """Unknown ids raise EntityNotFound."""
        with pytest.raises(EntityNotFound):
            get_owned_entity(org_context, EntityType.HORSE, uuid.uuid4())

    def test_malformed_id(self, org_context):
        """Ids that are not UUIDs are treated as not found."""
        with pytest.raises(EntityNotFound):
            get_owned_entity(org_context, EntityType.HORSE, "not-a-uuid")

    def test_unknown_entity_type(self, org_context):
        """Only organization, vehicle and horse are entity types."""
        with pytest.raises(InvalidInputError):
            get_owned_entity(org_context, "trailer_hitch", uuid.uuid4())

