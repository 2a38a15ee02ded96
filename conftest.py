"""Shared fixtures for EquiRoute tests."""

import pytest

from equiroute_certificates.services import FileUpload
from equiroute_fleet.services import create_horse, create_vehicle
from equiroute_orgs.context import ActiveContext
from equiroute_orgs.services import create_organization, join_organization_by_code
from equiroute_transports.services import plan_transport


@pytest.fixture
def owner(db, django_user_model):
    """Organization owner."""
    return django_user_model.objects.create_user(
        username="owner", email="owner@example.com", password="test"
    )


@pytest.fixture
def member(db, django_user_model):
    """Ordinary organization member."""
    return django_user_model.objects.create_user(
        username="member", email="member@example.com", password="test"
    )


@pytest.fixture
def outsider(db, django_user_model):
    """User without any membership."""
    return django_user_model.objects.create_user(
        username="outsider", email="outsider@example.com", password="test"
    )


@pytest.fixture
def organization(owner):
    """Organization owned by owner."""
    return create_organization(owner, "Nordic Horse Transport")


@pytest.fixture
def membership(organization, member):
    """member joined organization by code."""
    return join_organization_by_code(member, organization.code)


@pytest.fixture
def org_context(owner, organization):
    return ActiveContext.for_organization(owner, organization.pk)


@pytest.fixture
def member_context(member, membership):
    return ActiveContext.for_organization(member, membership.organization_id)


@pytest.fixture
def private_context(owner):
    return ActiveContext.private(owner)


@pytest.fixture
def vehicle(org_context):
    """Organization truck with room for two horses."""
    return create_vehicle(
        org_context,
        license_plate="AB 12 345",
        make="Scania",
        model="R450",
        vehicle_type="truck",
        capacity=2,
    )


@pytest.fixture
def horses(org_context):
    return [
        create_horse(org_context, name="Bella", ueln="208001DWB123456"),
        create_horse(org_context, name="Storm"),
    ]


@pytest.fixture
def transport(org_context, vehicle, horses):
    """Planned cross-border transport Denmark -> Germany."""
    return plan_transport(
        org_context,
        vehicle=vehicle,
        horses=horses,
        from_location="Herning",
        to_location="Aachen",
        distance_km=640,
        countries=["Danmark", "Tyskland"],
    )


@pytest.fixture
def domestic_transport(org_context, vehicle, horses):
    """Planned short transport inside Denmark."""
    return plan_transport(
        org_context,
        vehicle=vehicle,
        horses=horses[:1],
        from_location="Herning",
        to_location="Ikast",
        distance_km=14,
        countries=["Denmark"],
    )


@pytest.fixture
def make_upload():
    """Factory for in-memory uploads."""

    def factory(name="certificate.pdf", content=b"%PDF-1.4 test", content_type=""):
        return FileUpload(name=name, content=content, content_type=content_type)

    return factory
