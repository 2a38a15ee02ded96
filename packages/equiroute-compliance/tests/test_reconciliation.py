"""Tests for reconciliation of requirements against certificates."""

import sys
import types
from datetime import date
from types import SimpleNamespace

import pytest

from equiroute_compliance.evaluator import evaluate
from equiroute_compliance.matching import BaseCertificateMatcher, NameAliasMatcher, get_matcher
from equiroute_compliance.reconciliation import (
    compliance_status,
    reconcile,
    sort_advisories,
    suggest_certificates,
    toggle_manual,
)
from equiroute_compliance.values import Advisory, Confirmation, Requirement
from equiroute_core.conf import clear_class_cache
from equiroute_core.exceptions import ConfigurationError
from equiroute_transports.route import Route

TODAY = date(2026, 6, 1)


def cert(certificate_type="", display_name="", expires_on=None):
    return SimpleNamespace(certificate_type=certificate_type, display_name=display_name, expires_on=expires_on)


def certificates(organization=(), vehicle=(), horse=()):
    return {"organization": list(organization), "vehicle": list(vehicle), "horse": list(horse)}


@pytest.fixture
def requirement_set():
    """DK -> DE long-distance checklist."""
    return evaluate(Route(distance_km=640, countries=["Denmark", "Germany"]))


class AlwaysMatcher(BaseCertificateMatcher):
    def matches(self, certificate, requirement):
        return True


class TestNameAliasMatcher:
    """Tests for the default matching strategy."""

    @pytest.fixture
    def passport(self):
        return Requirement(id="horse_passport", name="Hestepas", scope="horse")

    @pytest.mark.parametrize("certificate", [
        cert(certificate_type="Hestepas"),
        cert(certificate_type="HESTEPAS"),
        cert(display_name="Hestepas - Bella"),
        cert(certificate_type="PDF", display_name="Horse Passport"),
        cert(display_name="  pas "),
    ])
    def test_matches(self, passport, certificate):
        """Name equality, containment and aliases match case-insensitively."""
        assert NameAliasMatcher().matches(certificate, passport) is True

    @pytest.mark.parametrize("certificate", [
        cert(certificate_type="PDF", display_name="Scan 2026"),
        cert(display_name="Passage plan"),
        cert(),
    ])
    def test_no_match(self, passport, certificate):
        """Unrelated names and partial alias hits do not match."""
        assert NameAliasMatcher().matches(certificate, passport) is False

    def test_custom_aliases(self, passport):
        """Alias tables can be replaced."""
        matcher = NameAliasMatcher(aliases={"horse_passport": ["Equine ID"]})

        assert matcher.matches(cert(certificate_type="equine id"), passport) is True
        assert matcher.matches(cert(certificate_type="Passport"), passport) is False


class TestGetMatcher:
    """Tests for configurable matcher loading."""

    @pytest.fixture(autouse=True)
    def clear_cache(self):
        clear_class_cache()
        yield
        clear_class_cache()

    def test_default(self):
        """Without configuration the alias matcher is used."""
        assert isinstance(get_matcher(), NameAliasMatcher)

    def test_configured(self, settings, monkeypatch):
        """A configured matcher class is instantiated."""
        module = types.ModuleType("custom_matchers")
        module.AlwaysMatcher = AlwaysMatcher
        monkeypatch.setitem(sys.modules, "custom_matchers", module)
        settings.EQUIROUTE_CERTIFICATE_MATCHER = "custom_matchers.AlwaysMatcher"

        assert type(get_matcher()).__name__ == "AlwaysMatcher"

    def test_not_a_matcher(self, settings):
        """Classes that are not matchers are rejected."""
        settings.EQUIROUTE_CERTIFICATE_MATCHER = "collections.OrderedDict"

        with pytest.raises(ConfigurationError):
            get_matcher()


class TestReconcile:
    """Tests for reconcile."""

    def test_horse_passport_auto_confirmed(self, requirement_set):
        """A horse certificate named Hestepas confirms the passport requirement."""
        result = reconcile(requirement_set, certificates(horse=[cert(display_name="Hestepas")]), today=TODAY)

        assert result.auto == {"horse_passport"}
        assert result.manual == frozenset()

    def test_scope_is_respected(self, requirement_set):
        """An organization certificate cannot confirm a horse requirement."""
        result = reconcile(requirement_set, certificates(organization=[cert("Hestepas")]), today=TODAY)

        assert "horse_passport" not in result.auto

    def test_vehicle_scope(self, requirement_set):
        """Vehicle requirements look at vehicle certificates."""
        result = reconcile(
            requirement_set,
            certificates(vehicle=[cert("Godkendelsescertifikat"), cert("Fahrtenbuch")]),
            today=TODAY,
        )

        assert result.auto == {"approval_certificate", "journey_log"}

    def test_auto_dominates_manual(self, requirement_set):
        """A manual tick for an auto-confirmed requirement is dropped."""
        result = reconcile(
            requirement_set,
            certificates(organization=[cert("Registreringsattest")]),
            manual={"registration", "authorization"},
            today=TODAY,
        )

        assert result.auto == {"registration"}
        assert result.manual == {"authorization"}
        assert not result.manual & result.auto

    def test_unknown_manual_ids_dropped(self, requirement_set):
        """Manual ids that are no longer requirements disappear."""
        result = reconcile(requirement_set, certificates(), manual={"ata_carnet", "authorization"}, today=TODAY)

        assert result.manual == {"authorization"}

    def test_idempotent(self, requirement_set):
        """Reconciling the result again changes nothing."""
        certs = certificates(organization=[cert("Autorisation")], horse=[cert("Pas")])
        first = reconcile(requirement_set, certs, manual={"registration", "authorization"}, today=TODAY)

        second = reconcile(requirement_set, certs, manual=first.manual, today=TODAY)

        assert second == first

    def test_certificate_removed(self, requirement_set):
        """Once the certificate is gone the requirement is unconfirmed again."""
        certs = certificates(horse=[cert("Hestepas")])
        before = reconcile(requirement_set, certs, today=TODAY)

        after = reconcile(requirement_set, certificates(), manual=before.manual, today=TODAY)

        assert "horse_passport" in before.auto
        assert not after.is_confirmed("horse_passport")

    def test_expired_certificate_ignored(self, requirement_set):
        """Certificates expiring today or earlier do not confirm."""
        certs = certificates(organization=[
            cert("Autorisation", expires_on=TODAY),
            cert("Registreringsattest", expires_on=date(2026, 6, 2)),
        ])

        result = reconcile(requirement_set, certs, today=TODAY)

        assert result.auto == {"registration"}

    def test_custom_matcher(self, requirement_set):
        """Any matcher can be passed in."""
        result = reconcile(requirement_set, certificates(organization=[cert()]), matcher=AlwaysMatcher(), today=TODAY)

        assert "registration" in result.auto
        assert "horse_passport" not in result.auto


class TestToggleManual:
    """Tests for toggle_manual."""

    def test_toggle_on_and_off(self):
        """Toggling twice returns to the start."""
        start = Confirmation()

        on = toggle_manual(start, "authorization")
        off = toggle_manual(on, "authorization")

        assert on.manual == {"authorization"}
        assert off == start

    def test_auto_confirmed_is_noop(self):
        """Auto-confirmed requirements cannot be toggled."""
        confirmation = Confirmation(auto=frozenset({"registration"}))

        assert toggle_manual(confirmation, "registration") is confirmation


class TestComplianceStatus:
    """Tests for compliance_status."""

    def test_counts(self, requirement_set):
        """Counts split confirmed documents by source."""
        confirmation = Confirmation(manual=frozenset({"authorization"}), auto=frozenset({"registration"}))

        status = compliance_status(requirement_set, confirmation)

        assert status.required == 7
        assert status.confirmed == 2
        assert status.auto_confirmed == 1
        assert status.manually_confirmed == 1
        assert status.missing == 5
        assert status.is_compliant is False

    def test_fully_confirmed(self, requirement_set):
        """Every required document confirmed means compliant."""
        confirmation = Confirmation(manual=frozenset(requirement_set.ids()))

        assert compliance_status(requirement_set, confirmation).is_compliant is True

    def test_exclude(self, requirement_set):
        """Excluded ids leave both counts."""
        status = compliance_status(requirement_set, Confirmation(), exclude=["traces_certificate"])

        assert status.required == 6
        assert "traces_certificate" not in status.missing_ids

    def test_confirmation_sets_disjoint(self):
        """Building a confirmation removes auto ids from manual."""
        confirmation = Confirmation(manual={"a", "b"}, auto={"b"})

        assert confirmation.manual == {"a"}
        assert confirmation.confirmed == {"a", "b"}


class TestAdvisoriesAndSuggestions:
    """Tests for advisory ordering and upload suggestions."""

    def test_sort_by_severity(self):
        """Critical first, then warning, then info, stable within a level."""
        advisories = [
            Advisory("info", "i1"),
            Advisory("warning", "w1"),
            Advisory("critical", "c1"),
            Advisory("info", "i2"),
            Advisory("warning", "w2"),
        ]

        assert [a.message for a in sort_advisories(advisories)] == ["c1", "w1", "w2", "i1", "i2"]

    def test_suggestions_use_primary_alias(self, requirement_set):
        """Suggestions name the certificate type to upload."""
        suggestions = suggest_certificates(requirement_set, ["horse_passport", "nope"])

        assert suggestions == [{
            "requirement_id": "horse_passport",
            "certificate_type": "Hestepas",
            "scope": "horse",
            "description": "Upload et Hestepas certifikat",
        }]
