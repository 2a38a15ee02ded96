"""Value types for compliance evaluation.

These are plain dataclasses: evaluate() and reconcile() work on them
without touching the database, and TransportCompliance stores them as
JSON via to_dict()/from_dict().
"""

from dataclasses import asdict, dataclass, field

from django.db import models
from django.utils.translation import gettext_lazy as _


class Category(models.TextChoices):
    BASE = "base", _("Base")
    DISTANCE = "distance", _("Distance")
    BORDER = "border", _("Border")
    COUNTRY = "country", _("Country specific")


class Severity(models.TextChoices):
    INFO = "info", _("Info")
    WARNING = "warning", _("Warning")
    CRITICAL = "critical", _("Critical")


class Scope(models.TextChoices):
    """Which entity's certificates can satisfy a requirement."""

    ORGANIZATION = "organization", _("Organization")
    VEHICLE = "vehicle", _("Vehicle")
    HORSE = "horse", _("Horse")


SEVERITY_ORDER = {
    Severity.CRITICAL.value: 0,
    Severity.WARNING.value: 1,
    Severity.INFO.value: 2,
}


@dataclass(frozen=True)
class Requirement:
    """A single document obligation for a transport."""

    id: str
    name: str
    description: str = ""
    category: str = Category.BASE.value
    required: bool = True
    scope: str = Scope.ORGANIZATION.value
    country: str = ""


@dataclass(frozen=True)
class Advisory:
    """A warning shown with the checklist. Never affects compliance."""

    severity: str
    message: str
    country: str = ""


@dataclass
class CountryRequirements:
    documents: list = field(default_factory=list)
    warnings: list = field(default_factory=list)


@dataclass(frozen=True)
class TransportEntities:
    """The entities involved in a transport."""

    organization_id: object = None
    vehicle_id: object = None
    vehicle_type: str = ""
    horse_ids: tuple = ()

    @classmethod
    def for_transport(cls, transport) -> "TransportEntities":
        vehicle = transport.vehicle
        return cls(
            organization_id=transport.organization_id,
            vehicle_id=vehicle.pk if vehicle else None,
            vehicle_type=vehicle.vehicle_type if vehicle else "",
            horse_ids=tuple(transport.horse_ids()),
        )


@dataclass
class RequirementSet:
    """Evaluated requirements for a transport.

    documents holds the base, distance and border categories in that
    order; country_specific maps an ISO country code to its bucket.
    """

    documents: list = field(default_factory=list)
    country_specific: dict = field(default_factory=dict)
    warnings: list = field(default_factory=list)

    def all_documents(self) -> list:
        """Every requirement, deduplicated by id keeping the first occurrence."""
        seen = set()
        result = []
        sources = [self.documents, *(bucket.documents for bucket in self.country_specific.values())]
        for documents in sources:
            for requirement in documents:
                if requirement.id in seen:
                    continue
                seen.add(requirement.id)
                result.append(requirement)
        return result

    def required_documents(self) -> list:
        return [r for r in self.all_documents() if r.required]

    def ids(self) -> set:
        return {r.id for r in self.all_documents()}

    def get(self, requirement_id: str):
        for requirement in self.all_documents():
            if requirement.id == requirement_id:
                return requirement
        return None

    def by_category(self) -> dict:
        """Requirements grouped by category, in evaluation order."""
        grouped = {}
        for requirement in self.all_documents():
            grouped.setdefault(requirement.category, []).append(requirement)
        return grouped

    def all_warnings(self) -> list:
        warnings = list(self.warnings)
        for bucket in self.country_specific.values():
            warnings.extend(bucket.warnings)
        return warnings

    def to_dict(self) -> dict:
        return {
            "documents": [asdict(r) for r in self.documents],
            "country_specific": {
                code: {
                    "documents": [asdict(r) for r in bucket.documents],
                    "warnings": [asdict(w) for w in bucket.warnings],
                }
                for code, bucket in self.country_specific.items()
            },
            "warnings": [asdict(w) for w in self.warnings],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RequirementSet":
        data = data or {}
        return cls(
            documents=[Requirement(**r) for r in data.get("documents", [])],
            country_specific={
                code: CountryRequirements(
                    documents=[Requirement(**r) for r in bucket.get("documents", [])],
                    warnings=[Advisory(**w) for w in bucket.get("warnings", [])],
                )
                for code, bucket in data.get("country_specific", {}).items()
            },
            warnings=[Advisory(**w) for w in data.get("warnings", [])],
        )


@dataclass(frozen=True)
class Confirmation:
    """Manually and automatically confirmed requirement ids.

    The two sets never overlap.
    """

    manual: frozenset = frozenset()
    auto: frozenset = frozenset()

    def __post_init__(self):
        object.__setattr__(self, "manual", frozenset(self.manual) - frozenset(self.auto))
        object.__setattr__(self, "auto", frozenset(self.auto))

    @property
    def confirmed(self) -> frozenset:
        return self.manual | self.auto

    def is_confirmed(self, requirement_id: str) -> bool:
        return requirement_id in self.manual or requirement_id in self.auto


@dataclass(frozen=True)
class ComplianceStatus:
    """Live count of confirmed versus required documents."""

    required: int
    confirmed: int
    auto_confirmed: int
    manually_confirmed: int
    missing_ids: tuple = ()

    @property
    def missing(self) -> int:
        return len(self.missing_ids)

    @property
    def is_compliant(self) -> bool:
        return self.confirmed >= self.required
