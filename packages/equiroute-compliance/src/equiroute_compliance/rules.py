"""Danish horse-transport rules and the per-country catalog.

Base documents are always required. Transports longer than the
distance threshold need a competence certificate for everyone driving
or loading. Border crossings need a TRACES certificate. Destination
and transit countries add their own documents and warnings.
"""

from equiroute_core.conf import get_setting
from equiroute_fleet.models import VehicleType

from .values import Advisory, Category, CountryRequirements, Requirement, Scope, Severity

DEFAULT_DISTANCE_THRESHOLD_KM = 65

TRACES_REQUIREMENT_ID = "traces_certificate"

BASE_DOCUMENTS = (
    Requirement(
        id="horse_passport",
        name="Hestepas",
        description="Påkrævet for alle transporter",
        category=Category.BASE.value,
        scope=Scope.HORSE.value,
    ),
    Requirement(
        id="registration",
        name="Registreringsattest",
        description="Påkrævet for virksomhedstransport",
        category=Category.BASE.value,
    ),
    Requirement(
        id="approval_certificate",
        name="Godkendelsescertifikat",
        description="Påkrævet for virksomhedstransport",
        category=Category.BASE.value,
        scope=Scope.VEHICLE.value,
    ),
    Requirement(
        id="authorization",
        name="Autorisation",
        description="Påkrævet for virksomhedstransport",
        category=Category.BASE.value,
    ),
)

DISTANCE_DOCUMENT = Requirement(
    id="competence_certificate",
    name="Kompetencebevis",
    description="Påkrævet for chauffør og alle der håndterer hesten ved transport over 65 km",
    category=Category.DISTANCE.value,
)

BORDER_DOCUMENT = Requirement(
    id=TRACES_REQUIREMENT_ID,
    name="Traces Certifikat",
    description="Påkrævet ved grænseoverskridelse",
    category=Category.BORDER.value,
)

LONG_DISTANCE_ADVISORY = Advisory(
    severity=Severity.INFO.value,
    message="Transport over 65 km: Kompetencebevis skal medbringes for alle der kører bilen eller læsser hesten.",
)

SHORT_DISTANCE_ADVISORY = Advisory(
    severity=Severity.INFO.value,
    message="Transport under 65 km: Kompetencebevis ikke påkrævet.",
)

BORDER_ADVISORY = Advisory(
    severity=Severity.WARNING.value,
    message="Grænseoverskridelse: Husk at udfylde Traces certifikatet før afgang.",
)


def _country_document(code, id, name, description, scope=Scope.ORGANIZATION.value, required=True):
    return Requirement(
        id=id,
        name=name,
        description=description,
        category=Category.COUNTRY.value,
        required=required,
        scope=scope,
        country=code,
    )


def _france(entities):
    documents = [
        _country_document("FR", "letter_of_authority", "Letter of Authority",
                          "Påkrævet for transport til/gennem Frankrig"),
    ]
    is_truck = entities is not None and entities.vehicle_type == VehicleType.TRUCK
    if is_truck:
        documents.append(_country_document(
            "FR", "france_stickers", "Franske Klistermærker",
            "Specielle klistermærker på lastbilen (kan købes ved grænsen)",
            scope=Scope.VEHICLE.value,
        ))
        message = "Frankrig: Letter of Authority skal udfyldes og specielle klistermærker skal påsættes lastbilen."
    else:
        message = "Frankrig: Letter of Authority skal udfyldes."
    return CountryRequirements(documents, [Advisory(Severity.WARNING.value, message, "FR")])


def _sweden(entities):
    return CountryRequirements(
        [_country_document("SE", "egenforsäkran", "Egenförsäkran (Selvforsikring)",
                           "Påkrævet for transport til Sverige")],
        [Advisory(Severity.INFO.value, "Sverige: Egenförsäkran (selvforsikring) skal udfyldes.", "SE")],
    )


def _norway(entities):
    return CountryRequirements(
        [_country_document("NO", "customs_document", "Tolddokument", "Påkrævet for transport til Norge")],
        [Advisory(Severity.WARNING.value, "Norge: Tolddokument skal udstedes og fremvises i tolden.", "NO")],
    )


def _ata_carnet(code, country):
    def rules(entities):
        return CountryRequirements(
            [_country_document(code, "ata_carnet", "ATA-Carnet", f"Påkrævet for transport til {country}")],
            [Advisory(
                Severity.CRITICAL.value,
                f"{country}: ATA-Carnet skal udfyldes hos Dansk Industri. Du skal overføre 20% af alle "
                f"varers samlede værdi i depositum til {country} for at sikre du ikke sælger varer uden "
                f"at betale told. Depositum returneres efter transport.",
                code,
            )],
        )
    return rules


def _germany(entities):
    return CountryRequirements(
        [_country_document("DE", "journey_log", "Transportlogbog (Fahrtenbuch)",
                           "Påkrævet for transport gennem Tyskland",
                           scope=Scope.VEHICLE.value)],
        [Advisory(Severity.INFO.value,
                  "Tyskland: Transportlogbogen skal udfyldes og kunne fremvises ved vejkontrol.", "DE")],
    )


def _netherlands(entities):
    return CountryRequirements(
        [_country_document("NL", "health_certificate", "Sundhedscertifikat",
                           "Påkrævet for transport til Holland", scope=Scope.HORSE.value)],
        [Advisory(Severity.WARNING.value,
                  "Holland: Sundhedscertifikat skal være udstedt af en dyrlæge inden for 48 timer før afgang.",
                  "NL")],
    )


DEFAULT_COUNTRY_RULES = {
    "FR": _france,
    "SE": _sweden,
    "NO": _norway,
    "CH": _ata_carnet("CH", "Schweiz"),
    "GB": _ata_carnet("GB", "UK"),
    "DE": _germany,
    "NL": _netherlands,
}


def distance_threshold_km() -> float:
    return get_setting("COMPLIANCE_DISTANCE_THRESHOLD_KM", DEFAULT_DISTANCE_THRESHOLD_KM)


def get_country_rules() -> dict:
    """
    Country code -> callable(entities) returning CountryRequirements.

    EQUIROUTE_COMPLIANCE_COUNTRY_RULES is merged over the defaults; map a
    code to None to drop a country's rules.
    """
    rules = dict(DEFAULT_COUNTRY_RULES)
    for code, rule in (get_setting("COMPLIANCE_COUNTRY_RULES") or {}).items():
        if rule is None:
            rules.pop(code.upper(), None)
        else:
            rules[code.upper()] = rule
    return rules
