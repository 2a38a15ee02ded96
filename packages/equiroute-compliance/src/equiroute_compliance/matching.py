"""Certificate-to-requirement matching strategies.

The matcher decides whether one certificate satisfies one requirement.
The default compares the certificate's type label and display name
with the requirement's name and a table of known aliases. Projects can
plug in their own via EQUIROUTE_CERTIFICATE_MATCHER.
"""

from abc import ABC, abstractmethod

from equiroute_core.conf import get_setting, load_class

DEFAULT_MATCHER = "equiroute_compliance.matching.NameAliasMatcher"

REQUIREMENT_ALIASES = {
    "horse_passport": ("Hestepas", "Pas", "Passport", "Horse Passport"),
    "registration": ("Registreringsattest", "Registration", "Reg. Attest"),
    "approval_certificate": ("Godkendelsescertifikat", "Approval Certificate", "Godkendelse"),
    "authorization": ("Autorisation", "Authorization", "Authorisation"),
    "competence_certificate": ("Kompetencebevis", "Competence Certificate"),
    "traces_certificate": ("Traces Certifikat", "Traces Certificate", "Traces"),
    "letter_of_authority": ("Letter of Authority",),
    "egenforsäkran": ("Egenförsäkran", "Selvforsikring"),
    "customs_document": ("Tolddokument", "Customs Document"),
    "ata_carnet": ("ATA-Carnet", "ATA Carnet"),
    "france_stickers": ("Franske Klistermærker", "French Stickers"),
    "journey_log": ("Transportlogbog", "Fahrtenbuch", "Journey Log"),
    "health_certificate": ("Sundhedscertifikat", "Health Certificate", "Gesundheitszeugnis"),
}


def normalize(text: str) -> str:
    return " ".join((text or "").split()).casefold()


class BaseCertificateMatcher(ABC):
    """Interface for matching strategies."""

    @abstractmethod
    def matches(self, certificate, requirement) -> bool:
        """Return True if certificate satisfies requirement."""
        pass


class NameAliasMatcher(BaseCertificateMatcher):
    """Case-insensitive match on certificate type or display name.

    A certificate term matches when it equals the requirement name,
    contains the requirement name, or equals one of the requirement's
    known aliases.
    """

    def __init__(self, aliases: dict = None):
        aliases = REQUIREMENT_ALIASES if aliases is None else aliases
        self.aliases = {
            requirement_id: {normalize(alias) for alias in names}
            for requirement_id, names in aliases.items()
        }

    def terms(self, certificate) -> list[str]:
        terms = [normalize(certificate.certificate_type), normalize(certificate.display_name)]
        return [term for term in terms if term]

    def matches(self, certificate, requirement) -> bool:
        name = normalize(requirement.name)
        aliases = self.aliases.get(requirement.id, set())
        for term in self.terms(certificate):
            if name and (term == name or name in term):
                return True
            if term in aliases:
                return True
        return False


def get_matcher() -> BaseCertificateMatcher:
    """Instantiate the configured matcher."""
    path = get_setting("CERTIFICATE_MATCHER", DEFAULT_MATCHER)
    return load_class(path, BaseCertificateMatcher)()
