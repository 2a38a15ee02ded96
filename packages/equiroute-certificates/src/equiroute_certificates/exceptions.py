"""Custom exceptions for equiroute-certificates."""

from equiroute_core.exceptions import (
    EquirouteError,
    ExternalServiceError,
    InvalidInputError,
    NotFoundError,
)


class CertificateError(EquirouteError):
    """Base exception for certificate errors."""
    pass


class CertificateNotFound(NotFoundError, CertificateError):
    """Raised when a certificate id does not exist."""

    def __init__(self, certificate_id):
        self.certificate_id = certificate_id
        super().__init__(f"Certificate '{certificate_id}' not found")


class CertificateStorageError(ExternalServiceError, CertificateError):
    """Raised when the blob store fails to save or delete a file."""

    def __init__(self, reason: str):
        super().__init__("Certificate storage", reason)


class InvalidCertificateUpdate(InvalidInputError, CertificateError):
    """Raised when a metadata update touches fields that are not editable."""

    def __init__(self, fields):
        self.fields = sorted(fields)
        super().__init__(f"Fields cannot be edited: {', '.join(self.fields)}")


class ImmutableChecksumError(CertificateError):
    """Raised when attempting to change a certificate's checksum."""

    def __init__(self, certificate_id):
        self.certificate_id = certificate_id
        super().__init__(f"Cannot modify checksum of certificate {certificate_id}. Checksums are immutable.")
