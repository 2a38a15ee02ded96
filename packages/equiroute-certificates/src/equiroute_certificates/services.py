"""Certificate services: upload, list, edit and delete.

Certificate lists are always read from the database. Nothing here
caches them, so the compliance reconciliation sees a certificate as
soon as its upload has committed.
"""

import hashlib
import logging
import os
from dataclasses import dataclass, field

from django.core.exceptions import ValidationError
from django.core.files.base import ContentFile
from django.db import transaction
from django.utils import timezone

from equiroute_core.auth import require_authenticated
from equiroute_core.exceptions import InvalidInputError
from equiroute_fleet.models import EntityType
from equiroute_fleet.services import get_owned_entity
from equiroute_orgs.models import Permission
from equiroute_orgs.permissions import authorize

from .exceptions import CertificateNotFound, CertificateStorageError, InvalidCertificateUpdate
from .labels import guess_content_type, label_for_content_type
from .models import Certificate, certificate_upload_path
from .signals import certificate_deleted, certificate_updated, certificate_uploaded

logger = logging.getLogger(__name__)

MANAGE_PERMISSION = {
    EntityType.ORGANIZATION: Permission.MANAGE_MEMBERS,
    EntityType.VEHICLE: Permission.MANAGE_VEHICLES,
    EntityType.HORSE: Permission.MANAGE_HORSES,
}

EDITABLE_FIELDS = ("display_name", "certificate_type", "notes", "expires_on")


@dataclass
class FileUpload:
    """An uploaded file as handed over by the caller."""

    name: str
    content: bytes
    content_type: str = ""

    @classmethod
    def from_uploaded_file(cls, uploaded) -> "FileUpload":
        uploaded.seek(0)
        return cls(
            name=os.path.basename(uploaded.name or ""),
            content=uploaded.read(),
            content_type=getattr(uploaded, "content_type", "") or "",
        )


@dataclass
class CertificateSnapshot:
    """Certificates of every entity taking part in a transport."""

    organization: list = field(default_factory=list)
    vehicle: list = field(default_factory=list)
    horses: dict = field(default_factory=dict)

    def for_scope(self, scope: str) -> list:
        if scope == EntityType.HORSE:
            return [cert for certs in self.horses.values() for cert in certs]
        if scope == EntityType.VEHICLE:
            return list(self.vehicle)
        return list(self.organization)

    def as_mapping(self) -> dict:
        return {
            EntityType.ORGANIZATION.value: self.for_scope(EntityType.ORGANIZATION),
            EntityType.VEHICLE.value: self.for_scope(EntityType.VEHICLE),
            EntityType.HORSE.value: self.for_scope(EntityType.HORSE),
        }

    def __len__(self):
        return len(self.organization) + len(self.vehicle) + sum(len(c) for c in self.horses.values())


def authorize_entity(context, entity_type: str, entity_id):
    """
    Check the context may manage certificates of an entity.

    The entity must belong to the context, and in organization mode the
    actor needs the management permission for that kind of entity.
    """
    require_authenticated(context.actor)
    entity = get_owned_entity(context, entity_type, entity_id)
    authorize(context, MANAGE_PERMISSION[entity_type])
    return entity


@transaction.atomic
def upload_certificate(
    context,
    entity_type: str,
    entity_id,
    file,
    *,
    display_name: str = None,
    certificate_type: str = None,
    notes: str = "",
    expires_on=None,
) -> Certificate:
    """
    Store a file and create its certificate record.

    Args:
        context: ActiveContext of the uploading actor
        entity_type: organization, vehicle or horse
        entity_id: Primary key of the owning entity
        file: FileUpload, or any Django File / UploadedFile
        display_name: Defaults to the file name without extension
        certificate_type: Defaults to a label derived from the content type
        notes: Free-text notes
        expires_on: Optional expiry date; expired certificates no
            longer confirm requirements

    Raises:
        MissingPermission / AuthorizationError: Actor cannot manage the entity
        EntityNotFound: The entity does not exist
        CertificateStorageError: The blob store failed
    """
    authorize_entity(context, entity_type, entity_id)

    if not isinstance(file, FileUpload):
        file = FileUpload.from_uploaded_file(file)
    file_name = os.path.basename(file.name or "").strip()
    if not file_name:
        raise InvalidInputError("File name is required")

    content_type = guess_content_type(file_name, file.content_type)
    display_name = (display_name or "").strip() or os.path.splitext(file_name)[0]
    if certificate_type is None or not certificate_type.strip():
        certificate_type = label_for_content_type(content_type)

    certificate = Certificate(
        entity_type=entity_type,
        entity_id=str(entity_id),
        file_name=file_name,
        display_name=display_name,
        content_type=content_type,
        file_size=len(file.content),
        checksum=hashlib.sha256(file.content).hexdigest(),
        certificate_type=certificate_type.strip(),
        notes=notes or "",
        expires_on=expires_on,
        uploaded_by=context.actor,
        uploaded_at=timezone.now(),
    )

    storage = Certificate._meta.get_field("file").storage
    try:
        stored_name = storage.save(certificate_upload_path(certificate, file_name), ContentFile(file.content))
    except Exception as e:
        logger.exception(f"Storing certificate file {file_name} failed")
        raise CertificateStorageError(str(e)) from e

    # The row rolls back with the transaction; the blob has to go by hand.
    certificate.file = stored_name
    try:
        certificate.save()
        certificate_uploaded.send(
            sender=Certificate,
            certificate=certificate,
            entity_type=entity_type,
            entity_id=str(entity_id),
        )
    except Exception:
        storage.delete(stored_name)
        raise

    logger.info(
        f"Certificate {certificate.pk} uploaded for {entity_type} {entity_id} by actor {context.actor_id}"
    )
    return certificate


def list_certificates(entity_type: str, entity_id) -> list[Certificate]:
    """Certificates of an entity, newest upload first."""
    if entity_type not in EntityType.values:
        raise InvalidInputError(f"Unknown entity type '{entity_type}'")
    return list(Certificate.objects.for_entity(entity_type, entity_id).order_by("-uploaded_at", "-id"))


def certificates_for_transport(organization_id=None, vehicle_id=None, horse_ids=()) -> CertificateSnapshot:
    """Fetch the certificates of every entity involved in a transport."""
    snapshot = CertificateSnapshot()
    if organization_id:
        snapshot.organization = list_certificates(EntityType.ORGANIZATION, organization_id)
    if vehicle_id:
        snapshot.vehicle = list_certificates(EntityType.VEHICLE, vehicle_id)
    for horse_id in horse_ids or ():
        snapshot.horses[str(horse_id)] = list_certificates(EntityType.HORSE, horse_id)
    return snapshot


def get_certificate(certificate_id) -> Certificate:
    try:
        return Certificate.objects.get(pk=certificate_id)
    except (Certificate.DoesNotExist, ValidationError, ValueError):
        raise CertificateNotFound(certificate_id)


@transaction.atomic
def update_certificate_metadata(context, certificate_id, **changes) -> Certificate:
    """
    Edit display name, certificate type, notes or expiry date.

    Raises:
        InvalidCertificateUpdate: For any other field
        CertificateNotFound: Unknown certificate
    """
    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise InvalidCertificateUpdate(unknown)

    certificate = get_certificate(certificate_id)
    authorize_entity(context, certificate.entity_type, certificate.entity_id)

    if "display_name" in changes:
        changes["display_name"] = (changes["display_name"] or "").strip()
        if not changes["display_name"]:
            raise InvalidInputError("Display name cannot be empty")
    if "certificate_type" in changes:
        changes["certificate_type"] = (changes["certificate_type"] or "").strip()
    if "notes" in changes:
        changes["notes"] = changes["notes"] or ""

    for name, value in changes.items():
        setattr(certificate, name, value)
    certificate.save(update_fields=[*changes, "updated_at"])

    certificate_updated.send(
        sender=Certificate,
        certificate=certificate,
        entity_type=certificate.entity_type,
        entity_id=certificate.entity_id,
    )
    return certificate


@transaction.atomic
def delete_certificate(context, certificate_id) -> None:
    """
    Hard-delete a certificate record and its file.

    Receivers of certificate_deleted run inside the same transaction,
    after the row is gone, so anything confirmed by this certificate is
    recomputed before the delete commits.
    """
    certificate = get_certificate(certificate_id)
    authorize_entity(context, certificate.entity_type, certificate.entity_id)

    entity_type, entity_id, pk = certificate.entity_type, certificate.entity_id, certificate.pk
    stored_name = certificate.file.name
    storage = certificate.file.storage

    certificate.delete()
    certificate_deleted.send(
        sender=Certificate,
        certificate_id=pk,
        entity_type=entity_type,
        entity_id=entity_id,
    )

    if stored_name:
        try:
            storage.delete(stored_name)
        except Exception as e:
            logger.exception(f"Deleting certificate file {stored_name} failed")
            raise CertificateStorageError(str(e)) from e

    logger.info(f"Certificate {pk} deleted by actor {context.actor_id}")


def verify_certificate_blob(certificate: Certificate) -> str:
    """
    Check a certificate's stored file.

    Returns:
        - "ok": file exists and checksum matches
        - "missing": file not found in storage
        - "corrupt": file exists but checksum differs
    """
    if not certificate.file.name or not certificate.file.storage.exists(certificate.file.name):
        return "missing"
    if not certificate.verify_checksum():
        return "corrupt"
    return "ok"
