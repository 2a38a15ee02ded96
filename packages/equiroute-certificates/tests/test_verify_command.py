"""Tests for the verify_certificates management command."""

import json
from io import StringIO

import pytest
from django.core.files.base import ContentFile
from django.core.management import call_command

from equiroute_certificates.services import upload_certificate


@pytest.fixture
def certificates(org_context, vehicle, horses, make_upload):
    """One intact, one missing and one corrupted certificate."""
    intact = upload_certificate(org_context, "vehicle", vehicle.pk, make_upload("intact.pdf"))
    missing = upload_certificate(org_context, "horse", horses[0].pk, make_upload("missing.pdf"))
    corrupt = upload_certificate(org_context, "horse", horses[1].pk, make_upload("corrupt.pdf"))

    storage = missing.file.storage
    storage.delete(missing.file.name)
    storage.delete(corrupt.file.name)
    storage.save(corrupt.file.name, ContentFile(b"tampered"))
    return intact, missing, corrupt


@pytest.mark.django_db
class TestVerifyCertificatesCommand:
    """Tests for verify_certificates."""

    def test_text_output(self, certificates):
        """Text output lists counts and offending ids."""
        intact, missing, corrupt = certificates
        out = StringIO()

        call_command("verify_certificates", stdout=out)

        output = out.getvalue()
        assert "OK: 1" in output
        assert "MISSING: 1" in output
        assert "CORRUPT: 1" in output
        assert str(missing.pk) in output
        assert str(corrupt.pk) in output

    def test_json_output(self, certificates):
        """JSON output is machine readable."""
        intact, missing, corrupt = certificates
        out = StringIO()

        call_command("verify_certificates", "--format", "json", stdout=out)

        result = json.loads(out.getvalue())
        assert result["ok"] == 1
        assert result["missing_ids"] == [str(missing.pk)]
        assert result["corrupt_ids"] == [str(corrupt.pk)]

    def test_entity_type_filter(self, certificates):
        """Filtering by entity type only checks those certificates."""
        out = StringIO()

        call_command("verify_certificates", "--entity-type", "vehicle", "--format", "json", stdout=out)

        result = json.loads(out.getvalue())
        assert result == {"ok": 1, "missing": 0, "corrupt": 0, "missing_ids": [], "corrupt_ids": []}
