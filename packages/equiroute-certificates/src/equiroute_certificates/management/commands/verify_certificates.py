"""
Management command to verify certificate file integrity.

Checks every certificate's stored file for:
- Missing files
- Corrupted files (checksum mismatch)
"""

import json

from django.core.management.base import BaseCommand

from equiroute_certificates.models import Certificate
from equiroute_certificates.services import verify_certificate_blob


class Command(BaseCommand):
    help = "Verify certificate files against their recorded checksums"

    def add_arguments(self, parser):
        parser.add_argument(
            "--entity-type",
            choices=["organization", "vehicle", "horse"],
            default=None,
            help="Only check certificates of this entity type",
        )
        parser.add_argument(
            "--format",
            choices=["text", "json"],
            default="text",
            help="Output format (default: text)",
        )

    def handle(self, *args, **options):
        certificates = Certificate.objects.all()
        if options["entity_type"]:
            certificates = certificates.filter(entity_type=options["entity_type"])

        results = {"ok": [], "missing": [], "corrupt": []}
        for certificate in certificates.iterator():
            results[verify_certificate_blob(certificate)].append(str(certificate.pk))

        if options["format"] == "json":
            self.stdout.write(json.dumps({
                "ok": len(results["ok"]),
                "missing": len(results["missing"]),
                "corrupt": len(results["corrupt"]),
                "missing_ids": results["missing"],
                "corrupt_ids": results["corrupt"],
            }))
            return

        self.stdout.write("Certificate Verification Results")
        self.stdout.write(self.style.SUCCESS(f"OK: {len(results['ok'])}"))
        for status in ("missing", "corrupt"):
            line = f"{status.upper()}: {len(results[status])}"
            self.stdout.write(self.style.WARNING(line) if results[status] else line)
            for pk in results[status]:
                self.stdout.write(f"  - {pk}")
