# Generated manually for standalone equiroute-certificates package

import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import equiroute_certificates.conf
import equiroute_certificates.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Certificate",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "entity_type",
                    models.CharField(
                        choices=[("organization", "Organization"), ("vehicle", "Vehicle"), ("horse", "Horse")],
                        db_index=True,
                        max_length=20,
                    ),
                ),
                (
                    "entity_id",
                    models.CharField(
                        db_index=True,
                        help_text="Primary key of the owning organization, vehicle or horse",
                        max_length=255,
                    ),
                ),
                (
                    "file",
                    models.FileField(
                        max_length=500,
                        storage=equiroute_certificates.conf.get_certificate_storage,
                        upload_to=equiroute_certificates.models.certificate_upload_path,
                    ),
                ),
                ("file_name", models.CharField(help_text="Original filename", max_length=255)),
                ("display_name", models.CharField(max_length=255, verbose_name="display name")),
                (
                    "content_type",
                    models.CharField(help_text="MIME content type (e.g., application/pdf)", max_length=100),
                ),
                ("file_size", models.PositiveBigIntegerField(default=0)),
                (
                    "checksum",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="SHA-256 checksum for integrity verification",
                        max_length=64,
                    ),
                ),
                (
                    "certificate_type",
                    models.CharField(
                        blank=True,
                        help_text="Free-text label used to match compliance requirements",
                        max_length=100,
                        verbose_name="certificate type",
                    ),
                ),
                ("notes", models.TextField(blank=True, default="")),
                ("expires_on", models.DateField(blank=True, null=True)),
                ("uploaded_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                (
                    "uploaded_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "certificate",
                "verbose_name_plural": "certificates",
                "ordering": ["-uploaded_at", "-id"],
                "indexes": [models.Index(fields=["entity_type", "entity_id"], name="certificate_entity_idx")],
            },
        ),
    ]
