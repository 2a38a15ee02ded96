# Generated manually for standalone equiroute-transports package

import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("equiroute_orgs", "0001_initial"),
        ("equiroute_fleet", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Transport",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("from_location", models.CharField(max_length=255, verbose_name="from")),
                ("to_location", models.CharField(max_length=255, verbose_name="to")),
                ("distance_km", models.DecimalField(decimal_places=1, max_digits=8)),
                ("countries", models.JSONField(blank=True, default=list)),
                ("border_crossing", models.BooleanField(default=False)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("planned", "Planned"),
                            ("active", "Active"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        db_index=True,
                        default="planned",
                        max_length=20,
                    ),
                ),
                ("departure_at", models.DateTimeField(blank=True, null=True)),
                ("started_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "owner",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "organization",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to="equiroute_orgs.organization",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "vehicle",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transports",
                        to="equiroute_fleet.vehicle",
                    ),
                ),
                (
                    "horses",
                    models.ManyToManyField(related_name="transports", to="equiroute_fleet.horse"),
                ),
            ],
            options={
                "verbose_name": "transport",
                "verbose_name_plural": "transports",
                "ordering": ["-created_at"],
            },
        ),
        migrations.AddConstraint(
            model_name="transport",
            constraint=models.CheckConstraint(
                condition=(
                    (models.Q(owner__isnull=False) & models.Q(organization__isnull=True))
                    | models.Q(organization__isnull=False)
                ),
                name="transport_has_owner_context",
            ),
        ),
    ]
