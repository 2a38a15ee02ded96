# Generated manually for standalone equiroute-fleet package

import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def owner_fields():
    return [
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
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("equiroute_orgs", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Vehicle",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("license_plate", models.CharField(max_length=20, verbose_name="license plate")),
                ("make", models.CharField(blank=True, max_length=100)),
                ("model", models.CharField(blank=True, max_length=100)),
                (
                    "vehicle_type",
                    models.CharField(
                        choices=[("truck", "Truck"), ("trailer", "Trailer"), ("van", "Van")],
                        default="trailer",
                        max_length=20,
                    ),
                ),
                (
                    "capacity",
                    models.PositiveSmallIntegerField(
                        default=2, help_text="Number of horses the vehicle can carry"
                    ),
                ),
                ("vin", models.CharField(blank=True, max_length=32, verbose_name="VIN")),
                ("registry_data", models.JSONField(blank=True, default=dict)),
                *owner_fields(),
            ],
            options={
                "verbose_name": "vehicle",
                "verbose_name_plural": "vehicles",
                "ordering": ["license_plate"],
            },
        ),
        migrations.CreateModel(
            name="Horse",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=100, verbose_name="name")),
                (
                    "ueln",
                    models.CharField(
                        blank=True,
                        help_text="Universal Equine Life Number from the horse passport",
                        max_length=32,
                        verbose_name="UELN",
                    ),
                ),
                ("breed", models.CharField(blank=True, max_length=100)),
                ("birth_year", models.PositiveSmallIntegerField(blank=True, null=True)),
                *owner_fields(),
            ],
            options={
                "verbose_name": "horse",
                "verbose_name_plural": "horses",
                "ordering": ["name"],
            },
        ),
        migrations.AddConstraint(
            model_name="vehicle",
            constraint=models.CheckConstraint(
                condition=(
                    (models.Q(owner__isnull=False) & models.Q(organization__isnull=True))
                    | models.Q(organization__isnull=False)
                ),
                name="vehicle_has_owner_context",
            ),
        ),
        migrations.AddConstraint(
            model_name="horse",
            constraint=models.CheckConstraint(
                condition=(
                    (models.Q(owner__isnull=False) & models.Q(organization__isnull=True))
                    | models.Q(organization__isnull=False)
                ),
                name="horse_has_owner_context",
            ),
        ),
    ]
