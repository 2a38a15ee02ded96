# Generated manually for standalone equiroute-traces package

import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("equiroute_transports", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Registration",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "phase",
                    models.CharField(
                        choices=[
                            ("idle", "Not started"),
                            ("creating_transport", "Creating transport"),
                            ("registering_with_authority", "Registering with authority"),
                            ("complete", "Complete"),
                        ],
                        db_index=True,
                        default="idle",
                        max_length=40,
                    ),
                ),
                ("reference_number", models.CharField(blank=True, default="", max_length=100, verbose_name="reference number")),
                (
                    "countries",
                    models.JSONField(blank=True, default=list, help_text="ISO country codes along the route, in travel order"),
                ),
                ("attempts", models.PositiveIntegerField(default=0)),
                ("last_error", models.TextField(blank=True, default="")),
                ("started_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "started_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "transport",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="registration",
                        to="equiroute_transports.transport",
                    ),
                ),
            ],
            options={
                "verbose_name": "registration",
                "verbose_name_plural": "registrations",
            },
        ),
        migrations.CreateModel(
            name="RegistrationEvent",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("sequence", models.PositiveIntegerField()),
                ("from_phase", models.CharField(max_length=40)),
                ("to_phase", models.CharField(max_length=40)),
                ("occurred_at", models.DateTimeField(auto_now_add=True)),
                ("detail", models.JSONField(blank=True, default=dict)),
                (
                    "actor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "registration",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="events",
                        to="equiroute_traces.registration",
                    ),
                ),
            ],
            options={
                "ordering": ["registration", "sequence"],
            },
        ),
        migrations.AddConstraint(
            model_name="registrationevent",
            constraint=models.UniqueConstraint(
                fields=("registration", "sequence"),
                name="unique_registration_event_sequence",
            ),
        ),
    ]
