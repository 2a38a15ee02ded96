# Generated manually for standalone equiroute-compliance package

import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("equiroute_transports", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="TransportCompliance",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("requirements", models.JSONField(blank=True, default=dict)),
                ("manual_confirmed", models.JSONField(blank=True, default=list)),
                ("auto_confirmed", models.JSONField(blank=True, default=list)),
                ("evaluated_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("reconciled_at", models.DateTimeField(blank=True, null=True)),
                (
                    "transport",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="compliance",
                        to="equiroute_transports.transport",
                    ),
                ),
            ],
            options={
                "verbose_name": "transport compliance",
                "verbose_name_plural": "transport compliance",
            },
        ),
    ]
