from django.apps import AppConfig


class EquirouteComplianceConfig(AppConfig):
    name = "equiroute_compliance"
    verbose_name = "Compliance"
    default_auto_field = "django.db.models.BigAutoField"

    def ready(self):
        from . import receivers  # noqa: F401
