from django.apps import AppConfig


class EquirouteCoreConfig(AppConfig):
    name = "equiroute_core"
    verbose_name = "EquiRoute Core"
    default_auto_field = "django.db.models.BigAutoField"
