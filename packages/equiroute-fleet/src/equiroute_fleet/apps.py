from django.apps import AppConfig


class EquirouteFleetConfig(AppConfig):
    name = "equiroute_fleet"
    verbose_name = "Fleet"
    default_auto_field = "django.db.models.BigAutoField"
