from django.apps import AppConfig


class EquirouteOrgsConfig(AppConfig):
    name = "equiroute_orgs"
    verbose_name = "Organizations"
    default_auto_field = "django.db.models.BigAutoField"
