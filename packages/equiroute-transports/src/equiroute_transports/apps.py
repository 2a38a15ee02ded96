from django.apps import AppConfig


class EquirouteTransportsConfig(AppConfig):
    name = "equiroute_transports"
    verbose_name = "Transports"
    default_auto_field = "django.db.models.BigAutoField"
