from django.apps import AppConfig


class EquirouteTracesConfig(AppConfig):
    name = "equiroute_traces"
    verbose_name = "TRACES registration"
    default_auto_field = "django.db.models.BigAutoField"
