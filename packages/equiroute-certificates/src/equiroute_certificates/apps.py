from django.apps import AppConfig


class EquirouteCertificatesConfig(AppConfig):
    name = "equiroute_certificates"
    verbose_name = "Certificates"
    default_auto_field = "django.db.models.BigAutoField"
