"""Django app configuration for django-carbon-registry."""

from django.apps import AppConfig


class CarbonRegistryConfig(AppConfig):
    """App configuration for django-carbon-registry."""

    name = "django_carbon_registry"
    label = "carbon_registry"
    verbose_name = "Carbon Registry"
    default_auto_field = "django.db.models.BigAutoField"
