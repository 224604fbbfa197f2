"""App configuration for the access_control Django application."""

from django.apps import AppConfig


class AccessControlConfig(AppConfig):
    """Capability mapping and post permission checks; owns no tables."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "access_control"
