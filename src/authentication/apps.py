"""App configuration for authentication components."""

from django.apps import AppConfig


class AuthenticationConfig(AppConfig):
    """WordPress account tables and application password verification."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "authentication"
