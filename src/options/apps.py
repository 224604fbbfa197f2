"""App configuration for the WordPress options store."""

from django.apps import AppConfig


class OptionsConfig(AppConfig):
    """Options app maps ``wp_options`` and the values the API reads from it."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "options"
