"""App configuration for WordPress posts, post meta and taxonomy."""

from django.apps import AppConfig


class PostsConfig(AppConfig):
    """Posts app holds the post update endpoint and its storage adapters."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "posts"
