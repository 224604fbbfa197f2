"""WordPress account tables: ``users`` and ``usermeta``.

These are plain models over the existing WordPress schema rather than a
Django ``AUTH_USER_MODEL``: the API never logs users in through Django, it
only reads accounts to verify application passwords and resolve roles.
"""

from django.conf import settings
from django.db import models

from core.fields import WordPressDateTimeField
from .managers import WpUserManager


class WpUser(models.Model):
    """A WordPress account identified by ``user_login``."""

    id = models.BigAutoField(primary_key=True, db_column="ID")
    user_login = models.CharField(max_length=60, default="", db_index=True)
    user_pass = models.CharField(max_length=255, default="")
    user_nicename = models.CharField(max_length=50, default="")
    user_email = models.CharField(max_length=100, default="")
    user_url = models.CharField(max_length=100, default="")
    user_registered = WordPressDateTimeField()
    user_activation_key = models.CharField(max_length=255, default="")
    user_status = models.IntegerField(default=0)
    display_name = models.CharField(max_length=250, default="")

    objects = WpUserManager()

    class Meta:
        managed = settings.WP_MANAGE_TABLES
        db_table = f"{settings.WP_TABLE_PREFIX}users"

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.user_login


class WpUserMeta(models.Model):
    """Per-account key/value metadata (roles, application passwords, ...)."""

    umeta_id = models.BigAutoField(primary_key=True)
    user_id = models.BigIntegerField(default=0, db_index=True)
    meta_key = models.CharField(max_length=255, null=True, blank=True, db_index=True)
    meta_value = models.TextField(null=True, blank=True)

    class Meta:
        managed = settings.WP_MANAGE_TABLES
        db_table = f"{settings.WP_TABLE_PREFIX}usermeta"

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.user_id}:{self.meta_key}"


__all__ = ["WpUser", "WpUserMeta"]
