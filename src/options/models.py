"""The WordPress ``options`` table."""

from django.conf import settings
from django.db import models


class WpOption(models.Model):
    """A single site option; structured values are PHP-serialized text."""

    option_id = models.BigAutoField(primary_key=True)
    option_name = models.CharField(max_length=191, unique=True, default="")
    option_value = models.TextField(default="")
    autoload = models.CharField(max_length=20, default="yes")

    class Meta:
        managed = settings.WP_MANAGE_TABLES
        db_table = f"{settings.WP_TABLE_PREFIX}options"

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.option_name


__all__ = ["WpOption"]
