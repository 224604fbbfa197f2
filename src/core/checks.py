"""System checks for the WordPress database configuration."""

import re

from django.conf import settings
from django.core.checks import Error, register

_PREFIX_RE = re.compile(r"^[A-Za-z0-9_]+$")


@register()
def wordpress_table_prefix_is_identifier(app_configs, **kwargs):
    """Ensure ``WP_TABLE_PREFIX`` can be spliced into table names safely.

    The prefix becomes part of every WordPress model's ``db_table`` and of
    the usermeta/option keys that hold roles, so anything other than a plain
    SQL identifier fragment is rejected at startup.
    """
    errors: list[Error] = []

    prefix = getattr(settings, "WP_TABLE_PREFIX", "")
    if not prefix or not _PREFIX_RE.match(prefix):
        errors.append(
            Error(
                f"WP_TABLE_PREFIX {prefix!r} must be a non-empty string of letters, "
                f"digits and underscores.",
                id="core.E001",
            )
        )

    return errors
