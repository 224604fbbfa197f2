"""Option reads/writes, including the sticky-post registry and role definitions.

Every function takes the database alias first so callers stay on the
connection (and transaction) they were handed.
"""

import logging

from django.conf import settings

from core.serialization import php_dumps, php_loads
from .models import WpOption

logger = logging.getLogger(__name__)

STICKY_POSTS_OPTION = "sticky_posts"


def get_option(using: str, name: str) -> str | None:
    """Return the raw option value, or None if the option does not exist."""
    return (
        WpOption.objects.using(using)
        .filter(option_name=name)
        .values_list("option_value", flat=True)
        .first()
    )


def update_option(using: str, name: str, value: str) -> None:
    """Store an option value, creating the row when it is missing."""
    WpOption.objects.using(using).update_or_create(
        option_name=name,
        defaults={"option_value": value},
        create_defaults={"option_value": value, "autoload": "yes"},
    )


def get_gmt_offset(using: str) -> float:
    """Return the site's UTC offset in hours (``gmt_offset``; may be fractional)."""
    raw = get_option(using, "gmt_offset")
    if not raw:
        return 0.0
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric gmt_offset option %r", raw)
        return 0.0


def get_site_url(using: str) -> str:
    """Return the ``siteurl`` option, falling back to ``WP_DEFAULT_SITE_URL``."""
    return get_option(using, "siteurl") or settings.WP_DEFAULT_SITE_URL


def get_role_definitions(using: str) -> dict[str, dict]:
    """Return ``{role: {"name": ..., "capabilities": {cap: granted}}}``.

    Read from the ``{prefix}user_roles`` option.
    """
    raw = get_option(using, f"{settings.WP_TABLE_PREFIX}user_roles")
    roles = php_loads(raw, default={})
    if not isinstance(roles, dict):
        return {}
    return roles


def get_sticky_posts(using: str) -> list[int]:
    """Return the ordered sticky-post ids, dropping anything that is not a positive id."""
    stored = php_loads(get_option(using, STICKY_POSTS_OPTION), default=[])
    if isinstance(stored, dict):
        stored = list(stored.values())
    if not isinstance(stored, list):
        return []

    post_ids: list[int] = []
    for value in stored:
        try:
            post_id = int(value)
        except (TypeError, ValueError):
            continue
        if post_id > 0:
            post_ids.append(post_id)
    return post_ids


def set_sticky_posts(using: str, post_ids: list[int]) -> None:
    """Persist the sticky registry in PHP array form."""
    update_option(using, STICKY_POSTS_OPTION, php_dumps(list(post_ids)))


def is_sticky(using: str, post_id: int) -> bool:
    return post_id in get_sticky_posts(using)


def stick_post(using: str, post_id: int) -> None:
    """Add a post to the sticky registry; a no-op when it is already there."""
    sticky = get_sticky_posts(using)
    if post_id not in sticky:
        sticky.append(post_id)
        set_sticky_posts(using, sticky)


def unstick_post(using: str, post_id: int) -> None:
    """Remove a post from the sticky registry; a no-op when it is absent."""
    sticky = get_sticky_posts(using)
    if post_id in sticky:
        set_sticky_posts(using, [sticky_id for sticky_id in sticky if sticky_id != post_id])


__all__ = [
    "STICKY_POSTS_OPTION",
    "get_option",
    "update_option",
    "get_gmt_offset",
    "get_site_url",
    "get_role_definitions",
    "get_sticky_posts",
    "set_sticky_posts",
    "is_sticky",
    "stick_post",
    "unstick_post",
]
