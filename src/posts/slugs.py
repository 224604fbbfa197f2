"""Post slug sanitizing and uniqueness."""

from django.utils.html import strip_tags
from django.utils.text import slugify

from .models import WpPost


def sanitize_title(title: str) -> str:
    """Turn arbitrary text into a URL slug: tags stripped, ASCII, lowercase, hyphenated."""
    return slugify(strip_tags(title)).strip("-_")


def slug_exists(using: str, slug: str, post_type: str, exclude_post_id: int, post_parent: int) -> bool:
    """Return True if another post of this type and parent already uses ``slug``."""
    return (
        WpPost.objects.using(using)
        .filter(post_name=slug, post_type=post_type, post_parent=post_parent)
        .exclude(id=exclude_post_id)
        .exists()
    )


def unique_post_slug(
    using: str,
    desired_slug: str,
    post_id: int,
    post_type: str,
    post_parent: int,
) -> str:
    """Return ``desired_slug`` or the first free ``<slug>-N`` with N >= 2.

    Applies to every status, matching WordPress' insert path.
    """
    slug = desired_slug
    suffix = 2
    while slug_exists(using, slug, post_type, post_id, post_parent):
        slug = f"{desired_slug}-{suffix}"
        suffix += 1
    return slug


__all__ = ["sanitize_title", "slug_exists", "unique_post_slug"]
