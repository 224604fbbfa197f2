"""Post metadata reads and writes, with WordPress' first-row semantics."""

from .models import WpPostMeta

THUMBNAIL_META_KEY = "_thumbnail_id"
PAGE_TEMPLATE_META_KEY = "_wp_page_template"
# Keys starting with this marker are internal and never exposed in responses.
PROTECTED_META_PREFIX = "_"


def get_post_meta(using: str, post_id: int, meta_key: str) -> str | None:
    """Return the first stored value for ``meta_key``, or None."""
    return (
        WpPostMeta.objects.using(using)
        .filter(post_id=post_id, meta_key=meta_key)
        .order_by("meta_id")
        .values_list("meta_value", flat=True)
        .first()
    )


def get_all_post_meta(using: str, post_id: int) -> dict[str, str | None]:
    """Return every meta key of a post; duplicate keys keep their first value."""
    meta: dict[str, str | None] = {}
    rows = (
        WpPostMeta.objects.using(using)
        .filter(post_id=post_id)
        .order_by("meta_id")
        .values_list("meta_key", "meta_value")
    )
    for meta_key, meta_value in rows:
        if meta_key is not None and meta_key not in meta:
            meta[meta_key] = meta_value
    return meta


def update_post_meta(using: str, post_id: int, meta_key: str, meta_value: str) -> None:
    """Update the first row for ``meta_key`` or insert one when the key is new."""
    meta_id = (
        WpPostMeta.objects.using(using)
        .filter(post_id=post_id, meta_key=meta_key)
        .order_by("meta_id")
        .values_list("meta_id", flat=True)
        .first()
    )
    if meta_id is not None:
        WpPostMeta.objects.using(using).filter(meta_id=meta_id).update(meta_value=meta_value)
    else:
        WpPostMeta.objects.using(using).create(post_id=post_id, meta_key=meta_key, meta_value=meta_value)


def delete_post_meta(using: str, post_id: int, meta_key: str) -> None:
    """Delete every row for ``meta_key`` on the post."""
    WpPostMeta.objects.using(using).filter(post_id=post_id, meta_key=meta_key).delete()


def is_protected_meta(meta_key: str) -> bool:
    return meta_key.startswith(PROTECTED_META_PREFIX)


__all__ = [
    "THUMBNAIL_META_KEY",
    "PAGE_TEMPLATE_META_KEY",
    "PROTECTED_META_PREFIX",
    "get_post_meta",
    "get_all_post_meta",
    "update_post_meta",
    "delete_post_meta",
    "is_protected_meta",
]
