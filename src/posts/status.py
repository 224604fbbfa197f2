"""Post status rules for updates."""

from access_control.capabilities import Capability
from authentication.principal import Principal
from core.exceptions import Forbidden

POST_STATUSES = ("publish", "future", "draft", "pending", "private", "trash")


def normalize_status(post_status: str, principal: Principal) -> str:
    """Return the status to store for a requested status change.

    Draft and pending are always allowed; private, publish and future need
    ``publish_posts``. Anything else, ``trash`` included, falls back to
    ``draft``.
    """
    if post_status in ("draft", "pending"):
        return post_status

    if post_status == "private":
        if not principal.has_cap(Capability.PUBLISH_POSTS):
            raise Forbidden(
                "rest_cannot_publish",
                "Sorry, you are not allowed to create private posts in this post type.",
            )
        return post_status

    if post_status in ("publish", "future"):
        if not principal.has_cap(Capability.PUBLISH_POSTS):
            raise Forbidden(
                "rest_cannot_publish",
                "Sorry, you are not allowed to publish posts in this post type.",
            )
        return post_status

    return "draft"


__all__ = ["POST_STATUSES", "normalize_status"]
