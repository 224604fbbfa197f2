"""Permission checks for updating a post.

The checks run in a fixed order and stop at the first failure, each with
its own error code. Denials raise ``Forbidden``; whether that renders as 401
or 403 is decided by the exception handler.
"""

from core.exceptions import Forbidden
from authentication.principal import Principal
from .capabilities import Capability, is_rest_post_type, user_can

# Taxonomy request field -> (assign capability, manage capability).
TERM_ASSIGN_CAPS = {
    "categories": (Capability.ASSIGN_CATEGORIES, Capability.MANAGE_CATEGORIES),
    "tags": (Capability.ASSIGN_POST_TAGS, Capability.MANAGE_POST_TAGS),
}


def can_update_post(principal: Principal, post) -> bool:
    """Mirror ``check_update_permission()``: REST-visible type plus ``edit_post``."""
    if not is_rest_post_type(post.post_type):
        return False
    return user_can(principal, Capability.EDIT_POST, post)


def can_assign_terms(principal: Principal, patch: dict) -> bool:
    """Return False if the patch assigns terms in a taxonomy the principal may not use.

    Per-term capabilities are not modelled: holding the taxonomy's assign or
    manage capability is enough, and ``edit_posts`` stands in when neither is
    granted.
    """
    for field_name, caps in TERM_ASSIGN_CAPS.items():
        if not patch.get(field_name):
            continue
        if principal.has_any_cap(*caps):
            continue
        if not principal.has_cap(Capability.EDIT_POSTS):
            return False
    return True


def check_update_permissions(principal: Principal, post, patch: dict) -> None:
    """Raise ``Forbidden`` for the first update rule the principal fails."""
    if not can_update_post(principal, post):
        raise Forbidden("rest_cannot_edit", "Sorry, you are not allowed to edit this post.")

    author = patch.get("author")
    if (
        author is not None
        and author != principal.id
        and not principal.has_cap(Capability.EDIT_OTHERS_POSTS)
    ):
        raise Forbidden(
            "rest_cannot_edit_others",
            "Sorry, you are not allowed to update posts as this user.",
        )

    if patch.get("sticky") and not principal.has_any_cap(
        Capability.EDIT_OTHERS_POSTS, Capability.PUBLISH_POSTS
    ):
        raise Forbidden(
            "rest_cannot_assign_sticky",
            "Sorry, you are not allowed to make posts sticky.",
        )

    if not can_assign_terms(principal, patch):
        raise Forbidden(
            "rest_cannot_assign_term",
            "Sorry, you are not allowed to assign the provided terms.",
        )


__all__ = ["TERM_ASSIGN_CAPS", "can_update_post", "can_assign_terms", "check_update_permissions"]
