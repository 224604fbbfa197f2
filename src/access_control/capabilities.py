"""Capability names and the meta-capability mapping for posts.

WordPress separates *meta* capabilities, which need an object to be
evaluated ("edit this post"), from *primitive* capabilities granted by
roles ("edit_others_posts"). ``map_meta_cap`` turns the former into the set
of primitives that must all be held.
"""

from enum import Enum

from authentication.principal import Principal


class Capability(str, Enum):
    """Primitive and meta capabilities the post endpoints know about.

    Role data is user-configurable, so a principal may hold names outside
    this enumeration; those are kept as plain strings.
    """

    READ = "read"
    EDIT_POST = "edit_post"
    EDIT_POSTS = "edit_posts"
    EDIT_OTHERS_POSTS = "edit_others_posts"
    EDIT_PUBLISHED_POSTS = "edit_published_posts"
    EDIT_PRIVATE_POSTS = "edit_private_posts"
    PUBLISH_POSTS = "publish_posts"
    READ_PRIVATE_POSTS = "read_private_posts"
    DELETE_POSTS = "delete_posts"
    DELETE_OTHERS_POSTS = "delete_others_posts"
    DELETE_PUBLISHED_POSTS = "delete_published_posts"
    DELETE_PRIVATE_POSTS = "delete_private_posts"
    MANAGE_CATEGORIES = "manage_categories"
    ASSIGN_CATEGORIES = "assign_categories"
    MANAGE_POST_TAGS = "manage_post_tags"
    ASSIGN_POST_TAGS = "assign_post_tags"

    def __str__(self) -> str:
        return self.value


# Capabilities that map_meta_cap resolves against a post.
META_CAPABILITIES = frozenset({Capability.EDIT_POST})

# Post types exposed through the REST API.
REST_POST_TYPES = frozenset({"post", "page", "attachment"})


def _cap_name(cap: str | Capability) -> str:
    return cap.value if isinstance(cap, Capability) else cap


def map_meta_cap(cap: str | Capability, principal: Principal, post) -> list[str]:
    """Return the primitive capabilities required for ``cap`` on ``post``.

    Only ``edit_post`` is mapped; any other capability maps to itself.
    """
    name = _cap_name(cap)
    if name != Capability.EDIT_POST.value:
        return [name]

    status = post.post_status
    if post.post_author == principal.id:
        if status in ("publish", "future"):
            return [Capability.EDIT_PUBLISHED_POSTS.value]
        # Own drafts, pending, private and trashed posts.
        return [Capability.EDIT_POSTS.value]

    caps = [Capability.EDIT_OTHERS_POSTS.value]
    if status in ("publish", "future"):
        caps.append(Capability.EDIT_PUBLISHED_POSTS.value)
    elif status == "private":
        caps.append(Capability.EDIT_PRIVATE_POSTS.value)
    return caps


def user_can(principal: Principal, cap: str | Capability, post=None) -> bool:
    """Mirror ``current_user_can()``.

    Meta capabilities with an object require every mapped primitive;
    anything else is a direct membership test.
    """
    name = _cap_name(cap)
    if post is not None and name in {c.value for c in META_CAPABILITIES}:
        return all(principal.has_cap(required) for required in map_meta_cap(name, principal, post))
    return principal.has_cap(name)


def is_rest_post_type(post_type: str) -> bool:
    return post_type in REST_POST_TYPES


__all__ = [
    "Capability",
    "META_CAPABILITIES",
    "REST_POST_TYPES",
    "map_meta_cap",
    "user_can",
    "is_rest_post_type",
]
