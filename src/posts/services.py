"""Post update orchestration.

``PostUpdateService.update`` runs the whole flow inside one transaction on
the alias it was built with: load, authorize, prepare the column set, write
it, apply side effects, then read the row back for the response. Any
``WpError`` raised along the way leaves the atomic block and rolls back
every write made so far.
"""

import json
import logging
from typing import Any

from django.db import transaction

from access_control.permissions import check_update_permissions
from authentication.models import WpUser
from authentication.principal import Principal
from core.exceptions import InvalidInput, NotFound, PersistFailure
from core.fields import ZERO_DATE
from options.services import get_gmt_offset, get_site_url, is_sticky, stick_post, unstick_post
from .dates import current_time_pair, rest_get_date_with_gmt
from .meta import PAGE_TEMPLATE_META_KEY, THUMBNAIL_META_KEY, delete_post_meta, update_post_meta
from .models import WpPost
from .serializers import PostSerializer
from .slugs import sanitize_title, unique_post_slug
from .status import normalize_status
from .terms import (
    CATEGORY_TAXONOMY,
    FORMAT_TAXONOMY,
    TAG_TAXONOMY,
    get_post_format_term_id,
    set_object_terms,
)

logger = logging.getLogger(__name__)

EDITABLE_POST_TYPE = "post"
ATTACHMENT_POST_TYPE = "attachment"


class PostUpdateService:
    """Apply a validated update payload to one post on behalf of a principal."""

    def __init__(self, using: str):
        self.using = using

    def _posts(self):
        return WpPost.objects.using(self.using)

    def get_post(self, post_id: int) -> WpPost | None:
        return self._posts().filter(id=post_id).first()

    def update(self, post_id: int, patch: dict[str, Any], principal: Principal) -> dict:
        with transaction.atomic(using=self.using):
            post = self.get_post(post_id)
            if post is None or post.post_type != EDITABLE_POST_TYPE:
                raise NotFound("rest_post_invalid_id", "Invalid post ID.")

            check_update_permissions(principal, post, patch)

            gmt_offset = get_gmt_offset(self.using)
            changes = self.prepare_changes(post, patch, principal, gmt_offset)
            self.save_changes(post.id, changes, gmt_offset)
            self.apply_side_effects(post.id, patch)

            updated = self.get_post(post.id)
            if updated is None:
                raise PersistFailure("rest_post_invalid_id", "Post not found after update.")

            data = self.build_response(updated, gmt_offset)

        logger.info("Post %s updated by user %s (%s)", post_id, principal.id, ", ".join(sorted(patch)) or "no fields")
        return data

    def prepare_changes(
        self, post: WpPost, patch: dict[str, Any], principal: Principal, gmt_offset: float
    ) -> dict[str, Any]:
        """Translate the payload into ``posts`` column values without writing anything."""
        changes: dict[str, Any] = {}

        for field_name, column in (("title", "post_title"), ("content", "post_content"), ("excerpt", "post_excerpt")):
            if field_name in patch:
                changes[column] = patch[field_name]

        if "status" in patch and patch["status"] != post.post_status:
            changes["post_status"] = normalize_status(patch["status"], principal)

        changes.update(self._prepare_dates(patch, gmt_offset))

        if "author" in patch:
            author = patch["author"]
            if author != principal.id and not WpUser.objects.user_exists(author, using=self.using):
                raise InvalidInput("rest_invalid_author", "Invalid author ID.")
            changes["post_author"] = author

        self._check_password_and_sticky(post, patch)
        if "password" in patch:
            changes["post_password"] = patch["password"]

        if "parent" in patch:
            parent = patch["parent"]
            if parent and not self._posts().filter(id=parent).exists():
                raise InvalidInput("rest_post_invalid_id", "Invalid post parent ID.")
            changes["post_parent"] = parent

        for field_name in ("menu_order", "comment_status", "ping_status"):
            if field_name in patch:
                changes[field_name] = patch[field_name]

        if "slug" in patch:
            changes["post_name"] = self._prepare_slug(post, patch["slug"], changes)

        return changes

    @staticmethod
    def _prepare_dates(patch: dict[str, Any], gmt_offset: float) -> dict[str, str]:
        # ``date`` takes precedence when both are sent.
        if "date" in patch:
            field_name, is_utc = "date", False
        elif "date_gmt" in patch:
            field_name, is_utc = "date_gmt", True
        else:
            return {}

        value = patch[field_name]
        if value is None:
            return {"post_date": ZERO_DATE, "post_date_gmt": ZERO_DATE}

        dates = rest_get_date_with_gmt(value, is_utc, gmt_offset)
        if dates is None:
            raise InvalidInput(
                "rest_invalid_param",
                f"Invalid parameter: {field_name} - Invalid date.",
                params={field_name: "Invalid date."},
            )
        return {"post_date": dates[0], "post_date_gmt": dates[1]}

    def _check_password_and_sticky(self, post: WpPost, patch: dict[str, Any]) -> None:
        if patch.get("password"):
            if patch.get("sticky"):
                raise InvalidInput("rest_invalid_field", "A post can not be sticky and have a password.")
            if is_sticky(self.using, post.id):
                raise InvalidInput("rest_invalid_field", "A sticky post can not be password protected.")

        if patch.get("sticky") and post.post_password:
            raise InvalidInput("rest_invalid_field", "A password protected post can not be set to sticky.")

    def _prepare_slug(self, post: WpPost, requested: str, changes: dict[str, Any]) -> str:
        slug = sanitize_title(requested)
        if not slug:
            return slug
        return unique_post_slug(
            self.using,
            slug,
            post.id,
            post.post_type,
            changes.get("post_parent", post.post_parent),
        )

    def save_changes(self, post_id: int, changes: dict[str, Any], gmt_offset: float) -> None:
        """Write the column set in a single UPDATE, always refreshing the modified dates."""
        modified, modified_gmt = current_time_pair(gmt_offset)
        updated = self._posts().filter(id=post_id).update(
            **changes, post_modified=modified, post_modified_gmt=modified_gmt
        )
        if not updated:
            raise PersistFailure("db_update_error", "Could not update post in the database.")

    def apply_side_effects(self, post_id: int, patch: dict[str, Any]) -> None:
        if "format" in patch:
            self.set_format(post_id, patch["format"])
        if "featured_media" in patch:
            self.set_featured_media(post_id, patch["featured_media"])
        if "sticky" in patch:
            if patch["sticky"]:
                stick_post(self.using, post_id)
            else:
                unstick_post(self.using, post_id)
        if "template" in patch:
            update_post_meta(self.using, post_id, PAGE_TEMPLATE_META_KEY, patch["template"])
        if "categories" in patch:
            set_object_terms(self.using, post_id, patch["categories"], CATEGORY_TAXONOMY)
        if "tags" in patch:
            set_object_terms(self.using, post_id, patch["tags"], TAG_TAXONOMY)
        if "meta" in patch:
            self.set_meta(post_id, patch["meta"])

    def set_format(self, post_id: int, format_slug: str) -> None:
        """Assign the ``post-format-*`` term; ``standard`` clears it. Unregistered formats are ignored."""
        if format_slug in ("standard", ""):
            set_object_terms(self.using, post_id, [], FORMAT_TAXONOMY)
            return
        term_id = get_post_format_term_id(self.using, format_slug)
        if term_id:
            set_object_terms(self.using, post_id, [term_id], FORMAT_TAXONOMY)

    def set_featured_media(self, post_id: int, media_id: int) -> None:
        if not media_id:
            delete_post_meta(self.using, post_id, THUMBNAIL_META_KEY)
            return
        if not self._posts().filter(id=media_id, post_type=ATTACHMENT_POST_TYPE).exists():
            raise InvalidInput("rest_invalid_featured_media", "Invalid featured media ID.")
        update_post_meta(self.using, post_id, THUMBNAIL_META_KEY, str(media_id))

    def set_meta(self, post_id: int, meta: dict[str, Any]) -> None:
        for key, value in meta.items():
            if value is None:
                continue
            update_post_meta(self.using, post_id, key, value if isinstance(value, str) else json.dumps(value))

    def build_response(self, post: WpPost, gmt_offset: float) -> dict:
        serializer = PostSerializer(
            post,
            context={
                "using": self.using,
                "site_url": get_site_url(self.using),
                "gmt_offset": gmt_offset,
                "context": "edit",
            },
        )
        return serializer.data


__all__ = ["PostUpdateService"]
