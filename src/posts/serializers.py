"""Request validation and response shaping for the post update endpoint."""

import re

from rest_framework import serializers

from options.services import is_sticky
from .dates import MAX_GMT_OFFSET, mysql_to_rfc3339, prepare_date_gmt, rest_get_date_with_gmt
from .meta import (
    PAGE_TEMPLATE_META_KEY,
    THUMBNAIL_META_KEY,
    get_all_post_meta,
    get_post_meta,
    is_protected_meta,
)
from .models import WpPost
from .status import POST_STATUSES
from .terms import CATEGORY_TAXONOMY, TAG_TAXONOMY, get_object_term_ids, get_post_format

POST_FORMATS = ("standard", "aside", "chat", "gallery", "link", "image", "quote", "status", "video", "audio")
OPEN_CLOSED = ("open", "closed")

_BLOCK_DELIMITER_RE = re.compile(r"<!--\s+wp:")


class RawTextField(serializers.Field):
    """Accept either a bare string or ``{"raw": "..."}`` and yield the string."""

    default_error_messages = {
        "invalid": 'Expected a string or an object with a string "raw" property.',
    }

    def to_internal_value(self, data):
        if isinstance(data, str):
            return data
        if isinstance(data, dict) and isinstance(data.get("raw"), str):
            return data["raw"]
        self.fail("invalid")

    def to_representation(self, value):
        return value


class StrictCharField(serializers.CharField):
    """A CharField that rejects non-string JSON values instead of coercing them."""

    def to_internal_value(self, data):
        if not isinstance(data, str):
            self.fail("invalid")
        return super().to_internal_value(data)


class StrictIntegerField(serializers.IntegerField):
    """An IntegerField that only takes JSON numbers with no fractional part."""

    def to_internal_value(self, data):
        if isinstance(data, bool) or not isinstance(data, (int, float)):
            self.fail("invalid")
        if isinstance(data, float) and not data.is_integer():
            self.fail("invalid")
        return super().to_internal_value(data)


class StrictBooleanField(serializers.BooleanField):
    """A BooleanField that only takes JSON ``true`` and ``false``."""

    def to_internal_value(self, data):
        if not isinstance(data, bool):
            self.fail("invalid", input=data)
        return data


class PostUpdateSerializer(serializers.Serializer):
    """Validate an update payload; every field is optional and unknown keys are rejected."""

    title = RawTextField(required=False)
    content = RawTextField(required=False)
    excerpt = RawTextField(required=False)
    status = serializers.ChoiceField(choices=POST_STATUSES, required=False)
    date = StrictCharField(required=False, allow_null=True, trim_whitespace=False)
    date_gmt = StrictCharField(required=False, allow_null=True, trim_whitespace=False)
    slug = StrictCharField(required=False, allow_blank=True, trim_whitespace=False)
    author = StrictIntegerField(required=False, min_value=1)
    password = StrictCharField(required=False, allow_blank=True, trim_whitespace=False)
    featured_media = StrictIntegerField(required=False, min_value=0)
    sticky = StrictBooleanField(required=False)
    template = StrictCharField(required=False, allow_blank=True, trim_whitespace=False)
    format = serializers.ChoiceField(choices=POST_FORMATS, required=False)
    comment_status = serializers.ChoiceField(choices=OPEN_CLOSED, required=False)
    ping_status = serializers.ChoiceField(choices=OPEN_CLOSED, required=False)
    parent = StrictIntegerField(required=False, min_value=0)
    menu_order = StrictIntegerField(required=False)
    categories = serializers.ListField(child=StrictIntegerField(min_value=1), required=False)
    tags = serializers.ListField(child=StrictIntegerField(min_value=1), required=False)
    meta = serializers.DictField(required=False)

    @staticmethod
    def _validate_date(value, is_utc):
        if value is None:
            return value
        # The site offset is not known yet, so the value must convert at either end of its range.
        for offset in (-MAX_GMT_OFFSET, MAX_GMT_OFFSET):
            if rest_get_date_with_gmt(value, is_utc, offset) is None:
                raise serializers.ValidationError("Invalid date.")
        return value

    def validate_date(self, value):
        return self._validate_date(value, is_utc=False)

    def validate_date_gmt(self, value):
        return self._validate_date(value, is_utc=True)

    def validate(self, attrs):
        """Reject keys the schema does not know instead of silently dropping them."""
        unknown = [key for key in getattr(self, "initial_data", {}) if key not in self.fields]
        if unknown:
            raise serializers.ValidationError({key: "Unrecognized key." for key in unknown})
        return attrs


def _first_error(errors, path=()):
    """Return ``(dotted path, message)`` of the first error in a DRF errors structure."""
    if isinstance(errors, dict):
        key, value = next(iter(errors.items()))
        if key == "non_field_errors":
            key = "body"
        return _first_error(value, path + (str(key),))
    if isinstance(errors, list) and errors:
        head = errors[0]
        if isinstance(head, (dict, list)):
            return _first_error(head, path)
        return ".".join(path), str(head)
    return ".".join(path), str(errors)


def first_validation_error(errors) -> tuple[str, str]:
    return _first_error(errors)


class PostSerializer(serializers.Serializer):
    """Build the WordPress REST representation of a post.

    Expects ``using``, ``site_url``, ``gmt_offset`` and ``context`` in the
    serializer context. ``password``, ``permalink_template`` and
    ``generated_slug`` are only included in the ``edit`` context.
    """

    EDIT_ONLY_FIELDS = ("password", "permalink_template", "generated_slug")

    id = serializers.IntegerField()
    date = serializers.SerializerMethodField()
    date_gmt = serializers.SerializerMethodField()
    guid = serializers.SerializerMethodField()
    modified = serializers.SerializerMethodField()
    modified_gmt = serializers.SerializerMethodField()
    slug = StrictCharField(source="post_name")
    status = serializers.CharField(source="post_status")
    type = serializers.CharField(source="post_type")
    link = serializers.SerializerMethodField()
    title = serializers.SerializerMethodField()
    content = serializers.SerializerMethodField()
    excerpt = serializers.SerializerMethodField()
    author = StrictIntegerField(source="post_author")
    featured_media = serializers.SerializerMethodField()
    comment_status = serializers.CharField()
    ping_status = serializers.CharField()
    sticky = serializers.SerializerMethodField()
    template = serializers.SerializerMethodField()
    format = serializers.SerializerMethodField()
    meta = serializers.SerializerMethodField()
    categories = serializers.SerializerMethodField()
    tags = serializers.SerializerMethodField()
    password = StrictCharField(source="post_password")
    permalink_template = serializers.SerializerMethodField()
    generated_slug = serializers.CharField(source="post_name")

    @property
    def using(self) -> str:
        return self.context["using"]

    @property
    def gmt_offset(self) -> float:
        return self.context.get("gmt_offset", 0)

    @property
    def base_url(self) -> str:
        return self.context["site_url"].rstrip("/")

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if self.context.get("context", "view") != "edit":
            for field_name in self.EDIT_ONLY_FIELDS:
                data.pop(field_name, None)
        return data

    def get_date(self, post: WpPost):
        return mysql_to_rfc3339(post.post_date)

    def get_date_gmt(self, post: WpPost):
        return prepare_date_gmt(post.post_date_gmt, post.post_date, self.gmt_offset)

    def get_guid(self, post: WpPost):
        return {"rendered": post.guid, "raw": post.guid}

    def get_modified(self, post: WpPost):
        return mysql_to_rfc3339(post.post_modified) or ""

    def get_modified_gmt(self, post: WpPost):
        return prepare_date_gmt(post.post_modified_gmt, post.post_modified, self.gmt_offset) or ""

    def _date_path(self, post: WpPost) -> str:
        return f"{post.post_date[0:4]}/{post.post_date[5:7]}/{post.post_date[8:10]}"

    def get_link(self, post: WpPost):
        if post.post_status == "publish" and post.post_name:
            return f"{self.base_url}/{self._date_path(post)}/{post.post_name}/"
        return f"{self.base_url}/?p={post.id}"

    def get_permalink_template(self, post: WpPost):
        return f"{self.base_url}/{self._date_path(post)}/%postname%/"

    def get_title(self, post: WpPost):
        return {"raw": post.post_title, "rendered": post.post_title}

    def get_content(self, post: WpPost):
        protected = bool(post.post_password)
        return {
            "raw": post.post_content,
            "rendered": "" if protected else post.post_content,
            "protected": protected,
            "block_version": 1 if _BLOCK_DELIMITER_RE.search(post.post_content or "") else 0,
        }

    def get_excerpt(self, post: WpPost):
        protected = bool(post.post_password)
        return {
            "raw": post.post_excerpt,
            "rendered": "" if protected else post.post_excerpt,
            "protected": protected,
        }

    def get_featured_media(self, post: WpPost):
        thumbnail_id = get_post_meta(self.using, post.id, THUMBNAIL_META_KEY)
        try:
            return int(thumbnail_id) if thumbnail_id else 0
        except ValueError:
            return 0

    def get_sticky(self, post: WpPost):
        return is_sticky(self.using, post.id)

    def get_template(self, post: WpPost):
        return get_post_meta(self.using, post.id, PAGE_TEMPLATE_META_KEY) or ""

    def get_format(self, post: WpPost):
        return get_post_format(self.using, post.id)

    def get_meta(self, post: WpPost):
        return {
            key: value
            for key, value in get_all_post_meta(self.using, post.id).items()
            if not is_protected_meta(key)
        }

    def get_categories(self, post: WpPost):
        return get_object_term_ids(self.using, post.id, CATEGORY_TAXONOMY)

    def get_tags(self, post: WpPost):
        return get_object_term_ids(self.using, post.id, TAG_TAXONOMY)


__all__ = [
    "POST_FORMATS",
    "RawTextField",
    "PostUpdateSerializer",
    "PostSerializer",
    "first_validation_error",
]
