"""WordPress post, post meta and taxonomy tables."""

from django.conf import settings
from django.db import models

from core.fields import WordPressDateTimeField


def _table(name: str) -> str:
    return f"{settings.WP_TABLE_PREFIX}{name}"


class WpPost(models.Model):
    """A row of ``posts``; only ``post_type == "post"`` is editable through the API."""

    id = models.BigAutoField(primary_key=True, db_column="ID")
    post_author = models.BigIntegerField(default=0, db_index=True)
    post_date = WordPressDateTimeField()
    post_date_gmt = WordPressDateTimeField()
    post_content = models.TextField(default="", blank=True)
    post_title = models.TextField(default="", blank=True)
    post_excerpt = models.TextField(default="", blank=True)
    post_status = models.CharField(max_length=20, default="publish")
    comment_status = models.CharField(max_length=20, default="open")
    ping_status = models.CharField(max_length=20, default="open")
    post_password = models.CharField(max_length=255, default="", blank=True)
    post_name = models.CharField(max_length=200, default="", blank=True, db_index=True)
    to_ping = models.TextField(default="", blank=True)
    pinged = models.TextField(default="", blank=True)
    post_modified = WordPressDateTimeField()
    post_modified_gmt = WordPressDateTimeField()
    post_content_filtered = models.TextField(default="", blank=True)
    post_parent = models.BigIntegerField(default=0, db_index=True)
    guid = models.CharField(max_length=255, default="", blank=True)
    menu_order = models.IntegerField(default=0)
    post_type = models.CharField(max_length=20, default="post")
    post_mime_type = models.CharField(max_length=100, default="", blank=True)
    comment_count = models.BigIntegerField(default=0)

    class Meta:
        managed = settings.WP_MANAGE_TABLES
        db_table = _table("posts")

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.post_title or f"{self.post_type} {self.pk}"


class WpPostMeta(models.Model):
    """Post metadata; a key may repeat for the same post."""

    meta_id = models.BigAutoField(primary_key=True)
    post_id = models.BigIntegerField(default=0, db_index=True)
    meta_key = models.CharField(max_length=255, null=True, blank=True, db_index=True)
    meta_value = models.TextField(null=True, blank=True)

    class Meta:
        managed = settings.WP_MANAGE_TABLES
        db_table = _table("postmeta")

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.post_id}:{self.meta_key}"


class WpTerm(models.Model):
    term_id = models.BigAutoField(primary_key=True)
    name = models.CharField(max_length=200, default="")
    slug = models.CharField(max_length=200, default="", db_index=True)
    term_group = models.BigIntegerField(default=0)

    class Meta:
        managed = settings.WP_MANAGE_TABLES
        db_table = _table("terms")

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.slug


class WpTermTaxonomy(models.Model):
    """A term's membership in one taxonomy, with its usage counter."""

    term_taxonomy_id = models.BigAutoField(primary_key=True)
    term = models.ForeignKey(
        WpTerm,
        on_delete=models.DO_NOTHING,
        db_column="term_id",
        db_constraint=False,
        related_name="taxonomies",
    )
    taxonomy = models.CharField(max_length=32, default="", db_index=True)
    description = models.TextField(default="", blank=True)
    parent = models.BigIntegerField(default=0)
    count = models.BigIntegerField(default=0)

    class Meta:
        managed = settings.WP_MANAGE_TABLES
        db_table = _table("term_taxonomy")

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.taxonomy}:{self.term_id}"


class WpTermRelationship(models.Model):
    """Links an object (post) to a term taxonomy row."""

    pk = models.CompositePrimaryKey("object_id", "term_taxonomy_id")
    object_id = models.BigIntegerField(default=0)
    term_taxonomy_id = models.BigIntegerField(default=0)
    term_order = models.IntegerField(default=0)

    class Meta:
        managed = settings.WP_MANAGE_TABLES
        db_table = _table("term_relationships")

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.object_id}->{self.term_taxonomy_id}"


__all__ = ["WpPost", "WpPostMeta", "WpTerm", "WpTermTaxonomy", "WpTermRelationship"]
