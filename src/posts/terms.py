"""Taxonomy term assignment for posts.

A post's terms in one taxonomy are always replaced as a whole, and each
term taxonomy row's ``count`` tracks how many objects use it.
"""

from django.db.models import F, Value
from django.db.models.functions import Greatest

from .models import WpTerm, WpTermRelationship, WpTermTaxonomy

CATEGORY_TAXONOMY = "category"
TAG_TAXONOMY = "post_tag"
FORMAT_TAXONOMY = "post_format"
FORMAT_TERM_PREFIX = "post-format-"


def get_object_terms(using: str, object_id: int, taxonomy: str) -> list[WpTerm]:
    """Return the terms assigned to an object in ``taxonomy``, ordered by term id."""
    tt_ids = WpTermRelationship.objects.using(using).filter(object_id=object_id).values("term_taxonomy_id")
    return list(
        WpTerm.objects.using(using)
        .filter(taxonomies__taxonomy=taxonomy, taxonomies__term_taxonomy_id__in=tt_ids)
        .order_by("term_id")
        .distinct()
    )


def get_object_term_ids(using: str, object_id: int, taxonomy: str) -> list[int]:
    return [term.term_id for term in get_object_terms(using, object_id, taxonomy)]


def set_object_terms(using: str, object_id: int, term_ids: list[int], taxonomy: str) -> None:
    """Replace the object's terms in ``taxonomy`` with ``term_ids``.

    Every current assignment is removed and its count decremented (never
    below zero), then each requested term is linked and counted. Ids with no
    row in this taxonomy are skipped without error; repeated ids are linked
    once.
    """
    current_tt_ids = list(
        WpTermTaxonomy.objects.using(using)
        .filter(
            taxonomy=taxonomy,
            term_taxonomy_id__in=WpTermRelationship.objects.using(using)
            .filter(object_id=object_id)
            .values("term_taxonomy_id"),
        )
        .values_list("term_taxonomy_id", flat=True)
    )

    if current_tt_ids:
        WpTermRelationship.objects.using(using).filter(
            object_id=object_id, term_taxonomy_id__in=current_tt_ids
        ).delete()
        WpTermTaxonomy.objects.using(using).filter(term_taxonomy_id__in=current_tt_ids).update(
            count=Greatest(F("count") - 1, Value(0))
        )

    for term_id in dict.fromkeys(term_ids):
        tt_id = (
            WpTermTaxonomy.objects.using(using)
            .filter(term_id=term_id, taxonomy=taxonomy)
            .values_list("term_taxonomy_id", flat=True)
            .first()
        )
        if tt_id is None:
            continue

        WpTermRelationship.objects.using(using).create(
            object_id=object_id, term_taxonomy_id=tt_id, term_order=0
        )
        WpTermTaxonomy.objects.using(using).filter(term_taxonomy_id=tt_id).update(count=F("count") + 1)


def term_exists(using: str, term_id: int, taxonomy: str) -> bool:
    return WpTermTaxonomy.objects.using(using).filter(term_id=term_id, taxonomy=taxonomy).exists()


def get_post_format_term_id(using: str, format_slug: str) -> int | None:
    """Return the term id of ``post-format-<format_slug>``, or None if it is not registered."""
    return (
        WpTerm.objects.using(using)
        .filter(slug=f"{FORMAT_TERM_PREFIX}{format_slug}", taxonomies__taxonomy=FORMAT_TAXONOMY)
        .values_list("term_id", flat=True)
        .first()
    )


def get_post_format(using: str, post_id: int) -> str:
    """Return the post's format name, ``"standard"`` when none is assigned."""
    terms = get_object_terms(using, post_id, FORMAT_TAXONOMY)
    if not terms:
        return "standard"
    slug = terms[0].slug
    if slug.startswith(FORMAT_TERM_PREFIX):
        return slug[len(FORMAT_TERM_PREFIX):]
    return slug


__all__ = [
    "CATEGORY_TAXONOMY",
    "TAG_TAXONOMY",
    "FORMAT_TAXONOMY",
    "FORMAT_TERM_PREFIX",
    "get_object_terms",
    "get_object_term_ids",
    "set_object_terms",
    "term_exists",
    "get_post_format_term_id",
    "get_post_format",
]
