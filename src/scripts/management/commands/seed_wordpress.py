"""Seed a WordPress database with roles, options, users, terms and posts."""

import time
import uuid

from django.conf import settings
from django.core.management.base import BaseCommand

from authentication.managers import WpUserManager
from authentication.models import WpUser, WpUserMeta
from authentication.services import APPLICATION_PASSWORDS_META_KEY
from core.serialization import php_dumps, php_loads
from options.models import WpOption
from options.services import STICKY_POSTS_OPTION, update_option
from posts.models import WpPost, WpPostMeta, WpTerm, WpTermRelationship, WpTermTaxonomy
from posts.terms import (
    CATEGORY_TAXONOMY,
    FORMAT_TAXONOMY,
    FORMAT_TERM_PREFIX,
    TAG_TAXONOMY,
    set_object_terms,
)

SEED_USERS = {
    "admin": ("administrator", "admin@example.com"),
    "editor": ("editor", "editor@example.com"),
    "author": ("author", "author@example.com"),
    "contributor": ("contributor", "contributor@example.com"),
    "subscriber": ("subscriber", "subscriber@example.com"),
}

_SUBSCRIBER_CAPS = ["read"]
_CONTRIBUTOR_CAPS = _SUBSCRIBER_CAPS + ["edit_posts", "delete_posts"]
_AUTHOR_CAPS = _CONTRIBUTOR_CAPS + [
    "edit_published_posts",
    "publish_posts",
    "delete_published_posts",
    "upload_files",
]
_EDITOR_CAPS = _AUTHOR_CAPS + [
    "edit_others_posts",
    "edit_private_posts",
    "read_private_posts",
    "delete_others_posts",
    "delete_private_posts",
    "manage_categories",
    "moderate_comments",
]
_ADMINISTRATOR_CAPS = _EDITOR_CAPS + ["manage_options", "edit_users", "list_users", "promote_users"]

ROLE_CAPABILITIES = {
    "administrator": ("Administrator", _ADMINISTRATOR_CAPS),
    "editor": ("Editor", _EDITOR_CAPS),
    "author": ("Author", _AUTHOR_CAPS),
    "contributor": ("Contributor", _CONTRIBUTOR_CAPS),
    "subscriber": ("Subscriber", _SUBSCRIBER_CAPS),
}

SEED_CATEGORIES = [("Uncategorized", "uncategorized"), ("News", "news")]
SEED_TAGS = [("Featured", "featured"), ("Release", "release")]
SEED_FORMATS = ["aside", "gallery", "link", "image", "quote", "status", "video", "audio", "chat"]


def build_role_definitions() -> dict:
    """Return the ``user_roles`` option value for the default WordPress roles."""
    return {
        role: {"name": name, "capabilities": {cap: True for cap in caps}}
        for role, (name, caps) in ROLE_CAPABILITIES.items()
    }


def create_seed_options(using: str = "default", site_url: str | None = None, gmt_offset: float = 0) -> None:
    """Create the site options the post API reads."""
    update_option(using, "siteurl", site_url or settings.WP_DEFAULT_SITE_URL)
    update_option(using, "gmt_offset", str(gmt_offset))
    update_option(using, f"{settings.WP_TABLE_PREFIX}user_roles", php_dumps(build_role_definitions()))
    update_option(using, STICKY_POSTS_OPTION, php_dumps([]))


def create_term(name: str, slug: str, taxonomy: str, using: str = "default") -> WpTerm:
    """Create a term in ``taxonomy`` unless one with this slug is already there."""
    existing = (
        WpTerm.objects.using(using)
        .filter(slug=slug, taxonomies__taxonomy=taxonomy)
        .first()
    )
    if existing is not None:
        return existing
    term = WpTerm.objects.using(using).create(name=name, slug=slug)
    WpTermTaxonomy.objects.using(using).create(term=term, taxonomy=taxonomy)
    return term


def create_seed_terms(using: str = "default") -> dict[str, WpTerm]:
    """Create sample categories, tags and every post format; return them by slug."""
    terms = {}
    for name, slug in SEED_CATEGORIES:
        terms[slug] = create_term(name, slug, CATEGORY_TAXONOMY, using)
    for name, slug in SEED_TAGS:
        terms[slug] = create_term(name, slug, TAG_TAXONOMY, using)
    for post_format in SEED_FORMATS:
        slug = f"{FORMAT_TERM_PREFIX}{post_format}"
        terms[slug] = create_term(post_format.title(), slug, FORMAT_TAXONOMY, using)
    return terms


def create_wp_user(
    login: str,
    app_password: str | None = None,
    roles: list[str] | tuple[str, ...] = (),
    using: str = "default",
    **extra,
) -> WpUser:
    """Create an account with role assignments and, optionally, one application password."""
    user = WpUser.objects.using(using).create(
        user_login=login,
        user_nicename=login,
        user_email=extra.pop("user_email", f"{login}@example.com"),
        display_name=extra.pop("display_name", login.title()),
        **extra,
    )
    WpUserMeta.objects.using(using).create(
        user_id=user.id,
        meta_key=f"{settings.WP_TABLE_PREFIX}capabilities",
        meta_value=php_dumps({role: True for role in roles}),
    )
    if app_password is not None:
        add_application_password(user, app_password, using=using)
    return user


def add_application_password(user: WpUser, app_password: str, name: str = "seed", using: str = "default") -> None:
    """Store a bcrypt-hashed application password in the user's usermeta."""
    entry = {
        "uuid": str(uuid.uuid4()),
        "app_id": "",
        "name": name,
        "password": WpUserManager.hash_password(
            app_password.replace(" ", ""), rounds=settings.WP_APP_PASSWORD_ROUNDS
        ),
        "created": int(time.time()),
        "last_used": None,
        "last_ip": None,
    }
    meta = WpUserMeta.objects.using(using).filter(user_id=user.id, meta_key=APPLICATION_PASSWORDS_META_KEY).first()
    if meta is None:
        WpUserMeta.objects.using(using).create(
            user_id=user.id, meta_key=APPLICATION_PASSWORDS_META_KEY, meta_value=php_dumps([entry])
        )
        return
    entries = php_loads(meta.meta_value, default=[])
    if not isinstance(entries, list):
        entries = []
    entries.append(entry)
    meta.meta_value = php_dumps(entries)
    meta.save(using=using, update_fields=["meta_value"])


def create_post(author: WpUser, title: str, using: str = "default", **fields) -> WpPost:
    """Create a post row with sensible WordPress defaults."""
    fields.setdefault("post_date", "2024-01-15 10:30:00")
    fields.setdefault("post_date_gmt", fields["post_date"])
    fields.setdefault("post_modified", fields["post_date"])
    fields.setdefault("post_modified_gmt", fields["post_date_gmt"])
    fields.setdefault("post_status", "draft")
    fields.setdefault("post_type", "post")
    post = WpPost.objects.using(using).create(post_author=author.id, post_title=title, **fields)
    if not post.guid:
        post.guid = f"{settings.WP_DEFAULT_SITE_URL.rstrip('/')}/?p={post.id}"
        post.save(using=using, update_fields=["guid"])
    return post


class Command(BaseCommand):
    """Management command to seed a WordPress database for local use."""

    help = (
        "Seed WordPress role definitions, site options, demo users with application "
        "passwords, taxonomy terms and sample posts. Use --reset to clear the demo "
        "rows first."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--reset",
            action="store_true",
            help="Remove the demo users, their posts and the seeded terms before seeding.",
        )
        parser.add_argument(
            "--database",
            default=settings.WP_DATABASE_ALIAS,
            help="Database alias to seed (defaults to WP_DATABASE_ALIAS).",
        )
        parser.add_argument(
            "--app-password",
            default="abcd efgh ijkl mnop qrst uvwx",
            help="Application password given to every demo user.",
        )

    def handle(self, *args, **options):
        """Entrypoint for the management command."""
        using = options["database"]
        if options.get("reset"):
            self._reset_seeded_data(using)

        self.stdout.write("Seeding WordPress data...")
        create_seed_options(using)
        terms = create_seed_terms(using)

        users = {}
        for login, (role, email) in SEED_USERS.items():
            user = WpUser.objects.get_by_login(login, using=using)
            if user is None:
                user = create_wp_user(login, options["app_password"], [role], using=using, user_email=email)
            users[login] = user

        self._create_sample_posts(users, terms, using)
        self.stdout.write(self.style.SUCCESS("WordPress seed completed."))

    def _reset_seeded_data(self, using: str) -> None:
        """Remove the demo accounts, their posts and the seeded terms."""
        self.stdout.write("Resetting previously seeded WordPress data...")

        user_ids = list(
            WpUser.objects.using(using).filter(user_login__in=SEED_USERS).values_list("id", flat=True)
        )
        post_ids = list(
            WpPost.objects.using(using).filter(post_author__in=user_ids).values_list("id", flat=True)
        )
        WpTermRelationship.objects.using(using).filter(object_id__in=post_ids).delete()
        WpPostMeta.objects.using(using).filter(post_id__in=post_ids).delete()
        WpPost.objects.using(using).filter(id__in=post_ids).delete()
        WpUserMeta.objects.using(using).filter(user_id__in=user_ids).delete()
        WpUser.objects.using(using).filter(id__in=user_ids).delete()

        seeded_slugs = [slug for _, slug in SEED_CATEGORIES + SEED_TAGS]
        seeded_slugs += [f"{FORMAT_TERM_PREFIX}{post_format}" for post_format in SEED_FORMATS]
        term_ids = list(WpTerm.objects.using(using).filter(slug__in=seeded_slugs).values_list("term_id", flat=True))
        WpTermTaxonomy.objects.using(using).filter(term_id__in=term_ids).delete()
        WpTerm.objects.using(using).filter(term_id__in=term_ids).delete()
        WpOption.objects.using(using).filter(option_name=STICKY_POSTS_OPTION).delete()

        self.stdout.write(self.style.WARNING("Seeded WordPress data cleared."))

    @staticmethod
    def _create_sample_posts(users, terms, using: str) -> None:
        """Create a draft and a published post per author-capable demo user."""
        for login in ("admin", "editor", "author", "contributor"):
            author = users[login]
            if WpPost.objects.using(using).filter(post_author=author.id, post_type="post").exists():
                continue
            draft = create_post(
                author,
                f"{login.title()} draft",
                using=using,
                post_content="<!-- wp:paragraph --><p>Draft content.</p><!-- /wp:paragraph -->",
                post_name=f"{login}-draft",
                post_date_gmt="0000-00-00 00:00:00",
            )
            set_object_terms(using, draft.id, [terms["uncategorized"].term_id], CATEGORY_TAXONOMY)
            if login == "contributor":
                continue
            published = create_post(
                author,
                f"{login.title()} announcement",
                using=using,
                post_content="<p>Published content.</p>",
                post_status="publish",
                post_name=f"{login}-announcement",
            )
            set_object_terms(using, published.id, [terms["news"].term_id], CATEGORY_TAXONOMY)
            set_object_terms(using, published.id, [terms["featured"].term_id], TAG_TAXONOMY)
