"""End-to-end tests for the post update endpoint."""

from __future__ import annotations

from unittest import mock

from django.db import DatabaseError
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from core.fields import ZERO_DATE
from options.models import WpOption
from options.services import get_sticky_posts
from posts.meta import get_post_meta
from posts.models import WpPost, WpTermTaxonomy
from posts.serializers import PostSerializer
from posts.terms import CATEGORY_TAXONOMY, get_object_term_ids
from tests.utils import auth_client, create_post, create_user, seed_site, set_sticky

SITE_URL = "https://example.test"

RESPONSE_FIELDS = {
    "id", "date", "date_gmt", "guid", "modified", "modified_gmt", "slug", "status", "type", "link",
    "title", "content", "excerpt", "author", "featured_media", "comment_status", "ping_status",
    "sticky", "template", "format", "meta", "categories", "tags",
    "password", "permalink_template", "generated_slug",
}


def post_url(post_id) -> str:
    return f"/api/sites/main/posts/{post_id}"


class PostUpdateTestCase(TestCase):
    """Seed a site with one account per role and a handful of posts."""

    @classmethod
    def setUpTestData(cls):
        cls.terms = seed_site(gmt_offset=2, site_url=SITE_URL)

        cls.admin = create_user("admin", "administrator")
        cls.editor = create_user("editor", "editor")
        cls.author = create_user("author", "author")
        cls.contributor = create_user("contributor", "contributor")
        cls.subscriber = create_user("subscriber", "subscriber")

        cls.draft = create_post(
            cls.contributor,
            "Contributor draft",
            post_name="contributor-draft",
            post_content="Original content",
            post_excerpt="Original excerpt",
        )
        cls.author_draft = create_post(cls.author, "Author draft", post_name="author-draft")
        cls.published = create_post(
            cls.editor,
            "Launch",
            post_status="publish",
            post_name="launch",
            post_content="<!-- wp:paragraph --><p>Hi</p><!-- /wp:paragraph -->",
        )
        cls.attachment = create_post(cls.admin, "Image", post_type="attachment", post_status="inherit")
        cls.page = create_post(cls.admin, "About", post_type="page", post_status="publish")

    def patch(self, login: str, post_id, payload, method: str = "patch"):
        client = auth_client(login)
        return getattr(client, method)(post_url(post_id), payload, format="json")

    def reload(self, post: WpPost) -> WpPost:
        return WpPost.objects.get(id=post.id)

    def assertError(self, response, status_code: int, code: str):
        self.assertEqual(response.status_code, status_code, response.data)
        self.assertEqual(response.data["code"], code)
        self.assertEqual(response.data["data"]["status"], status_code)


class PartialUpdateTests(PostUpdateTestCase):
    def test_title_only_changes_title_and_modified(self):
        before = self.reload(self.draft)

        response = self.patch("contributor", self.draft.id, {"title": "Hello"})

        self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(response.data["title"], {"raw": "Hello", "rendered": "Hello"})

        after = self.reload(self.draft)
        self.assertEqual(after.post_title, "Hello")
        self.assertNotEqual(after.post_modified, before.post_modified)
        self.assertNotEqual(after.post_modified_gmt, before.post_modified_gmt)
        for column in ("post_content", "post_excerpt", "post_status", "post_name", "post_date", "post_author"):
            self.assertEqual(getattr(after, column), getattr(before, column), column)

    def test_raw_object_form_and_all_methods(self):
        for method, title in (("post", "Via POST"), ("put", "Via PUT"), ("patch", "Via PATCH")):
            with self.subTest(method=method):
                response = self.patch("contributor", self.draft.id, {"title": {"raw": title}}, method)
                self.assertEqual(response.status_code, 200, response.data)
                self.assertEqual(self.reload(self.draft).post_title, title)

    def test_response_shape_in_edit_context(self):
        response = self.patch("editor", self.published.id, {"excerpt": "Short"})

        self.assertEqual(response.status_code, 200, response.data)
        data = response.data
        self.assertEqual(set(data), RESPONSE_FIELDS)
        self.assertEqual(data["id"], self.published.id)
        self.assertEqual(data["type"], "post")
        self.assertEqual(data["status"], "publish")
        self.assertEqual(data["link"], f"{SITE_URL}/2024/01/15/launch/")
        self.assertEqual(data["permalink_template"], f"{SITE_URL}/2024/01/15/%postname%/")
        self.assertEqual(data["generated_slug"], "launch")
        self.assertEqual(data["content"]["block_version"], 1)
        self.assertFalse(data["content"]["protected"])
        self.assertEqual(data["excerpt"]["rendered"], "Short")
        self.assertEqual(data["format"], "standard")
        self.assertEqual(data["featured_media"], 0)
        self.assertEqual(data["template"], "")
        self.assertFalse(data["sticky"])
        self.assertEqual(data["date"], "2024-01-15T10:30:00")

    def test_response_matches_fresh_read(self):
        response = self.patch("editor", self.published.id, {"title": "Relaunch", "tags": [self.terms["release"].term_id]})

        fresh = PostSerializer(
            self.reload(self.published),
            context={"using": "default", "site_url": SITE_URL, "gmt_offset": 2, "context": "edit"},
        ).data
        self.assertEqual(response.data, fresh)

    def test_draft_link_uses_query_fallback(self):
        response = self.patch("contributor", self.draft.id, {"content": "<p>No blocks</p>"})

        self.assertEqual(response.data["link"], f"{SITE_URL}/?p={self.draft.id}")
        self.assertEqual(response.data["content"]["block_version"], 0)

    def test_password_hides_rendered_content(self):
        response = self.patch("contributor", self.draft.id, {"password": "hunter2"})

        self.assertEqual(response.status_code, 200, response.data)
        self.assertTrue(response.data["content"]["protected"])
        self.assertEqual(response.data["content"]["rendered"], "")
        self.assertEqual(response.data["content"]["raw"], "Original content")
        self.assertEqual(response.data["excerpt"]["rendered"], "")
        self.assertEqual(response.data["password"], "hunter2")

    def test_menu_order_and_discussion_settings(self):
        response = self.patch(
            "contributor", self.draft.id, {"menu_order": 3, "comment_status": "closed", "ping_status": "closed"}
        )

        self.assertEqual(response.status_code, 200, response.data)
        after = self.reload(self.draft)
        self.assertEqual((after.menu_order, after.comment_status, after.ping_status), (3, "closed", "closed"))


class AuthorizationTests(PostUpdateTestCase):
    def test_anonymous_request_is_401(self):
        response = APIClient().patch(post_url(self.draft.id), {"title": "x"}, format="json")

        self.assertError(response, 401, "rest_not_logged_in")
        self.assertEqual(response.data["message"], "You are not currently logged in.")

    def test_wrong_application_password_is_401(self):
        client = auth_client("contributor", "wrong password")
        response = client.patch(post_url(self.draft.id), {"title": "x"}, format="json")

        self.assertError(response, 401, "rest_not_logged_in")

    def test_missing_edit_capability_is_403(self):
        response = self.patch("contributor", self.published.id, {"title": "x"})

        self.assertError(response, 403, "rest_cannot_edit")
        self.assertEqual(self.reload(self.published).post_title, "Launch")

    def test_subscriber_cannot_edit_own_post(self):
        own = create_post(self.subscriber, "Mine")
        self.assertError(self.patch("subscriber", own.id, {"title": "x"}), 403, "rest_cannot_edit")

    def test_publish_without_capability_is_403(self):
        response = self.patch("contributor", self.draft.id, {"status": "publish"})

        self.assertError(response, 403, "rest_cannot_publish")
        self.assertEqual(self.reload(self.draft).post_status, "draft")

    def test_author_can_publish_own_draft(self):
        response = self.patch("author", self.author_draft.id, {"status": "publish"})

        self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(response.data["status"], "publish")

    def test_reassigning_author_requires_edit_others(self):
        response = self.patch("author", self.author_draft.id, {"author": self.editor.id})
        self.assertError(response, 403, "rest_cannot_edit_others")

        response = self.patch("editor", self.author_draft.id, {"author": self.editor.id})
        self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(response.data["author"], self.editor.id)

    def test_contributor_cannot_make_sticky(self):
        response = self.patch("contributor", self.draft.id, {"sticky": True})
        self.assertError(response, 403, "rest_cannot_assign_sticky")


class ValidationTests(PostUpdateTestCase):
    def test_invalid_post_ids_are_404(self):
        for post_id in ("abc", "0", "-3", "\u00b2", "99999", str(self.page.id), str(self.attachment.id)):
            with self.subTest(post_id=post_id):
                response = self.patch("admin", post_id, {"title": "x"})
                self.assertError(response, 404, "rest_post_invalid_id")
                self.assertEqual(response.data["message"], "Invalid post ID.")

    def test_invalid_json_is_400(self):
        client = auth_client("contributor")
        response = client.generic("PATCH", post_url(self.draft.id), "{not json", content_type="application/json")

        self.assertError(response, 400, "rest_invalid_json")

    def test_empty_body_is_400(self):
        before = self.reload(self.draft)
        client = auth_client("contributor")

        for content_type in ("application/json", "application/octet-stream"):
            with self.subTest(content_type=content_type):
                response = client.generic("PATCH", post_url(self.draft.id), "", content_type=content_type)
                self.assertError(response, 400, "rest_invalid_json")

        self.assertEqual(self.reload(self.draft).post_modified, before.post_modified)

    def test_body_is_json_whatever_the_content_type(self):
        client = auth_client("contributor")

        response = client.generic(
            "PATCH", post_url(self.draft.id), '{"title": "Plain"}', content_type="text/plain"
        )
        self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(self.reload(self.draft).post_title, "Plain")

        response = client.generic("PATCH", post_url(self.draft.id), "title=Form", content_type="text/plain")
        self.assertError(response, 400, "rest_invalid_json")

    def test_unknown_key_is_rejected(self):
        response = self.patch("contributor", self.draft.id, {"title": "x", "flavour": "vanilla"})

        self.assertError(response, 400, "rest_invalid_param")
        self.assertEqual(response.data["message"], "Invalid parameter: flavour - Unrecognized key.")
        self.assertEqual(response.data["data"]["params"], {"flavour": "Unrecognized key."})
        self.assertEqual(self.reload(self.draft).post_title, "Contributor draft")

    def test_schema_errors_name_the_field(self):
        cases = [
            ({"status": "bogus-value"}, "status"),
            ({"author": 0}, "author"),
            ({"featured_media": -1}, "featured_media"),
            ({"categories": [1, "x"]}, "categories.1"),
            ({"comment_status": "maybe"}, "comment_status"),
            ({"title": {"rendered": "no raw"}}, "title"),
            ({"date": "yesterday"}, "date"),
            ({"sticky": "yes"}, "sticky"),
            ({"sticky": 1}, "sticky"),
            ({"author": "2"}, "author"),
            ({"author": True}, "author"),
            ({"featured_media": False}, "featured_media"),
            ({"parent": "0"}, "parent"),
            ({"menu_order": "4"}, "menu_order"),
            ({"menu_order": 1.5}, "menu_order"),
            ({"tags": ["3"]}, "tags.0"),
            ({"password": 123}, "password"),
            ({"slug": 5}, "slug"),
            ({"template": []}, "template"),
            ({"date": 20240101}, "date"),
            ({"date_gmt": True}, "date_gmt"),
            ({"date_gmt": "9999-12-31T23:30:00"}, "date_gmt"),
            ({"date": "0001-01-01T00:30:00"}, "date"),
        ]
        for payload, path in cases:
            with self.subTest(payload=payload):
                response = self.patch("contributor", self.draft.id, payload)
                self.assertError(response, 400, "rest_invalid_param")
                self.assertIn(path, response.data["data"]["params"])
                self.assertTrue(response.data["message"].startswith(f"Invalid parameter: {path} - "))

    def test_non_object_body(self):
        response = self.patch("contributor", self.draft.id, ["title"])

        self.assertError(response, 400, "rest_invalid_param")
        self.assertIn("body", response.data["data"]["params"])

    def test_validation_runs_before_authentication(self):
        response = APIClient().patch(post_url(self.draft.id), {"nope": 1}, format="json")
        self.assertError(response, 400, "rest_invalid_param")

    def test_unknown_author_is_400(self):
        response = self.patch("editor", self.author_draft.id, {"author": 99999})
        self.assertError(response, 400, "rest_invalid_author")

    def test_invalid_parent_is_400(self):
        response = self.patch("contributor", self.draft.id, {"parent": 99999})

        self.assertError(response, 400, "rest_post_invalid_id")
        self.assertEqual(response.data["message"], "Invalid post parent ID.")

    def test_parent_can_be_set_and_cleared(self):
        self.assertEqual(self.patch("contributor", self.draft.id, {"parent": self.page.id}).status_code, 200)
        self.assertEqual(self.reload(self.draft).post_parent, self.page.id)

        self.assertEqual(self.patch("contributor", self.draft.id, {"parent": 0}).status_code, 200)
        self.assertEqual(self.reload(self.draft).post_parent, 0)


class StatusTests(PostUpdateTestCase):
    def test_trash_is_stored_as_draft(self):
        response = self.patch("editor", self.published.id, {"status": "trash"})

        self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(self.reload(self.published).post_status, "draft")

    def test_unchanged_status_skips_capability_check(self):
        response = self.patch("editor", self.published.id, {"status": "publish"})
        self.assertEqual(response.status_code, 200, response.data)

        response = self.patch("contributor", self.draft.id, {"status": "draft"})
        self.assertEqual(response.status_code, 200, response.data)


class DateTests(PostUpdateTestCase):
    def test_null_date_resets_both_columns(self):
        response = self.patch("contributor", self.draft.id, {"date": None})

        self.assertEqual(response.status_code, 200, response.data)
        after = self.reload(self.draft)
        self.assertEqual((after.post_date, after.post_date_gmt), (ZERO_DATE, ZERO_DATE))
        self.assertIsNone(response.data["date"])
        self.assertIsNone(response.data["date_gmt"])

    def test_local_date_uses_site_offset(self):
        response = self.patch("contributor", self.draft.id, {"date": "2024-02-01T12:00:00"})

        after = self.reload(self.draft)
        self.assertEqual((after.post_date, after.post_date_gmt), ("2024-02-01 12:00:00", "2024-02-01 10:00:00"))
        self.assertEqual(response.data["date"], "2024-02-01T12:00:00")
        self.assertEqual(response.data["date_gmt"], "2024-02-01T10:00:00")

    def test_gmt_date_derives_local(self):
        self.patch("contributor", self.draft.id, {"date_gmt": "2024-02-01T12:00:00"})

        after = self.reload(self.draft)
        self.assertEqual((after.post_date, after.post_date_gmt), ("2024-02-01 14:00:00", "2024-02-01 12:00:00"))

    def test_date_wins_over_date_gmt(self):
        self.patch("contributor", self.draft.id, {"date": "2024-03-01T08:00:00", "date_gmt": "2030-01-01T00:00:00"})
        self.assertEqual(self.reload(self.draft).post_date, "2024-03-01 08:00:00")

    def test_out_of_range_date_for_site_offset_is_400(self):
        WpOption.objects.filter(option_name="gmt_offset").update(option_value="20")

        response = self.patch("contributor", self.draft.id, {"date_gmt": "9999-12-31T05:00:00"})

        self.assertError(response, 400, "rest_invalid_param")
        self.assertEqual(response.data["data"]["params"], {"date_gmt": "Invalid date."})
        self.assertEqual(self.reload(self.draft).post_date, "2024-01-15 10:30:00")

    def test_zero_gmt_is_computed_from_local(self):
        WpPost.objects.filter(id=self.draft.id).update(post_date_gmt=ZERO_DATE)

        response = self.patch("contributor", self.draft.id, {"title": "x"})
        self.assertEqual(response.data["date_gmt"], "2024-01-15T08:30:00")


class SlugTests(PostUpdateTestCase):
    def test_colliding_slugs_get_suffixes(self):
        second = create_post(self.contributor, "Second")
        third = create_post(self.contributor, "Third")

        self.assertEqual(self.patch("contributor", second.id, {"slug": "launch"}).data["slug"], "launch-2")
        self.assertEqual(self.patch("contributor", third.id, {"slug": "launch"}).data["slug"], "launch-3")

    def test_slug_is_sanitized(self):
        response = self.patch("contributor", self.draft.id, {"slug": "Ünïcode <em>Title</em>!"})
        self.assertEqual(response.data["slug"], "unicode-title")

    def test_keeping_own_slug(self):
        response = self.patch("editor", self.published.id, {"slug": "launch"})
        self.assertEqual(response.data["slug"], "launch")

    def test_published_posts_are_made_unique_too(self):
        response = self.patch("editor", self.published.id, {"slug": "contributor-draft"})
        self.assertEqual(response.data["slug"], "contributor-draft-2")


class StickyAndPasswordTests(PostUpdateTestCase):
    def test_sticky_is_idempotent(self):
        for _ in range(2):
            response = self.patch("author", self.author_draft.id, {"sticky": True})
            self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(get_sticky_posts("default"), [self.author_draft.id])
        self.assertTrue(response.data["sticky"])

        for _ in range(2):
            response = self.patch("author", self.author_draft.id, {"sticky": False})
            self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(get_sticky_posts("default"), [])

    def test_sticky_with_new_password(self):
        for payload in ({"sticky": True, "password": "pw"}, {"password": "pw", "sticky": True}):
            with self.subTest(payload=payload):
                response = self.patch("author", self.author_draft.id, payload)
                self.assertError(response, 400, "rest_invalid_field")
                self.assertEqual(response.data["message"], "A post can not be sticky and have a password.")

    def test_password_on_sticky_post(self):
        set_sticky([self.author_draft.id])

        response = self.patch("author", self.author_draft.id, {"password": "pw"})
        self.assertError(response, 400, "rest_invalid_field")
        self.assertEqual(response.data["message"], "A sticky post can not be password protected.")

    def test_sticky_on_password_protected_post(self):
        WpPost.objects.filter(id=self.author_draft.id).update(post_password="secret")

        response = self.patch("author", self.author_draft.id, {"sticky": True})
        self.assertError(response, 400, "rest_invalid_field")
        self.assertEqual(response.data["message"], "A password protected post can not be set to sticky.")

    def test_clearing_password_on_sticky_post_is_allowed(self):
        set_sticky([self.author_draft.id])
        response = self.patch("author", self.author_draft.id, {"password": ""})
        self.assertEqual(response.status_code, 200, response.data)


class SideEffectTests(PostUpdateTestCase):
    def test_invalid_featured_media_rolls_back(self):
        response = self.patch("contributor", self.draft.id, {"title": "Changed", "featured_media": 999})

        self.assertError(response, 400, "rest_invalid_featured_media")
        self.assertEqual(self.reload(self.draft).post_title, "Contributor draft")
        self.assertIsNone(get_post_meta("default", self.draft.id, "_thumbnail_id"))

    def test_featured_media_set_and_removed(self):
        response = self.patch("contributor", self.draft.id, {"featured_media": self.attachment.id})
        self.assertEqual(response.data["featured_media"], self.attachment.id)
        self.assertEqual(get_post_meta("default", self.draft.id, "_thumbnail_id"), str(self.attachment.id))
        self.assertNotIn("_thumbnail_id", response.data["meta"])

        response = self.patch("contributor", self.draft.id, {"featured_media": 0})
        self.assertEqual(response.data["featured_media"], 0)
        self.assertIsNone(get_post_meta("default", self.draft.id, "_thumbnail_id"))

    def test_terms_replace_and_skip_unknown_ids(self):
        news = self.terms["news"].term_id
        uncategorized = self.terms["uncategorized"].term_id
        featured = self.terms["featured"].term_id
        release = self.terms["release"].term_id

        response = self.patch(
            "contributor",
            self.draft.id,
            {"categories": [news, 424242, uncategorized], "tags": [release, featured]},
        )

        self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(response.data["categories"], sorted([news, uncategorized]))
        self.assertEqual(response.data["tags"], sorted([featured, release]))

        response = self.patch("contributor", self.draft.id, {"categories": [news]})
        self.assertEqual(response.data["categories"], [news])
        self.assertEqual(response.data["tags"], sorted([featured, release]))
        self.assertEqual(
            WpTermTaxonomy.objects.get(term_id=uncategorized, taxonomy=CATEGORY_TAXONOMY).count, 0
        )

    def test_format_assignment(self):
        response = self.patch("contributor", self.draft.id, {"format": "aside"})
        self.assertEqual(response.data["format"], "aside")

        response = self.patch("contributor", self.draft.id, {"format": "standard"})
        self.assertEqual(response.data["format"], "standard")

    def test_template_is_stored_in_meta(self):
        response = self.patch("contributor", self.draft.id, {"template": "wide.php"})

        self.assertEqual(response.data["template"], "wide.php")
        self.assertEqual(get_post_meta("default", self.draft.id, "_wp_page_template"), "wide.php")

    def test_meta_upsert(self):
        response = self.patch(
            "contributor",
            self.draft.id,
            {"meta": {"color": "red", "count": 3, "flags": {"a": True}, "skipped": None}},
        )

        self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(response.data["meta"], {"color": "red", "count": "3", "flags": '{"a": true}'})

    def test_failed_side_effect_undoes_earlier_ones(self):
        news = self.terms["news"].term_id
        with mock.patch(
            "posts.services.PostUpdateService.set_meta", side_effect=DatabaseError("disk full")
        ):
            response = self.patch(
                "contributor", self.draft.id, {"title": "Changed", "categories": [news], "meta": {"a": "b"}}
            )

        self.assertError(response, 500, "rest_internal_error")
        self.assertEqual(self.reload(self.draft).post_title, "Contributor draft")
        self.assertEqual(get_object_term_ids("default", self.draft.id, CATEGORY_TAXONOMY), [])


class ErrorHandlingTests(PostUpdateTestCase):
    @override_settings(DEBUG=False, DEBUG_ERRORS=False)
    def test_unexpected_failure_hides_details(self):
        with mock.patch("posts.views.PostUpdateService.update", side_effect=RuntimeError("secret detail")):
            response = self.patch("contributor", self.draft.id, {"title": "x"})

        self.assertError(response, 500, "rest_internal_error")
        self.assertEqual(response.data["message"], "An unexpected error occurred.")

    @override_settings(DEBUG_ERRORS=True)
    def test_debug_errors_expose_message(self):
        with mock.patch("posts.views.PostUpdateService.update", side_effect=DatabaseError("lost connection")):
            response = self.patch("contributor", self.draft.id, {"title": "x"})

        self.assertError(response, 500, "rest_internal_error")
        self.assertEqual(response.data["message"], "lost connection")

    def test_zero_rows_updated_is_500(self):
        with mock.patch("django.db.models.query.QuerySet.update", return_value=0):
            response = self.patch("contributor", self.draft.id, {"title": "x"})

        self.assertError(response, 500, "db_update_error")
        self.assertEqual(response.data["message"], "Could not update post in the database.")


class SchemaTests(TestCase):
    def test_openapi_schema_lists_update_endpoint(self):
        response = APIClient().get("/api/schema/", {"format": "json"})

        self.assertEqual(response.status_code, 200)
        self.assertIn("/api/sites/{site}/posts/{post_id}", response.json()["paths"])
