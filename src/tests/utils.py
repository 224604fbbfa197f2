"""Shared helpers for tests (site seeding, accounts, authenticated clients)."""

from __future__ import annotations

import base64

from rest_framework.test import APIClient

from authentication.principal import Principal
from core.serialization import php_dumps
from options.services import STICKY_POSTS_OPTION, update_option
from scripts.management.commands.seed_wordpress import (
    create_post,
    create_seed_options,
    create_seed_terms,
    create_wp_user,
)

APP_PASSWORD = "abcd EFGH ijkl MNOP qrst UVWX"


def seed_site(gmt_offset: float = 0, site_url: str = "https://example.test"):
    """Create site options, role definitions and taxonomy terms for tests.

    Delegates to the same helpers used by the ``seed_wordpress`` management
    command to keep WordPress setup logic in a single place.
    """

    create_seed_options(site_url=site_url, gmt_offset=gmt_offset)
    return create_seed_terms()


def create_user(login: str, *roles: str, password: str | None = APP_PASSWORD, **extra):
    """Create an account with the given roles and an application password."""

    return create_wp_user(login, password, list(roles), **extra)


def make_principal(user_id: int = 1, *caps: str, login: str = "tester") -> Principal:
    """Build a Principal directly, bypassing the database."""

    return Principal(id=user_id, login=login, email=f"{login}@example.com", allcaps=frozenset(caps))


def basic_auth_header(login: str, password: str = APP_PASSWORD) -> str:
    token = base64.b64encode(f"{login}:{password}".encode()).decode()
    return f"Basic {token}"


def auth_client(login: str, password: str = APP_PASSWORD) -> APIClient:
    """Return an APIClient sending application password credentials."""

    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=basic_auth_header(login, password))
    return client


def set_sticky(post_ids: list[int]) -> None:
    """Overwrite the sticky registry."""

    update_option("default", STICKY_POSTS_OPTION, php_dumps(post_ids))


__all__ = [
    "APP_PASSWORD",
    "seed_site",
    "create_user",
    "create_post",
    "make_principal",
    "basic_auth_header",
    "auth_client",
    "set_sticky",
]
