"""Application password authentication over HTTP Basic auth.

WordPress application passwords are sent as ``Basic base64(login:password)``.
The password is usually displayed in space-separated groups, so all
whitespace is removed before comparison. The bcrypt hashes live in the
``_application_passwords`` usermeta as a PHP-serialized list.
"""

import base64
import binascii
import logging
import re

from access_control.resolver import resolve_principal
from core.serialization import php_loads
from .managers import WpUserManager
from .models import WpUser, WpUserMeta
from .principal import Principal

logger = logging.getLogger(__name__)

APPLICATION_PASSWORDS_META_KEY = "_application_passwords"
_WHITESPACE_RE = re.compile(r"\s")


def parse_basic_credentials(auth_header: str | None) -> tuple[str, str] | None:
    """Return ``(login, password)`` from a Basic header, or None if unusable."""
    if not auth_header or not auth_header.startswith("Basic "):
        return None

    try:
        decoded = base64.b64decode(auth_header[6:].strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None

    login, sep, password = decoded.partition(":")
    if not sep:
        return None

    password = _WHITESPACE_RE.sub("", password)
    if not login or not password:
        return None
    return login, password


def get_application_passwords(using: str, user_id: int) -> list[dict]:
    """Return the stored application password entries for a user."""
    raw = (
        WpUserMeta.objects.using(using)
        .filter(user_id=user_id, meta_key=APPLICATION_PASSWORDS_META_KEY)
        .order_by("umeta_id")
        .values_list("meta_value", flat=True)
        .first()
    )
    entries = php_loads(raw, default=[])
    if isinstance(entries, dict):
        entries = list(entries.values())
    if not isinstance(entries, list):
        return []
    return [entry for entry in entries if isinstance(entry, dict)]


def authenticate_application_password(auth_header: str | None, using: str) -> Principal | None:
    """Resolve the request's principal, or None when the credentials do not check out.

    Malformed headers, unknown logins and wrong passwords all yield None;
    only database failures raise.
    """
    credentials = parse_basic_credentials(auth_header)
    if credentials is None:
        return None
    login, password = credentials

    user = WpUser.objects.get_by_login(login, using=using)
    if user is None:
        logger.debug("Application password login for unknown user %r", login)
        return None

    for entry in get_application_passwords(using, user.id):
        if WpUserManager.verify_password(password, entry.get("password")):
            return resolve_principal(using, user)

    logger.debug("No application password matched for user %r", login)
    return None


__all__ = [
    "APPLICATION_PASSWORDS_META_KEY",
    "parse_basic_credentials",
    "get_application_passwords",
    "authenticate_application_password",
]
