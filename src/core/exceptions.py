"""WordPress-style error types and the DRF exception handler that renders them.

Every failure leaves the API as ``{"code": ..., "message": ..., "data":
{"status": ..., ...}}`` with the HTTP status mirroring ``data.status``.
"""

import logging
from typing import Any

from django.conf import settings
from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import APIException, ParseError
from rest_framework.response import Response

from core.response import error_response

logger = logging.getLogger(__name__)


class WpError(Exception):
    """Base error carrying a WordPress REST error code, message and status."""

    status_code: int | None = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, code: str, message: str, status_code: int | None = None, **extra: Any):
        super().__init__(message)
        self.code = code
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra

    def get_status(self, request=None) -> int:
        return self.status_code or status.HTTP_500_INTERNAL_SERVER_ERROR

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"{type(self).__name__}({self.code!r}, {self.message!r})"


class NotFound(WpError):
    status_code = status.HTTP_404_NOT_FOUND


class Unauthenticated(WpError):
    status_code = status.HTTP_401_UNAUTHORIZED


class Forbidden(WpError):
    """Capability denial whose status depends on who is asking.

    Mirrors ``rest_authorization_required_code()``: 403 for an authenticated
    principal, 401 otherwise. The status is resolved when the error is
    rendered rather than where it is raised.
    """

    status_code = None

    def get_status(self, request=None) -> int:
        if self.status_code is not None:
            return self.status_code
        return authorization_required_code(_is_authenticated(request))


class InvalidInput(WpError):
    status_code = status.HTTP_400_BAD_REQUEST


class PersistFailure(WpError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def authorization_required_code(is_authenticated: bool) -> int:
    """Return 403 for authenticated callers and 401 for anonymous ones."""
    return status.HTTP_403_FORBIDDEN if is_authenticated else status.HTTP_401_UNAUTHORIZED


def _is_authenticated(request) -> bool:
    user = getattr(request, "user", None)
    return bool(user is not None and getattr(user, "is_authenticated", False))


def _expose_details() -> bool:
    return getattr(settings, "DEBUG_ERRORS", False) or getattr(settings, "DEBUG", False)


def custom_exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
    """Render any exception raised by a view in the WordPress error shape.

    - ``WpError`` subclasses render their own code/message/status.
    - DRF ``ParseError`` (malformed JSON) becomes ``rest_invalid_json``.
    - Other DRF ``APIException`` instances keep their status with a
      ``rest_``-prefixed code.
    - Database errors and anything else become ``rest_internal_error``.
    """
    request = context.get("request")

    if isinstance(exc, WpError):
        return error_response(exc.code, exc.message, exc.get_status(request), **exc.extra)

    if isinstance(exc, ParseError):
        return error_response("rest_invalid_json", "Invalid JSON body.", status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, APIException):
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return error_response(f"rest_{exc.default_code}", detail, exc.status_code)

    if isinstance(exc, DatabaseError):
        logger.exception("Database error while handling %s", getattr(request, "path", "request"))
    else:
        logger.exception("Unhandled error while handling %s", getattr(request, "path", "request"))

    message = str(exc) if _expose_details() and str(exc) else "An unexpected error occurred."
    return error_response("rest_internal_error", message, status.HTTP_500_INTERNAL_SERVER_ERROR)


__all__ = [
    "WpError",
    "NotFound",
    "Unauthenticated",
    "Forbidden",
    "InvalidInput",
    "PersistFailure",
    "authorization_required_code",
    "custom_exception_handler",
]
