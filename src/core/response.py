"""Response helpers and the base view for WordPress REST API bodies."""

from typing import Any

from rest_framework.response import Response
from rest_framework.views import APIView


def rest_response(data: Any, status: int = 200) -> Response:
    """Return a successful response with the resource as the whole body.

    WordPress clients expect the entity itself, not an envelope.
    """

    return Response(data, status=status)


def error_response(code: str, message: str, status: int, **extra: Any) -> Response:
    """Return the uniform WordPress error body: ``{code, message, data}``."""

    return Response(
        {"code": code, "message": message, "data": {"status": status, **extra}},
        status=status,
    )


class DeferredAuthenticationMixin:
    """Skip DRF's eager authentication in ``initial()``.

    Credentials are then checked the first time the handler reads
    ``request.user``, which lets a view validate its input before touching
    the database and authenticate inside its own transaction.
    """

    def perform_authentication(self, request):  # type: ignore[override]
        pass


class BaseAPIView(DeferredAuthenticationMixin, APIView):
    """APIView for WordPress-compatible endpoints."""


__all__ = ["rest_response", "error_response", "DeferredAuthenticationMixin", "BaseAPIView"]
