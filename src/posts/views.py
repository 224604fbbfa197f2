"""Post update endpoint compatible with ``POST /wp/v2/posts/<id>``."""

from django.conf import settings
from django.db import transaction
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework.exceptions import ParseError
from rest_framework.parsers import JSONParser

from authentication.principal import Principal
from core.exceptions import InvalidInput, NotFound, Unauthenticated
from core.parsers import AnyContentTypeJSONParser
from core.response import BaseAPIView, rest_response
from .serializers import PostUpdateSerializer, first_validation_error
from .services import PostUpdateService


def parse_post_id(raw: str) -> int:
    """Return the URL's post id as a positive int or raise ``NotFound``."""
    if raw.isascii() and raw.isdigit() and int(raw) > 0:
        return int(raw)
    raise NotFound("rest_post_invalid_id", "Invalid post ID.")


class PostUpdateView(BaseAPIView):
    """Update a post; POST, PUT and PATCH all take the same partial payload.

    The URL id and the body are validated before any database work. The
    caller is authenticated inside the same transaction as the update.
    """

    permission_classes: list = []
    parser_classes = [JSONParser, AnyContentTypeJSONParser]

    @extend_schema(
        request=PostUpdateSerializer,
        responses={
            200: OpenApiResponse(description="The updated post in the edit context."),
            400: OpenApiResponse(description="Invalid JSON, parameter or field combination."),
            401: OpenApiResponse(description="Missing or invalid application password."),
            403: OpenApiResponse(description="The user may not make this change."),
            404: OpenApiResponse(description="Unknown post."),
        },
    )
    def post(self, request, site: str, post_id: str):
        post_pk = parse_post_id(post_id)

        try:
            payload = request.data
        except ParseError:
            raise InvalidInput("rest_invalid_json", "Invalid JSON body.") from None
        if request.stream is None:
            raise InvalidInput("rest_invalid_json", "Invalid JSON body.")

        serializer = PostUpdateSerializer(data=payload)
        if not serializer.is_valid():
            path, message = first_validation_error(serializer.errors)
            raise InvalidInput(
                "rest_invalid_param",
                f"Invalid parameter: {path} - {message}",
                params={path: message},
            )

        using = settings.WP_DATABASE_ALIAS
        with transaction.atomic(using=using):
            principal = request.user
            if not isinstance(principal, Principal):
                raise Unauthenticated("rest_not_logged_in", "You are not currently logged in.")
            data = PostUpdateService(using).update(post_pk, serializer.validated_data, principal)

        return rest_response(data)

    put = post
    patch = post


__all__ = ["PostUpdateView", "parse_post_id"]
