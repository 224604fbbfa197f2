"""Request body parsing."""

from rest_framework.parsers import JSONParser


class AnyContentTypeJSONParser(JSONParser):
    """Parse the body as JSON whatever ``Content-Type`` the client declared.

    WordPress clients do not always label their payloads, so ``text/plain``
    and form content types are decoded as JSON too.
    """

    media_type = "*/*"
