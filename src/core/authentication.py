"""DRF authentication class for WordPress application passwords.

The class only exposes the Principal resolved by
``authentication.services``; it never rejects a request by itself. Views
decide whether an anonymous caller gets a 401, which lets the post update
endpoint authenticate lazily inside its database transaction.
"""

from typing import Any, Optional, Tuple

from django.conf import settings
from rest_framework.authentication import BaseAuthentication

from authentication.services import authenticate_application_password


class ApplicationPasswordAuthentication(BaseAuthentication):
    """Authenticate ``Authorization: Basic`` headers against application passwords."""

    www_authenticate_realm = "WordPress"

    def authenticate(self, request) -> Optional[Tuple[Any, None]]:
        auth_header = request.META.get("HTTP_AUTHORIZATION", "")
        principal = authenticate_application_password(auth_header, using=settings.WP_DATABASE_ALIAS)
        if principal is None:
            return None
        return principal, None

    def authenticate_header(self, request) -> str:
        return f'Basic realm="{self.www_authenticate_realm}"'


__all__ = ["ApplicationPasswordAuthentication"]
