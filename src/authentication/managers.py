"""Account lookups and bcrypt handling for WordPress application passwords."""

import bcrypt
from django.db import models


class WpUserQuerySet(models.QuerySet):
    def by_login(self, login: str):
        return self.filter(user_login=login)


class WpUserManager(models.Manager.from_queryset(WpUserQuerySet)):
    """Manager exposing the lookups the authenticator needs."""

    def get_by_login(self, login: str, using: str | None = None):
        """Return the account with this ``user_login``, or None."""
        return self.db_manager(using).by_login(login).order_by("id").first()

    def user_exists(self, user_id: int, using: str | None = None) -> bool:
        return self.db_manager(using).filter(id=user_id).exists()

    @staticmethod
    def hash_password(raw_password: str, rounds: int = 12) -> str:
        """Hash an application password with bcrypt and return the utf-8 string."""
        salt = bcrypt.gensalt(rounds=rounds)
        hashed = bcrypt.hashpw(raw_password.encode(), salt)
        return hashed.decode()

    @staticmethod
    def verify_password(raw_password: str, password_hash: str | None) -> bool:
        """Verify a raw password against a stored bcrypt hash.

        PHP writes bcrypt hashes with the ``$2y$`` marker, which is the same
        algorithm as ``$2b$``. Hashes bcrypt cannot parse never match.
        """

        if not password_hash or not isinstance(password_hash, str):
            return False
        if password_hash.startswith("$2y$"):
            password_hash = "$2b$" + password_hash[4:]
        try:
            return bcrypt.checkpw(raw_password.encode(), password_hash.encode("utf-8"))
        except ValueError:
            return False


__all__ = ["WpUserManager", "WpUserQuerySet"]
