"""The authenticated actor of a request."""

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class Principal:
    """An account with its roles and fully resolved capability set.

    Built fresh for every request and never persisted. ``is_authenticated``
    lets it stand in for ``request.user`` in DRF.
    """

    id: int
    login: str
    email: str
    roles: tuple[str, ...] = ()
    # Role assignments exactly as stored in usermeta: role name -> assigned.
    capabilities: dict[str, bool] = field(default_factory=dict)
    allcaps: frozenset[str] = frozenset()

    is_authenticated = True
    is_anonymous = False

    def has_cap(self, cap: str | Enum) -> bool:
        """Return True if any assigned role grants ``cap``."""
        name = cap.value if isinstance(cap, Enum) else cap
        return name in self.allcaps

    def has_any_cap(self, *caps: str | Enum) -> bool:
        return any(self.has_cap(cap) for cap in caps)

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.login


__all__ = ["Principal"]
