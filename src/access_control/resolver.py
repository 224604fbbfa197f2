"""Resolve an account's roles into a flat capability set."""

from django.conf import settings

from authentication.models import WpUserMeta
from authentication.principal import Principal
from core.serialization import php_loads
from options.services import get_role_definitions


def get_role_assignments(using: str, user_id: int) -> dict[str, bool]:
    """Return the ``{prefix}capabilities`` usermeta as ``{role: assigned}``."""
    raw = (
        WpUserMeta.objects.using(using)
        .filter(user_id=user_id, meta_key=f"{settings.WP_TABLE_PREFIX}capabilities")
        .order_by("umeta_id")
        .values_list("meta_value", flat=True)
        .first()
    )
    assignments = php_loads(raw, default={})
    if not isinstance(assignments, dict):
        return {}
    return {str(role): bool(assigned) for role, assigned in assignments.items()}


def resolve_principal(using: str, user) -> Principal:
    """Build a Principal for ``user`` from its role assignments.

    A capability is held when any assigned role grants it. There are no
    deny entries, and nothing is cached between calls.
    """
    assignments = get_role_assignments(using, user.id)
    roles = tuple(role for role, assigned in assignments.items() if assigned)

    definitions = get_role_definitions(using)
    allcaps: set[str] = set()
    for role in roles:
        definition = definitions.get(role)
        role_caps = definition.get("capabilities") if isinstance(definition, dict) else None
        if not isinstance(role_caps, dict):
            continue
        allcaps.update(str(cap) for cap, granted in role_caps.items() if granted)

    return Principal(
        id=user.id,
        login=user.user_login,
        email=user.user_email,
        roles=roles,
        capabilities=assignments,
        allcaps=frozenset(allcaps),
    )


__all__ = ["get_role_assignments", "resolve_principal"]
