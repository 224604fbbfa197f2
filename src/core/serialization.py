"""PHP serialization codec for WordPress option and usermeta blobs.

WordPress stores arrays (sticky posts, role definitions, user role
assignments, application passwords) in PHP's ``serialize()`` format. These
helpers convert them to native Python structures at the storage boundary so
nothing past the persistence layer ever sees the wire format.
"""

import logging
from typing import Any

import phpserialize

logger = logging.getLogger(__name__)


def _to_native(value: Any) -> Any:
    """Turn phpserialize's dict-for-every-array output into lists where possible."""
    if isinstance(value, dict):
        native = {key: _to_native(item) for key, item in value.items()}
        if list(native.keys()) == list(range(len(native))):
            return list(native.values())
        return native
    return value


def php_loads(raw: str | bytes | None, default: Any = None) -> Any:
    """Decode a PHP-serialized value, returning ``default`` when it cannot be read.

    Arrays with sequential integer keys come back as lists, other arrays as
    dicts. Strings are decoded as UTF-8.
    """
    if raw is None or raw == "" or raw == b"":
        return default
    data = raw.encode("utf-8") if isinstance(raw, str) else raw
    try:
        return _to_native(phpserialize.loads(data, decode_strings=True))
    except (ValueError, TypeError, IndexError) as exc:
        logger.warning("Could not unserialize PHP value: %s", exc)
        return default


def php_dumps(value: Any) -> str:
    """Encode a Python value in PHP's serialize() format.

    Lists become integer-keyed arrays (``a:2:{i:0;i:7;i:1;i:9;}``), matching
    what WordPress writes for the same data.
    """
    return phpserialize.dumps(value).decode("utf-8")


__all__ = ["php_loads", "php_dumps"]
