"""Translation between free-text selector names and API enum codes.

Tool parameters arrive as human/agent supplied strings ("secret", "High",
"completed"). The remote API wants integer codes. Every lookup here is
case-insensitive and total: a miss is reported as ``None`` (or omitted from a
list), never as an exception.

An *enum object* is either an ``enum.Enum`` subclass with integer values or a
plain ``Mapping[str, int]``. Mappings may carry reverse-lookup entries such as
``{"0": "Unknown"}``; those are ignored.
"""
import enum
from collections.abc import Iterable, Mapping
from typing import Any, Optional, Union

EnumObject = Union[type[enum.Enum], Mapping[str, Any]]


def _is_numeric_key(key: str) -> bool:
    try:
        int(key)
    except ValueError:
        return False
    return True


def _enum_items(enum_object: EnumObject) -> Iterable[tuple[Any, Any]]:
    if isinstance(enum_object, type) and issubclass(enum_object, enum.Enum):
        return enum_object.__members__.items()
    return enum_object.items()


def create_enum_mapping(enum_object: EnumObject) -> dict[str, int]:
    """Build a ``lower(name) -> code`` mapping from an enum object.

    Only forward pairs are kept: keys that parse as integers and values that
    are not integers are skipped.
    """
    mapping = {}
    for key, value in _enum_items(enum_object):
        if not isinstance(key, str) or _is_numeric_key(key):
            continue
        if isinstance(value, bool) or not isinstance(value, int):
            continue
        mapping[key.lower()] = value
    return mapping


def map_string_to_enum(
    value: Optional[str],
    enum_object: EnumObject,
    default: Optional[int] = None
) -> Optional[int]:
    """Translate a single selector name to its enum code.

    The match is case-insensitive but otherwise exact: surrounding whitespace
    is not stripped, so ``" secret"`` misses. Blank input or a miss returns
    ``default``.
    """
    if not value or not value.strip():
        return default
    return create_enum_mapping(enum_object).get(value.lower(), default)


def map_string_array_to_enum(
    values: Optional[Iterable[str]],
    enum_object: EnumObject
) -> list[int]:
    """Translate a list of selector names, dropping the ones that do not match.

    Each element is trimmed and lower-cased before the lookup. Input order and
    duplicates are preserved.
    """
    if values is None:
        return []

    mapping = create_enum_mapping(enum_object)
    codes = []
    for value in values:
        code = mapping.get(value.strip().lower())
        if code is not None:
            codes.append(code)
    return codes


def get_enum_keys(enum_object: EnumObject) -> list[str]:
    """Return the selector names accepted for an enum, for use as schema choices."""
    return list(create_enum_mapping(enum_object))


def safe_enum_convert(enum_object: EnumObject, key: Optional[str]) -> Optional[int]:
    """Convert a schema-validated selector name, or return None if it is not a valid key."""
    if not key:
        return None
    # Keys are already lower-cased, so this is an exact match
    return create_enum_mapping(enum_object).get(key)
