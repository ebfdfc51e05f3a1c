"""
Property key classification.

A trailing ``$`` marks control metadata that is never persisted. A key
ending in ``_$`` escapes the convention: ``foo_$`` is the data field ``foo``.
"""

from enum import Enum

SIGIL = "$"
ESCAPE_SUFFIX = "_$"

ENTITY_KEY = "entity$"
ZONE_KEY = "zone$"
BASE_KEY = "base$"
NAME_KEY = "name$"
ID_KEY = "id$"
MERGE_KEY = "merge$"

CONTROL_KEYS = frozenset({ENTITY_KEY, ZONE_KEY, BASE_KEY, NAME_KEY, ID_KEY, MERGE_KEY})


class FieldKind(str, Enum):
    DATA = "data"
    CONTROL = "control"
    ESCAPE = "escape"


def classify_key(key: str) -> FieldKind:
    if SIGIL not in key:
        return FieldKind.DATA
    if len(key) > len(ESCAPE_SUFFIX) and key.endswith(ESCAPE_SUFFIX):
        return FieldKind.ESCAPE
    return FieldKind.CONTROL


def data_name(key: str) -> str:
    """Field name a data or escaped key is stored under."""
    if classify_key(key) is FieldKind.ESCAPE:
        return key[: -len(ESCAPE_SUFFIX)]
    return key


def is_control(key: str) -> bool:
    return key.endswith(SIGIL)


def is_assignable(key: str) -> bool:
    """Keys copied by merge-assign: neither starting nor ending with ``$``."""
    return not key.startswith(SIGIL) and not key.endswith(SIGIL)
