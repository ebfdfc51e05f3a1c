"""
Shape checks for entity messages and entity options.

Each validator returns a list of error messages. An empty list means valid.
"""

from typing import Any, Dict, List, Mapping

from .canon import parse_canon
from .dispatcher import COMMANDS, QUERY_COMMANDS, ROLE
from .errors import InvalidCanonError

CANON_PARTS = ["zone", "base", "name"]


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def validate_message(message: Dict[str, Any]) -> List[str]:
    """
    Check a message produced for Dispatcher.act.

    Intended for dispatcher implementations that want to reject
    malformed input before touching storage.
    """
    from .entity import Entity

    errors: List[str] = []

    if message.get("role") != ROLE:
        errors.append(f"Field 'role' must be '{ROLE}'")

    cmd = message.get("cmd")
    if not isinstance(cmd, str) or cmd not in COMMANDS:
        errors.append(f"Unknown command: {cmd!r}")

    if not isinstance(message.get("ent"), Entity):
        errors.append("Field 'ent' must be an entity")

    for f in CANON_PARTS:
        if f in message and not _is_non_empty_str(message[f]):
            errors.append(f"Field '{f}' must be a non-empty string if provided")

    if isinstance(cmd, str) and cmd in QUERY_COMMANDS:
        if "q" not in message:
            errors.append(f"Command '{cmd}' requires field 'q'")
        elif "qent" not in message:
            errors.append("Field 'q' requires field 'qent'")

    return errors


def validate_hide_options(hide: Any) -> List[str]:
    """Check an entity.hide mapping of canon strings to hidden fields."""
    if not isinstance(hide, Mapping):
        return ["entity.hide must be a mapping"]

    errors: List[str] = []
    for canon_in, spec in hide.items():
        try:
            parse_canon(canon_in)
        except InvalidCanonError as e:
            errors.append(str(e))
            continue

        if isinstance(spec, str):
            if not spec:
                errors.append(f"Hidden field for '{canon_in}' must be non-empty")
        elif isinstance(spec, (list, tuple, set, frozenset)):
            if not all(_is_non_empty_str(f) for f in spec):
                errors.append(f"Hidden fields for '{canon_in}' must be non-empty strings")
        elif not isinstance(spec, Mapping):
            errors.append(
                f"Hidden fields for '{canon_in}' must be a name, a list or a mapping"
            )

    return errors
