"""
Entity canon: the zone/base/name address of an entity.

Strings follow the grammar ``[$][zone/][base/]name`` where each segment is a
word or ``-`` for "absent". Segments fill from the right, so ``b/n`` is a
base and a name with no zone.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

from .errors import InvalidCanonError
from .fields import SIGIL

ABSENT = "-"
PARTS = ("zone", "base", "name")

CANON_RE = re.compile(r"\$?((\w+|-)/)?((\w+|-)/)?(\w+|-)")

FORMAT_KINDS = ("string", "string$", "array", "array$", "object", "object$")


def normalize_part(value: Any) -> Any:
    """None, "" and the "-" placeholder are all absent."""
    return None if value is None or value == "" or value == ABSENT else value


def _mapping_part(spec: Mapping, part: str) -> Any:
    value = normalize_part(spec.get(part))
    if value is None:
        value = normalize_part(spec.get(part + SIGIL))
    return value


@dataclass(frozen=True)
class Canon:
    """Immutable zone/base/name triple. ``None`` marks an absent part."""

    zone: Optional[str] = None
    base: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self):
        for part in PARTS:
            object.__setattr__(self, part, normalize_part(getattr(self, part)))

    def __str__(self) -> str:
        return self.format("string")

    def format(self, kind: str = "string") -> Union[str, List[Optional[str]], Dict[str, Optional[str]]]:
        """
        Render the canon in one of FORMAT_KINDS.

        Args:
            kind: string, string$, array, array$, object or object$

        Returns:
            A string, a [zone, base, name] list, or a dict
        """
        if kind in ("string", "string$"):
            text = "/".join(ABSENT if p is None else p for p in self.as_tuple())
            return SIGIL + text if kind == "string$" else text
        if kind in ("array", "array$"):
            return list(self.as_tuple())
        if kind == "object":
            return {"zone": self.zone, "base": self.base, "name": self.name}
        if kind == "object$":
            return {"zone$": self.zone, "base$": self.base, "name$": self.name}
        raise ValueError(f"Unknown canon format: {kind}")

    def as_tuple(self):
        return (self.zone, self.base, self.name)

    def is_a(self, spec: Any) -> bool:
        """True if every part equals the matching part of ``spec``."""
        return self == parse_canon(spec)


def parse_canon(spec: Any) -> Canon:
    """
    Parse a canon from a string, sequence, mapping, Canon or entity.

    Strings must match the whole grammar, otherwise InvalidCanonError is
    raised. Values of any other type give the all-absent canon.
    """
    if isinstance(spec, Canon):
        return spec

    # Entities expose their canon; avoid importing entity.py here
    canon = getattr(spec, "canon", None)
    if isinstance(canon, Canon):
        return canon

    if isinstance(spec, (list, tuple)):
        padded = list(spec[:3]) + [None] * (3 - len(spec[:3]))
        return Canon(*(normalize_part(p) for p in padded))

    if isinstance(spec, Mapping):
        return Canon(*(_mapping_part(spec, p) for p in PARTS))

    if not isinstance(spec, str):
        return Canon()

    m = CANON_RE.fullmatch(spec)
    if m is None:
        raise InvalidCanonError(spec)

    # With a single prefix segment, group 2 holds the base
    if m.group(4) is None:
        zone, base = None, m.group(2)
    else:
        zone, base = m.group(2), m.group(4)

    return Canon(
        zone=normalize_part(zone),
        base=normalize_part(base),
        name=normalize_part(m.group(5)),
    )


def canon_str(spec: Any) -> str:
    """Normalized ``zone/base/name`` string for any parseable spec."""
    return parse_canon(spec).format("string")


def canon_equal(a: Any, b: Any) -> bool:
    return parse_canon(a) == parse_canon(b)
