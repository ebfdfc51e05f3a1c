"""
Dispatcher boundary.

entcanon never executes storage operations itself. It builds entity
messages and hands them to a Dispatcher supplied by the caller.

Invariants:
    - Messages always carry role="entity", cmd and ent
    - zone/base/name appear only when the entity's canon defines them
    - The dispatcher completes each message exactly once, by returning
      a result or raising
"""

from abc import ABC, abstractmethod
from numbers import Number
from typing import Any, Dict, Optional

from .fields import MERGE_KEY

ROLE = "entity"

COMMANDS = frozenset({"save", "load", "list", "remove", "native", "close"})
QUERY_COMMANDS = frozenset({"load", "list", "remove"})


class Dispatcher(ABC):
    """
    Capability for routing entity messages to a store.

    Subclasses implement act(). options() exposes configuration, of which
    entcanon reads only ``{"entity": {"hide": {...}}}``.
    """

    @abstractmethod
    async def act(self, message: Dict[str, Any]) -> Any:
        ...

    def options(self) -> Dict[str, Any]:
        return {}


def build_message(ent, cmd: str, **extra) -> Dict[str, Any]:
    """
    Build the message for ``cmd`` on ``ent``.

    Args:
        ent: Entity the command acts on
        cmd: One of COMMANDS
        **extra: Additional message fields (qent, q)

    Returns:
        Message dict ready for Dispatcher.act
    """
    if cmd not in COMMANDS:
        raise ValueError(f"Unknown entity command: {cmd}")

    message: Dict[str, Any] = {"role": ROLE, "cmd": cmd, "ent": ent}

    canon = ent.canon
    if canon.name is not None:
        message["name"] = canon.name
    if canon.base is not None:
        message["base"] = canon.base
    if canon.zone is not None:
        message["zone"] = canon.zone

    if ent.merge_directive is not None:
        message[MERGE_KEY] = ent.merge_directive

    message.update(extra)
    return message


def resolve_id_query(q: Any, ent) -> Optional[Any]:
    """
    Resolve the query for load/remove.

    No query targets the entity's own id, or nothing if it has none.
    A bare string or number is an id; an empty string is no query.
    """
    if q is None:
        return {"id": ent.id} if ent.id is not None else None

    if isinstance(q, str):
        return None if q == "" else {"id": q}

    if isinstance(q, Number) and not isinstance(q, bool):
        return {"id": q}

    return q
