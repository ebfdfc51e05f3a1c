"""
Entities: records bound to a canon and a dispatcher.

Fields without a ``$`` suffix are data and are persisted. ``id`` is an
ordinary data field; the store assigns it on first save if it is missing.
Persistence goes through the dispatcher as entity messages.
"""

import copy
import warnings
from typing import Any, Dict, List, Mapping, Optional

from .canon import Canon, normalize_part, parse_canon
from .config import EntityOptions
from .dispatcher import Dispatcher, build_message, resolve_id_query
from .errors import EntityError
from .fields import (
    BASE_KEY,
    ENTITY_KEY,
    ID_KEY,
    MERGE_KEY,
    NAME_KEY,
    SIGIL,
    ZONE_KEY,
    FieldKind,
    classify_key,
    data_name,
    is_assignable,
    is_control,
)
from .logger import get_logger
from .render import RenderRegistry, default_registry


def _first(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def _flatten(value: Any) -> Any:
    return value.id if isinstance(value, Entity) else value


class Entity:
    """
    A record with a canon, a dispatcher and a bag of fields.

    Fields are read and written as attributes (``ent.title``) or items
    (``ent["title"]``). Use item access for field names that clash with
    entity methods, such as ``save`` or ``canon``.
    """

    def __init__(
        self,
        canon: Any,
        dispatcher: Optional[Dispatcher],
        registry: Optional[RenderRegistry] = None,
    ):
        self._canon = parse_canon(canon)
        self._dispatcher = dispatcher
        self._registry = registry if registry is not None else default_registry
        self._data: Dict[str, Any] = {}
        self._controls: Dict[str, Any] = {}
        self._render = self._registry.renderer_for(self.canon_str)

    # Field bag access

    def __setattr__(self, name: str, value: Any):
        if name.startswith("_"):
            object.__setattr__(self, name, value)
        else:
            self._data[name] = value

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        data = self.__dict__.get("_data", {})
        if name in data:
            return data[name]
        if name == "id":
            return None
        raise AttributeError(f"Entity {self.canon_str} has no field '{name}'")

    def __delattr__(self, name: str):
        try:
            del self._data[name]
        except KeyError:
            raise AttributeError(name) from None

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any):
        self._data[key] = value

    def __delitem__(self, key: str):
        del self._data[key]

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __iter__(self):
        return iter(self.fields())

    def __str__(self) -> str:
        return self._render(self)

    __repr__ = __str__

    # Canon

    @property
    def canon(self) -> Canon:
        return self._canon

    @property
    def canon_str(self) -> str:
        return self._canon.format("string")

    @property
    def dispatcher(self) -> Optional[Dispatcher]:
        return self._dispatcher

    @property
    def registry(self) -> RenderRegistry:
        return self._registry

    @property
    def merge_directive(self) -> Any:
        """Merge directive set by assign(); None when unset."""
        return self._controls.get(MERGE_KEY)

    def format_canon(self, kind: str = "string"):
        return self._canon.format(kind)

    def is_canon(self, spec: Any) -> bool:
        """True if this entity's canon equals the one parsed from ``spec``."""
        if spec is None or spec == "":
            return False
        return self._canon == parse_canon(spec)

    def change_canon(self, zone: Optional[str] = None, base: Optional[str] = None,
                     name: Optional[str] = None) -> "Entity":
        """Replace parts of the canon in place. None leaves a part untouched.

        Deprecated: derive a new entity with make() instead.
        """
        warnings.warn(
            "Entity.change_canon is deprecated; use make() to derive a new entity",
            DeprecationWarning,
            stacklevel=2,
        )
        current = self._canon
        self._canon = Canon(
            zone=_first(normalize_part(zone), current.zone),
            base=_first(normalize_part(base), current.base),
            name=_first(normalize_part(name), current.name),
        )
        self._render = self._registry.renderer_for(self.canon_str)
        return self

    # Construction

    def make(self, *args: Any, dispatcher: Optional[Dispatcher] = None) -> "Entity":
        """
        Create a new entity, using this one's canon for omitted parts.

        Positional arguments fill from the right: ``make(name)``,
        ``make(base, name)``, ``make(zone, base, name)``. A trailing mapping
        supplies properties. A leading Dispatcher is adopted by the new
        entity.

        Canon parts are resolved in this order:
            1. ``entity$`` in the properties (string, mapping or Canon)
            2. zone/base embedded in the positional name (``"z/b/n"``)
            3. positional name, base, zone (name falls back to ``name$``)
            4. ``base$`` and ``zone$`` in the properties
            5. this entity's canon

        Property keys without ``$`` become fields, ``foo_$`` becomes the
        field ``foo``, other ``$`` keys are dropped. ``id$`` sets ``id``.
        """
        args = list(args)

        if args and isinstance(args[0], Dispatcher):
            leading = args.pop(0)
            dispatcher = dispatcher or leading
        dispatcher = dispatcher or self._dispatcher

        props: Dict[str, Any] = {}
        if args and isinstance(args[-1], Mapping):
            props = dict(args.pop())

        while len(args) < 3:
            args.insert(0, None)

        override = props.get(ENTITY_KEY)
        if isinstance(override, (str, Mapping, Canon)):
            zone, base, name = parse_canon(override).as_tuple()
        else:
            name = _first(normalize_part(args.pop()), normalize_part(props.get(NAME_KEY)))
            base = normalize_part(args.pop())
            zone = normalize_part(args.pop())

            named = parse_canon(name)
            name = named.name
            base = _first(named.base, base, normalize_part(props.get(BASE_KEY)))
            zone = _first(named.zone, zone, normalize_part(props.get(ZONE_KEY)))

        current = self._canon
        canon = Canon(
            zone=_first(zone, current.zone),
            base=_first(base, current.base),
            name=_first(name, current.name),
        )

        ent = Entity(canon, dispatcher, registry=self._registry)

        for key, value in props.items():
            key = str(key)
            if classify_key(key) is FieldKind.CONTROL:
                continue
            ent._data[data_name(key)] = value

        if ID_KEY in props:
            ent._data["id"] = props[ID_KEY]

        get_logger().debug("make", canon=ent.canon_str, fields=ent.fields())
        return ent

    def clone(self) -> "Entity":
        """Copy with the same canon and dispatcher and independent fields."""
        return self.make(copy.deepcopy(self.to_plain()))

    # Projection

    def fields(self) -> List[str]:
        """Names of data fields, in insertion order."""
        return [
            k for k, v in self._data.items() if not callable(v) and not is_control(k)
        ]

    def assign(self, values: Mapping[str, Any]) -> "Entity":
        """
        Merge ``values`` into the fields. Existing fields not in ``values``
        are kept. Entity values are stored as their id.
        """
        for key, value in values.items():
            key = str(key)
            if classify_key(key) is FieldKind.ESCAPE:
                key = data_name(key)
            elif not is_assignable(key):
                continue
            self._data[key] = _flatten(value)

        if values.get(ID_KEY) is not None:
            self._data["id"] = values[ID_KEY]

        if values.get(MERGE_KEY) is not None:
            self._controls[MERGE_KEY] = values[MERGE_KEY]

        return self

    def to_plain(self, include_canon: bool = True, canon_kind: str = "object") -> Dict[str, Any]:
        """
        Fields as a new dict, with the canon under ``entity$`` if requested.

        Args:
            include_canon: Add the canon under ``entity$``
            canon_kind: Canon format (see Canon.format)
        """
        out: Dict[str, Any] = {}
        if include_canon:
            out[ENTITY_KEY] = self._canon.format(canon_kind)

        for f in self.fields():
            if SIGIL in f:
                continue
            out[f] = _flatten(self._data[f])

        return out

    def data(self, values: Any = None, canon_kind: str = "object"):
        """assign() when given a mapping, otherwise to_plain().

        ``data(False)`` leaves the canon out of the returned dict.
        """
        if isinstance(values, Mapping):
            return self.assign(values)
        include_canon = True if values is None else bool(values)
        return self.to_plain(include_canon=include_canon, canon_kind=canon_kind)

    # Persistence

    async def _act(self, cmd: str, **extra: Any) -> Any:
        if self._dispatcher is None:
            raise EntityError(
                f"Entity {self.canon_str} has no dispatcher", {"cmd": cmd}
            )

        message = build_message(self, cmd, **extra)
        get_logger().debug("act", cmd=cmd, canon=self.canon_str, q=extra.get("q"))
        get_logger().record_dispatch(cmd)

        try:
            return await self._dispatcher.act(message)
        except Exception as e:
            get_logger().record_failure(cmd, type(e).__name__)
            get_logger().error(
                f"Entity {cmd} failed",
                canon=self.canon_str,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise

    async def save(self, data: Optional[Mapping[str, Any]] = None) -> Any:
        """Save this entity, first merging ``data`` into it if given."""
        if isinstance(data, Mapping):
            self.assign(data)
        return await self._act("save")

    async def load(self, q: Any = None) -> Any:
        """
        Load one entity matching ``q``.

        With no query this reloads the entity by its own id. If no id is
        set either, nothing is dispatched and None is returned.
        """
        query = resolve_id_query(q, self)
        if query is None:
            get_logger().record_skip("load")
            get_logger().debug("load skipped: no query", canon=self.canon_str)
            return None
        return await self._act("load", qent=self, q=query)

    async def list(self, q: Any = None) -> Any:
        """List entities matching ``q``; no query matches all."""
        query = {} if q is None else q
        return await self._act("list", qent=self, q=query)

    async def remove(self, q: Any = None) -> Any:
        """
        Remove entities matching ``q``.

        Resolves the query like load(). An unresolvable query never
        reaches the dispatcher, so a bare remove() cannot remove everything.
        """
        query = resolve_id_query(q, self)
        if query is None:
            get_logger().record_skip("remove")
            get_logger().debug("remove skipped: no query", canon=self.canon_str)
            return None
        return await self._act("remove", qent=self, q=query)

    delete = remove

    async def native(self) -> Any:
        """Driver handle from the underlying store."""
        return await self._act("native")

    async def close(self) -> Any:
        """Ask the dispatcher to release store resources."""
        get_logger().debug("close", canon=self.canon_str)
        return await self._act("close")


def make_entity(
    canon: Any,
    dispatcher: Optional[Dispatcher],
    registry: Optional[RenderRegistry] = None,
) -> Entity:
    """
    Create a root entity.

    Unless the registry is sealed, the dispatcher's ``entity.hide``
    option is loaded into it first.

    Args:
        canon: Canon spec for the entity
        dispatcher: Dispatcher handling persistence
        registry: Render registry (default: the process-wide one)
    """
    registry = registry if registry is not None else default_registry
    if dispatcher is not None and not registry.sealed:
        registry.configure(EntityOptions.from_mapping(dispatcher.options()))
    return Entity(canon, dispatcher, registry=registry)
