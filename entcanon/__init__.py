"""Canonical addressing and variadic record construction for dispatched entities."""

__version__ = "0.1.0"

from .canon import Canon, canon_equal, canon_str, parse_canon
from .dispatcher import Dispatcher, build_message, resolve_id_query
from .entity import Entity, make_entity
from .errors import EntityError, InvalidCanonError, RegistrySealedError
from .render import RenderRegistry, default_registry

__all__ = [
    "Canon",
    "Dispatcher",
    "Entity",
    "EntityError",
    "InvalidCanonError",
    "RegistrySealedError",
    "RenderRegistry",
    "build_message",
    "canon_equal",
    "canon_str",
    "default_registry",
    "make_entity",
    "parse_canon",
    "resolve_id_query",
]
