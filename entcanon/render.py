"""
Render registry: which fields are hidden when an entity is shown as text.

The registry is filled from the ``entity.hide`` option while the process
is configuring, then sealed and only read. ``id`` is never part of the
field dump; it is always rendered on its own.
"""

import json
from typing import Any, Callable, Dict, FrozenSet, Iterable, Mapping, Optional, Union

from .canon import canon_str
from .config import EntityOptions, hidden_field_names
from .errors import RegistrySealedError
from .fields import SIGIL
from .logger import get_logger
from .schema import validate_hide_options

logger = get_logger()

Renderer = Callable[[Any], str]

ALWAYS_HIDDEN = frozenset({"id"})


def make_renderer(canon: Optional[str] = None, hidden: Iterable[str] = ()) -> Renderer:
    """
    Build a renderer producing ``$zone/base/name;id=<id>;{...}``.

    Args:
        canon: Canon string to print; None uses the entity's own canon
        hidden: Field names left out of the JSON dump (id is always left out)
    """
    omit = ALWAYS_HIDDEN | frozenset(hidden)

    def render(ent) -> str:
        fields = {
            k: v for k, v in ent.to_plain(include_canon=False).items() if k not in omit
        }
        return "".join([
            SIGIL,
            canon or ent.canon_str,
            ";id=", str(ent.id), ";",
            json.dumps(fields, separators=(",", ":"), default=str),
        ])

    return render


class RenderRegistry:
    """Maps canon strings to renderers built from their hidden fields."""

    def __init__(self):
        self._hidden: Dict[str, FrozenSet[str]] = {}
        self._renderers: Dict[str, Renderer] = {}
        self._default = make_renderer()
        self._sealed = False

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> None:
        """End the configuration phase. Further configure() calls raise."""
        self._sealed = True

    def configure(self, options: Union[EntityOptions, Mapping[str, Any], None]) -> None:
        """
        Register hidden fields per canon. Later calls overwrite earlier
        entries for the same canon.

        Entries that fail validate_hide_options are skipped with a warning.
        A value that is not a mapping registers nothing.

        Args:
            options: EntityOptions or a raw ``entity.hide`` mapping

        Raises:
            RegistrySealedError: If the registry was sealed
        """
        if self._sealed:
            raise RegistrySealedError("Render registry is sealed")

        if options is None:
            return

        hide = options.hide if isinstance(options, EntityOptions) else options
        if not isinstance(hide, Mapping):
            logger.warning("Ignoring entity.hide: not a mapping", value=hide)
            return

        for canon_in, spec in hide.items():
            problems = validate_hide_options({canon_in: spec})
            if problems:
                logger.warning("Ignoring entity.hide entry", canon=canon_in, problems=problems)
                continue

            key = canon_str(canon_in)
            hidden = frozenset(hidden_field_names(spec))
            self._hidden[key] = hidden
            self._renderers[key] = make_renderer(key, hidden)
            logger.debug("Registered hidden fields", canon=key, fields=sorted(hidden))

    def hidden_fields(self, canon: str) -> FrozenSet[str]:
        return ALWAYS_HIDDEN | self._hidden.get(canon, frozenset())

    def renderer_for(self, canon: str) -> Renderer:
        return self._renderers.get(canon, self._default)


default_registry = RenderRegistry()
