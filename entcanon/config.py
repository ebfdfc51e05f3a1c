"""
Configuration for entcanon.

Options come either from a dispatcher's ``options()`` mapping or from the
process environment (optionally via a ``.env`` file in the working
directory).
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from dotenv import load_dotenv

HIDE_ENV_VAR = "ENTCANON_ENTITY_HIDE"


def load_env(env_path: Optional[Path] = None) -> bool:
    """Load .env from the working directory if present.

    Existing environment variables are not overridden. Returns True if a
    file was loaded.
    """
    env_path = env_path or Path.cwd() / ".env"
    if not env_path.exists():
        return False
    return load_dotenv(dotenv_path=env_path, override=False)


def hidden_field_names(spec: Any) -> List[str]:
    """Field names from a hide spec: a name, a list of names or a mapping."""
    if isinstance(spec, str):
        return [spec]
    if isinstance(spec, Mapping):
        return [str(k) for k in spec.keys()]
    if isinstance(spec, (list, tuple, set, frozenset)):
        return [str(f) for f in spec]
    return []


@dataclass
class EntityOptions:
    """Entity options: hidden fields per canon string."""

    hide: Dict[str, List[str]] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]]) -> "EntityOptions":
        """
        Build options from a dispatcher options mapping.

        Args:
            options: Mapping shaped like {"entity": {"hide": {...}}}

        Returns:
            EntityOptions (empty if the mapping has no entity.hide)
        """
        entity = (options or {}).get("entity") or {}
        hide = entity.get("hide") or {}
        return cls(hide={str(k): hidden_field_names(v) for k, v in hide.items()})

    @classmethod
    def from_env(cls) -> "EntityOptions":
        """Build options from ENTCANON_ENTITY_HIDE (a JSON object)."""
        raw = os.environ.get(HIDE_ENV_VAR, "").strip()
        if not raw:
            return cls()
        hide = json.loads(raw)
        if not isinstance(hide, dict):
            raise ValueError(f"{HIDE_ENV_VAR} must be a JSON object")
        return cls.from_mapping({"entity": {"hide": hide}})
