"""
Pytest configuration and shared fixtures.
"""

import itertools
from typing import Any, Dict, List

import pytest

from entcanon.dispatcher import Dispatcher
from entcanon.entity import make_entity
from entcanon.logger import reset_logger
from entcanon.render import RenderRegistry
from entcanon.schema import validate_message


class RecordingDispatcher(Dispatcher):
    """In-memory dispatcher that records every message it receives."""

    def __init__(self, options: Dict[str, Any] = None):
        self._options = options or {}
        self.messages: List[Dict[str, Any]] = []
        self.rows: Dict[str, Dict[str, Any]] = {}
        self._ids = itertools.count(1)

    def options(self) -> Dict[str, Any]:
        return self._options

    async def act(self, message: Dict[str, Any]) -> Any:
        errors = validate_message(message)
        if errors:
            raise ValueError("; ".join(errors))

        self.messages.append(message)
        ent = message["ent"]
        cmd = message["cmd"]

        if cmd == "save":
            if ent.id is None:
                ent.id = str(next(self._ids))
            self.rows[ent.id] = ent.to_plain(include_canon=False)
            return ent
        if cmd == "load":
            row = self.rows.get(message["q"].get("id"))
            return None if row is None else ent.make(dict(row))
        if cmd == "list":
            q = message["q"]
            return [
                ent.make(dict(row))
                for row in self.rows.values()
                if all(row.get(k) == v for k, v in q.items())
            ]
        if cmd == "remove":
            return self.rows.pop(message["q"].get("id"), None)
        if cmd == "native":
            return self.rows
        return None


@pytest.fixture(autouse=True)
def fresh_logger():
    """Each test gets a new global logger so metrics start at zero."""
    reset_logger()
    yield
    reset_logger()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def registry() -> RenderRegistry:
    return RenderRegistry()


@pytest.fixture
def root(dispatcher, registry):
    """Root entity with no canon."""
    return make_entity(None, dispatcher, registry=registry)


@pytest.fixture
def zbn(root):
    """Entity bound to z/b/n."""
    return root.make("z/b/n")


@pytest.fixture
def make_dispatcher():
    """Factory for extra dispatchers, optionally with options."""
    return RecordingDispatcher
