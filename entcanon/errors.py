"""
Exceptions raised by entcanon.

Dispatcher failures are not represented here: they reach the caller as the
exact exception object the dispatcher raised.
"""

from typing import Any, Dict, Optional


class EntityError(Exception):
    """Base class for entcanon errors."""

    code = "entity_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidCanonError(EntityError):
    """Raised when a string does not match the canon grammar."""

    code = "invalid_canon"

    def __init__(self, spec: str):
        super().__init__(
            f"Invalid entity canon: {spec}; expected format: zone/base/name.",
            {"str": spec},
        )


class RegistrySealedError(EntityError):
    """Raised when a sealed render registry is configured again."""

    code = "registry_sealed"
