"""
Error types raised by the injector, the object model and the module lifecycle.
"""

from __future__ import annotations

from typing import Any


class SpaceError(Exception):
    """Base class for all framework errors."""


class InvalidArgumentError(SpaceError, TypeError):
    """Raised when ``extend``, ``mixin`` or a module declaration receive arguments of the wrong shape."""


class DuplicateBindingError(SpaceError, ValueError):
    """Raised when ``map`` is called for a key that is already bound."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Key '{key}' is already mapped, use override() to replace it")


class UnknownKeyError(SpaceError, LookupError):
    """Raised when a key has no binding."""

    def __init__(self, key: str, dependent: Any = None):
        self.key = key
        self.dependent = dependent
        msg = f"No binding found for '{key}'"
        if dependent is not None:
            msg += f" (required by {dependent})"
        super().__init__(msg)


class UnknownModuleError(UnknownKeyError):
    """Raised when a required module name was never published."""

    def __init__(self, name: str, required_by: str | None = None):
        self.required_by = required_by
        super().__init__(name, f"module '{required_by}'" if required_by else None)


class DuplicateModuleError(SpaceError, ValueError):
    """Raised when a module name is published twice."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Module '{name}' is already published")


class CyclicModuleDependencyError(SpaceError):
    """Raised when the required-module graph contains a cycle."""

    def __init__(self, cycle: list[str]):
        self.cycle = cycle
        cycle_str = " -> ".join(cycle)
        super().__init__(f"Circular module dependency detected: {cycle_str}")


class LifecycleReentryError(SpaceError, RuntimeError):
    """Raised when a lifecycle operation is triggered while another one is running."""
