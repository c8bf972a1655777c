"""
Binding definitions and strategies for the Injector.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class BindingStrategy(Enum):
    """How a binding turns its target into the value returned by the injector."""

    STATIC_VALUE = "static_value"
    SINGLETON = "singleton"
    FACTORY = "factory"


_UNSET: Any = object()


@dataclass
class Binding:
    """
    A registry entry for one injector key.

    ``instance`` is only filled for singleton bindings, after the first
    resolution, and then kept for the lifetime of the injector.
    """

    key: str
    strategy: BindingStrategy
    target: Any
    instance: Any = field(default=_UNSET, repr=False)

    @property
    def is_instantiated(self) -> bool:
        """Check if a singleton binding already created its instance."""
        return self.instance is not _UNSET

    def clear_instance(self) -> None:
        self.instance = _UNSET

    def __str__(self) -> str:
        target_name = getattr(self.target, "__name__", repr(self.target))
        return f"{self.key} -> {target_name} ({self.strategy.value})"
