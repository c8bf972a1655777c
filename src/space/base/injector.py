"""
Injector - mutable registry mapping string keys to bindings.

One Injector is created by each Application and shared by reference with all
of its modules. It is the single source of truth for runtime bindings.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from .bindings import Binding, BindingStrategy
from .errors import DuplicateBindingError, InvalidArgumentError, UnknownKeyError

logger = logging.getLogger(__name__)


def binding_key(key: Any) -> str:
    """
    Normalize an injector key.

    Strings are used as they are. Classes are keyed by their class path, so
    ``injector.map(MyService)`` and ``injector.get("my.app.MyService")`` refer
    to the same binding when ``MyService`` was extended with that name.

    Raises:
        InvalidArgumentError: If the key is neither a string nor a class
    """
    if isinstance(key, str):
        return key
    if isinstance(key, type):
        class_path = getattr(key, "class_path", None)
        if callable(class_path):
            return str(class_path())
        return f"{key.__module__}.{key.__qualname__}"
    raise InvalidArgumentError(f"Injector keys must be strings or classes, got {key!r}")


class Binder:
    """Fluent builder returned by ``Injector.map`` and ``Injector.override``."""

    def __init__(self, injector: Injector, key: str, source: type | None = None):
        self._injector = injector
        self._key = key
        self._source = source

    def to(self, value: Any) -> None:
        """Bind the key to a static value."""
        self._finalize(BindingStrategy.STATIC_VALUE, value)

    def to_static_value(self, value: Any) -> None:
        """Bind the key to a static value (same as ``to``)."""
        self.to(value)

    def to_singleton(self, cls: type) -> None:
        """Bind the key to a class that is instantiated once, on first access."""
        self._finalize(BindingStrategy.SINGLETON, cls)

    def to_instances_of(self, cls: type) -> None:
        """Bind the key to a class that is instantiated on every access."""
        self._finalize(BindingStrategy.FACTORY, cls)

    def to_factory(self, factory: Callable[[], Any]) -> None:
        """Bind the key to a callable invoked on every access."""
        self._finalize(BindingStrategy.FACTORY, factory)

    def as_singleton(self) -> None:
        """Bind a class key to a singleton of that class."""
        self.to_singleton(self._require_source("as_singleton"))

    def as_static_value(self) -> None:
        """Bind a class key to the class itself."""
        self.to(self._require_source("as_static_value"))

    def _require_source(self, method: str) -> type:
        if self._source is None:
            raise InvalidArgumentError(f"{method}() requires the key '{self._key}' to be a class")
        return self._source

    def _finalize(self, strategy: BindingStrategy, target: Any) -> None:
        binding = Binding(self._key, strategy, target)
        self._injector._add_binding(binding)


class Injector:
    """
    Registry and resolver of bindings.

    Keys are bound with ``map`` (which refuses existing keys) or replaced with
    ``override`` (which requires an existing key). Singletons are created
    lazily on first ``get`` and cached for the injector's lifetime.

    Example:
        ```python
        injector = Injector()
        injector.map("greeting").to("hello")
        injector.map("service").to_singleton(Service)
        service = injector.get("service")
        ```
    """

    def __init__(self) -> None:
        self._bindings: dict[str, Binding] = {}

    def map(self, key: Any) -> Binder:
        """
        Start a new binding for ``key``.

        Raises:
            DuplicateBindingError: If the key is already bound
        """
        normalized = binding_key(key)
        if normalized in self._bindings:
            raise DuplicateBindingError(normalized)
        return Binder(self, normalized, key if isinstance(key, type) else None)

    def override(self, key: Any) -> Binder:
        """
        Replace the binding of an already bound ``key``.

        Raises:
            UnknownKeyError: If nothing was bound to the key before
        """
        normalized = binding_key(key)
        if normalized not in self._bindings:
            raise UnknownKeyError(normalized)
        return Binder(self, normalized, key if isinstance(key, type) else None)

    def get(self, key: Any, dependent: Any = None) -> Any:
        """
        Resolve the value bound to ``key``.

        Args:
            key: The key to resolve
            dependent: Optional description of who asked, used in error messages

        Raises:
            UnknownKeyError: If no binding exists for the key
        """
        return self._resolve(self._require_binding(key, dependent))

    def create(self, key: Any) -> Any:
        """
        Materialize the value bound to ``key`` right away.

        For singletons this creates the instance unless it already exists and
        returns it. Other strategies resolve exactly like ``get``.
        """
        return self._resolve(self._require_binding(key))

    def find(self, key: Any) -> Any | None:
        """Resolve ``key``, returning None if it is not bound."""
        binding = self._bindings.get(binding_key(key))
        if binding is None:
            return None
        return self._resolve(binding)

    def has_mapping(self, key: Any) -> bool:
        return binding_key(key) in self._bindings

    def get_binding(self, key: Any) -> Binding | None:
        return self._bindings.get(binding_key(key))

    def remove(self, key: Any) -> None:
        """
        Remove the binding of ``key``.

        Raises:
            UnknownKeyError: If the key is not bound
        """
        normalized = binding_key(key)
        if normalized not in self._bindings:
            raise UnknownKeyError(normalized)
        del self._bindings[normalized]
        logger.debug("Removed binding for '%s'", normalized)

    def keys(self) -> list[str]:
        """Get all bound keys in binding order."""
        return list(self._bindings)

    def inject_into(self, target: Any) -> Any:
        """
        Assign the declared dependencies of ``target``.

        ``target.dependencies`` maps attribute names to injector keys. Each key
        is resolved with ``get`` and set on ``target``. Afterwards the
        target's ``on_dependencies_ready`` is called when it has one.

        Returns:
            The target itself

        Raises:
            UnknownKeyError: If a declared key is not bound
        """
        dependencies: dict[str, Any] = getattr(target, "dependencies", None) or {}
        dependent = type(target).__name__
        for attribute, key in dependencies.items():
            setattr(target, attribute, self.get(key, dependent))

        on_dependencies_ready = getattr(target, "on_dependencies_ready", None)
        if callable(on_dependencies_ready):
            on_dependencies_ready()
        return target

    def _add_binding(self, binding: Binding) -> None:
        replaced = binding.key in self._bindings
        self._bindings[binding.key] = binding
        logger.debug("%s binding %s", "Overrode" if replaced else "Added", binding)

    def _require_binding(self, key: Any, dependent: Any = None) -> Binding:
        normalized = binding_key(key)
        binding = self._bindings.get(normalized)
        if binding is None:
            raise UnknownKeyError(normalized, dependent)
        return binding

    def _resolve(self, binding: Binding) -> Any:
        if binding.strategy is BindingStrategy.STATIC_VALUE:
            return binding.target

        if binding.strategy is BindingStrategy.FACTORY:
            return self.inject_into(self._instantiate(binding.target))

        if not binding.is_instantiated:
            logger.debug("Creating singleton for '%s'", binding.key)
            # Cached before injection so singletons that depend on each other resolve
            binding.instance = self._instantiate(binding.target)
            try:
                self.inject_into(binding.instance)
            except BaseException:
                binding.clear_instance()
                raise
        return binding.instance

    @staticmethod
    def _instantiate(target: Any) -> Any:
        create = getattr(target, "create", None)
        if isinstance(target, type) and callable(create):
            return create()
        return target()
