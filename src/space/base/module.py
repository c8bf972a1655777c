"""
Modules - declarative units of an application.

A module declares the modules it requires, the injector keys it depends on,
singletons it provides, default configuration and lifecycle hooks. Module
classes are published by name in a process-wide registry so that
applications can require them by name.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Self

from .errors import DuplicateModuleError, InvalidArgumentError, UnknownModuleError
from .injector import binding_key
from .object_model import SpaceObject

if TYPE_CHECKING:
    from .application import Application

logger = logging.getLogger(__name__)

Hook = Callable[..., None]

_published: dict[str, type[Module]] = {}


class ModuleState(Enum):
    """Lifecycle states of a module instance."""

    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    STARTED = "started"
    RESET = "reset"


class Module(SpaceObject):
    """
    Base class of all modules.

    Descriptor attributes:

    - ``name``: dot-path name the module is published under,
    - ``required_modules``: names of modules that must be processed first,
    - ``dependencies``: attribute name to injector key,
    - ``singletons``: injector key to class, or a list of classes keyed by
      their class path; mapped during initialize and created during start,
    - ``configuration``: default configuration, deep-merged across modules.

    Lifecycle hooks are ``before_X``, ``on_X`` and ``after_X`` for X in
    ``initialize``, ``start`` and ``reset``. Unset hooks are skipped.
    """

    name: str | None = None
    required_modules: Sequence[str] = ()
    singletons: Mapping[str, type] | Sequence[type] = ()
    configuration: dict[str, Any] = {}

    before_initialize: Hook | None = None
    on_initialize: Hook | None = None
    after_initialize: Hook | None = None
    before_start: Hook | None = None
    on_start: Hook | None = None
    after_start: Hook | None = None
    before_reset: Hook | None = None
    on_reset: Hook | None = None
    after_reset: Hook | None = None

    _optional_slots: ClassVar[frozenset[str]] = frozenset(
        f"{prefix}_{phase}"
        for phase in ("initialize", "start", "reset")
        for prefix in ("before", "on", "after")
    )

    def __init__(self, properties: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        self.app: Application | None = None
        self.injector: Any = None
        self.state = ModuleState.UNINITIALIZED
        super().__init__(properties, **kwargs)

    @classmethod
    def module_name(cls) -> str:
        """The name this module class was published under, or its class path."""
        return cls.__dict__.get("name") or cls.class_path()

    @classmethod
    def define(cls, name: str, properties: dict[str, Any] | None = None) -> type[Self]:
        """
        Create a module class from ``properties`` and publish it as ``name``.

        Example:
            ```python
            Module.define("app.Logging", {
                "required_modules": ["app.Config"],
                "on_initialize": lambda self: self.injector.map("log").to(log),
            })
            ```

        Raises:
            DuplicateModuleError: If the name is already published
        """
        module_class = cls.extend(name, {**(properties or {}), "name": name})
        return module_class.publish()

    @classmethod
    def publish(cls, name: str | None = None) -> type[Self]:
        """
        Publish this module class so applications can require it by name.

        Raises:
            DuplicateModuleError: If the name is already published
        """
        name = name or cls.module_name()
        if name in _published:
            raise DuplicateModuleError(name)
        cls.name = name
        _published[name] = cls
        logger.debug("Published module '%s'", name)
        return cls

    @staticmethod
    def lookup(name: str) -> type[Module] | None:
        return _published.get(name)

    @staticmethod
    def require(name: str) -> type[Module]:
        """
        Get a published module class.

        Raises:
            UnknownModuleError: If no module is published under the name
        """
        module_class = _published.get(name)
        if module_class is None:
            raise UnknownModuleError(name)
        return module_class

    @staticmethod
    def published_module_names() -> list[str]:
        return list(_published)

    @staticmethod
    def clear_published_modules() -> None:
        """Forget all published modules (for test isolation)."""
        _published.clear()

    def singleton_classes(self) -> dict[str, type]:
        """
        Declared singletons as injector key to class.

        Raises:
            InvalidArgumentError: If an entry does not provide a class
        """
        if isinstance(self.singletons, Mapping):
            entries = [(binding_key(key), cls) for key, cls in self.singletons.items()]
        else:
            entries = [(binding_key(cls), cls) for cls in self.singletons]

        for key, cls in entries:
            if not isinstance(cls, type):
                raise InvalidArgumentError(
                    f"Singleton '{key}' of module '{self.module_name()}' must be a class, got {cls!r}"
                )
        return dict(entries)

    def _initialize(self, app: Application, configuration: dict[str, Any]) -> None:
        self.app = app
        self.injector = app.injector
        self.configuration = configuration
        self.injector.inject_into(self)
        for key, cls in self.singleton_classes().items():
            self.injector.map(key).to_singleton(cls)
        self._run_hooks("initialize")
        self.state = ModuleState.INITIALIZED

    def _start(self) -> None:
        for key in self.singleton_classes():
            self.injector.create(key)
        self._run_hooks("start")
        self.state = ModuleState.STARTED

    def _reset(self) -> None:
        self._run_hooks("reset")
        self.state = ModuleState.RESET

    def _run_hooks(self, phase: str) -> None:
        logger.debug("Running %s hooks of module '%s'", phase, self.module_name())
        for slot in (f"before_{phase}", f"on_{phase}", f"after_{phase}"):
            hook = getattr(self, slot, None)
            if hook is not None:
                hook()
