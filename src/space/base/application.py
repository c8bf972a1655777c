"""
Application - the root module that owns the Injector and drives the lifecycle.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any, Self

from .errors import LifecycleReentryError
from .graph import ModuleGraph
from .injector import Injector
from .module import Module, ModuleState
from .object_model import deep_merge

logger = logging.getLogger(__name__)


class Application(Module):
    """
    Root module of a module graph.

    Constructing an application creates its Injector, resolves every module
    reachable through ``required_modules`` and runs the initialize phase on
    all of them, requirements first and the application last. ``start()``
    and ``stop()`` then drive the start and reset phases.

    The injector is pre-populated with ``"injector"``, ``"application"`` and,
    once initialization begins, ``"configuration"`` (the merged
    configuration shared by all modules).

    Example:
        ```python
        Module.define("app.Storage", {
            "configuration": {"storage": {"path": "/tmp"}},
            "on_initialize": lambda self: self.injector.map("store").to({}),
        })

        app = Application.create(
            {"required_modules": ["app.Storage"], "dependencies": {"store": "store"}},
            configuration={"storage": {"path": "/var/data"}},
        )
        app.start()
        ```
    """

    def __init__(self, configuration: Mapping[str, Any] | None = None, **properties: Any):
        """
        Create the application and initialize its module graph.

        Args:
            configuration: Overrides applied on top of every module's default
                configuration
            **properties: Instance attributes assigned before initialization

        Raises:
            CyclicModuleDependencyError: If required modules form a cycle
            UnknownModuleError: If a required module was never published
            InvalidArgumentError: If a module declares a singleton that is not a class
        """
        super().__init__(**properties)
        self.injector = Injector()
        self.modules: dict[str, Module] = {}
        self._configuration_override = dict(configuration or {})
        self._running_phase: str | None = None

        self.injector.map("injector").to(self.injector)
        self.injector.map("application").to(self)

        self._graph = ModuleGraph(self.module_name(), type(self), Module.lookup)
        self.module_order = self._graph.get_topological_order()
        self.initialize()

    @classmethod
    def create(cls, descriptor: dict[str, Any] | None = None, **kwargs: Any) -> Self:  # type: ignore[override]
        """
        Build an application from a descriptor dict and instantiate it.

        The descriptor is used as the properties of an anonymous subclass,
        so it may contain ``required_modules``, ``dependencies``,
        ``configuration`` and lifecycle hooks. Keyword arguments are passed
        to the constructor.
        """
        app_class = cls.extend(descriptor) if descriptor is not None else cls
        return app_class(**kwargs)

    def initialize(self) -> None:
        """Run the initialize phase across the module graph, once."""
        self._ensure_idle("initialize")
        if self.state is not ModuleState.UNINITIALIZED:
            return

        with self._phase("initialize"):
            configuration = self._merge_configuration()
            self.injector.map("configuration").to(configuration)
            modules = self._modules_in_order()
            # Malformed singleton declarations fail before any hook runs
            for module in modules:
                module.singleton_classes()
            for module in modules:
                module._initialize(self, configuration)

    def start(self) -> None:
        """Initialize if needed, then run the start phase. Does nothing when already started."""
        self._ensure_idle("start")
        if self.state is ModuleState.STARTED:
            return
        if self.state is ModuleState.UNINITIALIZED:
            self.initialize()

        with self._phase("start"):
            for module in self._modules_in_order():
                module._start()

    def stop(self) -> None:
        """Run the reset phase in reverse module order. Does nothing unless started."""
        self._ensure_idle("stop")
        if self.state is not ModuleState.STARTED:
            return

        with self._phase("reset"):
            for module in reversed(self._modules_in_order()):
                module._reset()

    def _merge_configuration(self) -> dict[str, Any]:
        layers = [self._graph.module_class(name).configuration for name in self.module_order[:-1]]
        return deep_merge(*layers, type(self).configuration, self._configuration_override)

    def _modules_in_order(self) -> list[Module]:
        modules: list[Module] = []
        for name in self.module_order[:-1]:
            if name not in self.modules:
                self.modules[name] = self._graph.module_class(name).create()
            modules.append(self.modules[name])
        modules.append(self)
        return modules

    def _ensure_idle(self, operation: str) -> None:
        if self._running_phase is not None:
            raise LifecycleReentryError(
                f"Cannot {operation} application while its {self._running_phase} phase is running"
            )

    @contextmanager
    def _phase(self, phase: str) -> Iterator[None]:
        self._running_phase = phase
        logger.debug("Application '%s': %s phase started", self.module_name(), phase)
        try:
            yield
        finally:
            self._running_phase = None
        logger.debug("Application '%s': %s phase finished", self.module_name(), phase)
