"""
space.base - dependency injection and modular applications.

This package provides:
- SpaceObject, a class model with runtime extension, statics and mixins
- Injector, a string-keyed registry of static values, singletons and factories
- Module, declarative units with required modules and lifecycle hooks
- Application, the root module that owns the injector and drives the lifecycle
"""

from .application import Application
from .bindings import Binding, BindingStrategy
from .errors import (
    CyclicModuleDependencyError,
    DuplicateBindingError,
    DuplicateModuleError,
    InvalidArgumentError,
    LifecycleReentryError,
    SpaceError,
    UnknownKeyError,
    UnknownModuleError,
)
from .graph import ModuleGraph
from .injector import Binder, Injector
from .module import Module, ModuleState
from .object_model import SpaceObject, deep_merge

__all__ = [
    "Application",
    "Binder",
    "Binding",
    "BindingStrategy",
    "CyclicModuleDependencyError",
    "DuplicateBindingError",
    "DuplicateModuleError",
    "Injector",
    "InvalidArgumentError",
    "LifecycleReentryError",
    "Module",
    "ModuleGraph",
    "ModuleState",
    "SpaceError",
    "SpaceObject",
    "UnknownKeyError",
    "UnknownModuleError",
    "deep_merge",
]
