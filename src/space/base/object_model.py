"""
Class definition primitives for the framework.

``SpaceObject`` is the root of every injectable class. On top of plain Python
inheritance it adds:

- ``extend`` to build subclasses at runtime from a properties dict,
- statics that are copied (not shared) into subclasses at definition time,
- ``mixin`` for merging property bags into a class,
- ``on_dependencies_ready``, which runs the callbacks contributed by mixins
  once the injector has assigned every declared dependency.
"""

from __future__ import annotations

import copy
import types
from collections.abc import Callable, Iterable, Mapping
from typing import Any, ClassVar, Self

from .errors import InvalidArgumentError

MixinCallback = Callable[[Any], None]

# Namespaces must be objects that can hold attributes, never plain values
_PRIMITIVE_TYPES = (str, bytes, int, float, complex, bool, list, tuple)


def deep_merge(*layers: Mapping[str, Any] | None) -> dict[str, Any]:
    """
    Merge plain dicts into a new dict, later layers winning on conflicts.

    Nested dicts are merged key by key. Keys missing from a later layer keep
    the value of the earlier layer. Other values are deep-copied, so none of
    the inputs is shared with or modified through the result.
    """
    result: dict[str, Any] = {}
    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            current = result.get(key)
            if isinstance(value, dict):
                result[key] = deep_merge(current if isinstance(current, dict) else None, value)
            else:
                result[key] = copy.deepcopy(value)
    return result


def _parse_extend_args(
    args: tuple[Any, ...],
) -> tuple[Any, str | None, dict[str, Any] | None]:
    """Sort the 0-3 positional arguments of ``extend`` into namespace, name and properties."""
    namespace: Any = None
    name: Any = None
    properties: Any = None

    if len(args) > 3:
        raise InvalidArgumentError(f"extend() takes at most 3 arguments ({len(args)} given)")
    if len(args) == 3:
        namespace, name, properties = args
    elif len(args) == 2:
        if isinstance(args[0], str):
            name, properties = args
        else:
            namespace, name = args
    elif len(args) == 1:
        if isinstance(args[0], str):
            name = args[0]
        else:
            properties = args[0]

    if namespace is not None and isinstance(namespace, _PRIMITIVE_TYPES):
        raise InvalidArgumentError(
            f"namespace must be an object, got {type(namespace).__name__}"
        )
    if name is not None and not isinstance(name, str):
        raise InvalidArgumentError(f"class name must be a string, got {type(name).__name__}")
    if properties is not None and not isinstance(properties, dict):
        raise InvalidArgumentError(
            f"properties must be a plain dict, got {type(properties).__name__}"
        )
    return namespace, name, properties


def _as_static(value: Any) -> Any:
    # Plain functions on the static side receive the class, like class methods
    if isinstance(value, types.FunctionType):
        return classmethod(value)
    return value


class SpaceObject:
    """
    Base class with declarative dependencies and runtime class extension.

    Subclasses declare ``dependencies`` as a mapping from attribute name to
    injector key. The class body (or the properties given to ``extend``) may
    also contain:

    - ``statics``: attributes placed on the class side and copied into
      subclasses when those are defined,
    - ``mixin``: a mixin dict or a list of them, applied after the class is built,
    - ``on_extending``: called once with the new class after the mixins.
    """

    _class_path: ClassVar[str | None] = None
    _statics: ClassVar[dict[str, Any]] = {}
    _mixin_callbacks: ClassVar[list[MixinCallback]]

    dependencies: dict[str, str] = {}

    def __init__(self, properties: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        """Assign every given property as an instance attribute, binding plain functions."""
        for key, value in {**(properties or {}), **kwargs}.items():
            if isinstance(value, types.FunctionType):
                value = types.MethodType(value, self)
            setattr(self, key, value)

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        own = dict(cls.__dict__)
        statics = own.get("statics")
        mixins = own.get("mixin")
        on_extending = own.get("on_extending")
        for key in ("statics", "mixin", "on_extending"):
            if key in own:
                delattr(cls, key)

        parent = cls.__mro__[1]
        inherited: dict[str, Any] = getattr(parent, "_statics", {})
        cls._statics = {}
        for key, value in inherited.items():
            if key not in own:
                setattr(cls, key, parent.__dict__.get(key, value))
            cls._statics[key] = cls.__dict__[key]

        if statics:
            cls._apply_statics(statics)
        if mixins is not None:
            cls.mixin(mixins)
        if on_extending is not None:
            if isinstance(on_extending, classmethod | staticmethod):
                on_extending = on_extending.__func__
            on_extending(cls)

    @classmethod
    def extend(cls, *args: Any) -> type[Self]:
        """
        Create a subclass of this class.

        Accepted forms::

            Base.extend()
            Base.extend(properties)
            Base.extend(name)
            Base.extend(name, properties)
            Base.extend(namespace, name)
            Base.extend(namespace, name, properties)

        ``name`` may be a dotted path. The class itself is named after the
        last segment and, when a namespace is given, stored on it under that
        segment. ``dict`` namespaces receive an item, any other object an
        attribute.

        Raises:
            InvalidArgumentError: If an argument has the wrong type
        """
        namespace, class_path, properties = _parse_extend_args(args)
        class_name = class_path.rsplit(".", 1)[-1] if class_path else cls.__name__

        attrs = dict(properties or {})
        attrs.setdefault("__module__", cls.__module__)
        attrs.setdefault("__qualname__", class_name)
        if class_path:
            attrs["_class_path"] = class_path

        subclass: type[Self] = type(cls)(class_name, (cls,), attrs)

        if namespace is not None:
            if isinstance(namespace, dict):
                namespace[class_name] = subclass
            else:
                setattr(namespace, class_name, subclass)
        return subclass

    @classmethod
    def create(cls, *args: Any, **kwargs: Any) -> Self:
        """Instantiate this class with the given constructor arguments."""
        return cls(*args, **kwargs)

    @classmethod
    def is_subclass_of(cls, other: Any) -> bool:
        """Check whether this class is ``other`` or derives from it."""
        return isinstance(other, type) and issubclass(cls, other)

    @classmethod
    def class_path(cls) -> str:
        """The dotted name given to ``extend``, or module and qualified name."""
        return cls.__dict__.get("_class_path") or f"{cls.__module__}.{cls.__qualname__}"

    @classmethod
    def mixin(cls, mixins: Mapping[str, Any] | Iterable[Mapping[str, Any]]) -> type[Self]:
        """
        Merge one mixin dict, or a list of them in order, into this class.

        Each mixin is deep-copied before use so the caller's dict is never
        modified. Special entries:

        - ``on_dependencies_ready``: added to this class's callback list,
        - ``statics``: set on the class side,
        - ``on_mixin_applied``: called with the class, then dropped.

        Every other entry is deep-merged when both sides are dicts, and
        otherwise only set when no class in the chain defines it yet. Slots
        a base class lists in ``_optional_slots`` count as undefined while
        they hold None.

        Raises:
            InvalidArgumentError: If a mixin is not a dict
        """
        if isinstance(mixins, Mapping):
            mixins = [mixins]
        elif not isinstance(mixins, Iterable) or isinstance(mixins, str | bytes):
            raise InvalidArgumentError(f"mixin must be a dict or a list of dicts, got {mixins!r}")

        for mixin in mixins:
            if not isinstance(mixin, Mapping):
                raise InvalidArgumentError(f"mixin must be a dict, got {type(mixin).__name__}")
            cls._apply_mixin(copy.deepcopy(dict(mixin)))
        return cls

    @classmethod
    def _apply_mixin(cls, mixin: dict[str, Any]) -> None:
        callback = mixin.pop("on_dependencies_ready", None)
        if callback is not None:
            if "_mixin_callbacks" not in cls.__dict__:
                cls._mixin_callbacks = []
            cls._mixin_callbacks.append(callback)

        statics = mixin.pop("statics", None)
        if statics:
            cls._apply_statics(statics)

        on_mixin_applied = mixin.pop("on_mixin_applied", None)
        if on_mixin_applied is not None:
            on_mixin_applied(cls)

        for key, value in mixin.items():
            owner = next((klass for klass in cls.__mro__ if key in klass.__dict__), None)
            current = getattr(cls, key, None)
            if isinstance(current, dict) and isinstance(value, dict):
                setattr(cls, key, deep_merge(current, value))
            elif owner is None or (
                current is None and key in owner.__dict__.get("_optional_slots", ())
            ):
                # Unset slots declared by a base class may still be filled by a mixin
                setattr(cls, key, value)

    @classmethod
    def _apply_statics(cls, statics: Mapping[str, Any]) -> None:
        for key, value in statics.items():
            value = _as_static(value)
            setattr(cls, key, value)
            cls._statics[key] = value

    @classmethod
    def mixin_callbacks(cls) -> list[MixinCallback]:
        """All mixin callbacks of the class chain, root ancestor first, without duplicates."""
        callbacks: list[MixinCallback] = []
        for klass in reversed(cls.__mro__):
            for callback in klass.__dict__.get("_mixin_callbacks", ()):
                if callback not in callbacks:
                    callbacks.append(callback)
        return callbacks

    def on_dependencies_ready(self) -> None:
        """Run the mixin callbacks once the injector has assigned all dependencies."""
        for callback in type(self).mixin_callbacks():
            callback(self)
