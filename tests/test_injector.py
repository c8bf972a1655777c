#!/usr/bin/env python3
"""
Unit tests for the Injector: mapping, overriding, resolution and injection.
"""

import unittest

from space.base import (
    BindingStrategy,
    DuplicateBindingError,
    Injector,
    InvalidArgumentError,
    SpaceObject,
    UnknownKeyError,
)


class TestMapping(unittest.TestCase):
    """Test binding keys with map and override."""

    def setUp(self) -> None:
        self.injector = Injector()

    def test_static_value(self) -> None:
        value = object()
        self.injector.map("k").to(value)

        self.assertIs(self.injector.get("k"), value)

    def test_to_static_value_alias(self) -> None:
        self.injector.map("k").to_static_value("value")

        self.assertEqual(self.injector.get("k"), "value")
        self.assertEqual(self.injector.get_binding("k").strategy, BindingStrategy.STATIC_VALUE)

    def test_map_existing_key_fails(self) -> None:
        self.injector.map("k").to("v")

        with self.assertRaises(DuplicateBindingError) as ctx:
            self.injector.map("k").to("v2")

        self.assertEqual(ctx.exception.key, "k")
        self.assertEqual(self.injector.get("k"), "v")

    def test_override_replaces_binding(self) -> None:
        self.injector.map("k").to("v")
        self.injector.override("k").to("v2")

        self.assertEqual(self.injector.get("k"), "v2")

    def test_override_unknown_key_fails(self) -> None:
        with self.assertRaises(UnknownKeyError):
            self.injector.override("missing")

    def test_get_unknown_key_fails(self) -> None:
        with self.assertRaises(UnknownKeyError) as ctx:
            self.injector.get("missing")

        self.assertEqual(ctx.exception.key, "missing")
        self.assertIn("missing", str(ctx.exception))

    def test_invalid_key_type(self) -> None:
        with self.assertRaises(InvalidArgumentError):
            self.injector.map(42)

    def test_has_mapping_find_and_remove(self) -> None:
        self.injector.map("k").to("v")

        self.assertTrue(self.injector.has_mapping("k"))
        self.assertEqual(self.injector.find("k"), "v")
        self.assertIsNone(self.injector.find("other"))
        self.assertEqual(self.injector.keys(), ["k"])

        self.injector.remove("k")

        self.assertFalse(self.injector.has_mapping("k"))
        with self.assertRaises(UnknownKeyError):
            self.injector.remove("k")

    def test_class_keys_use_class_path(self) -> None:
        Service = SpaceObject.extend("my.app.Service")
        self.injector.map(Service).as_singleton()

        self.assertIsInstance(self.injector.get("my.app.Service"), Service)
        self.assertIs(self.injector.get(Service), self.injector.get("my.app.Service"))

    def test_as_static_value_binds_the_class(self) -> None:
        Service = SpaceObject.extend("my.app.Service")
        self.injector.map(Service).as_static_value()

        self.assertIs(self.injector.get(Service), Service)

    def test_as_singleton_requires_class_key(self) -> None:
        with self.assertRaises(InvalidArgumentError):
            self.injector.map("plain").as_singleton()


class TestSingletons(unittest.TestCase):
    """Test lazy singleton bindings."""

    def setUp(self) -> None:
        self.injector = Injector()

    def test_singleton_identity_and_single_construction(self) -> None:
        constructed = []

        class Counter:
            def __init__(self) -> None:
                constructed.append(self)

        self.injector.map("S").to_singleton(Counter)

        self.assertEqual(constructed, [])
        first = self.injector.get("S")
        second = self.injector.get("S")

        self.assertIs(first, second)
        self.assertEqual(constructed, [first])

    def test_singleton_created_with_create(self) -> None:
        created = []

        def __init__(self) -> None:
            created.append("init")

        Service = SpaceObject.extend(
            {"__init__": __init__, "statics": {"create": lambda cls: created.append("create") or cls()}}
        )
        self.injector.map("service").to_singleton(Service)

        self.assertIsInstance(self.injector.get("service"), Service)
        self.assertEqual(created, ["create", "init"])

    def test_singleton_dependencies_are_injected(self) -> None:
        Service = SpaceObject.extend("Service", {"dependencies": {"db": "database"}})
        database = object()
        self.injector.map("database").to(database)
        self.injector.map("service").to_singleton(Service)

        self.assertIs(self.injector.get("service").db, database)

    def test_create_forces_creation(self) -> None:
        constructed = []

        class Eager:
            def __init__(self) -> None:
                constructed.append(self)

        self.injector.map("eager").to_singleton(Eager)
        instance = self.injector.create("eager")

        self.assertEqual(constructed, [instance])
        self.assertIs(self.injector.create("eager"), instance)
        self.assertIs(self.injector.get("eager"), instance)
        self.assertTrue(self.injector.get_binding("eager").is_instantiated)

    def test_create_unknown_key_fails(self) -> None:
        with self.assertRaises(UnknownKeyError):
            self.injector.create("missing")

    def test_mutually_dependent_singletons(self) -> None:
        A = SpaceObject.extend("A", {"dependencies": {"b": "b"}})
        B = SpaceObject.extend("B", {"dependencies": {"a": "a"}})
        self.injector.map("a").to_singleton(A)
        self.injector.map("b").to_singleton(B)

        a = self.injector.get("a")

        self.assertIs(a.b.a, a)

    def test_failed_injection_does_not_cache(self) -> None:
        Service = SpaceObject.extend("Service", {"dependencies": {"db": "database"}})
        self.injector.map("service").to_singleton(Service)

        with self.assertRaises(UnknownKeyError):
            self.injector.get("service")
        self.assertFalse(self.injector.get_binding("service").is_instantiated)

        self.injector.map("database").to("db")
        self.assertEqual(self.injector.get("service").db, "db")

    def test_override_replaces_singleton(self) -> None:
        First = SpaceObject.extend("First")
        Second = SpaceObject.extend("Second")
        self.injector.map("s").to_singleton(First)
        self.injector.get("s")

        self.injector.override("s").to_singleton(Second)

        self.assertIsInstance(self.injector.get("s"), Second)


class TestFactories(unittest.TestCase):
    """Test bindings that produce a new object on every access."""

    def setUp(self) -> None:
        self.injector = Injector()

    def test_instances_of_creates_new_objects(self) -> None:
        Service = SpaceObject.extend("Service", {"dependencies": {"name": "name"}})
        self.injector.map("name").to("service")
        self.injector.map("service").to_instances_of(Service)

        first = self.injector.get("service")
        second = self.injector.get("service")

        self.assertIsNot(first, second)
        self.assertEqual(first.name, "service")
        self.assertEqual(self.injector.get_binding("service").strategy, BindingStrategy.FACTORY)

    def test_factory_callable(self) -> None:
        counter = iter(range(10))
        self.injector.map("next").to_factory(lambda: next(counter))

        self.assertEqual(self.injector.get("next"), 0)
        self.assertEqual(self.injector.get("next"), 1)


class TestInjectInto(unittest.TestCase):
    """Test property injection into existing objects."""

    def setUp(self) -> None:
        self.injector = Injector()

    def test_injects_declared_dependencies(self) -> None:
        target = SpaceObject.create()
        target.dependencies = {"db": "database", "log": "logger"}
        self.injector.map("database").to("db")
        self.injector.map("logger").to("log")

        result = self.injector.inject_into(target)

        self.assertIs(result, target)
        self.assertEqual(target.db, "db")
        self.assertEqual(target.log, "log")

    def test_missing_key_names_the_dependent(self) -> None:
        Consumer = SpaceObject.extend("Consumer", {"dependencies": {"db": "database"}})

        with self.assertRaises(UnknownKeyError) as ctx:
            self.injector.inject_into(Consumer.create())

        self.assertEqual(ctx.exception.key, "database")
        self.assertEqual(ctx.exception.dependent, "Consumer")
        self.assertIn("required by Consumer", str(ctx.exception))

    def test_dependencies_ready_runs_after_injection(self) -> None:
        seen = []
        Consumer = SpaceObject.extend(
            "Consumer",
            {
                "dependencies": {"db": "database"},
                "mixin": {"on_dependencies_ready": lambda self: seen.append(self.db)},
            },
        )
        self.injector.map("database").to("db")

        self.injector.inject_into(Consumer.create())

        self.assertEqual(seen, ["db"])

    def test_repeated_injection_re_resolves(self) -> None:
        target = SpaceObject.create(dependencies={"value": "value"})
        self.injector.map("value").to(1)
        self.injector.inject_into(target)

        self.injector.override("value").to(2)
        self.injector.inject_into(target)

        self.assertEqual(target.value, 2)

    def test_plain_objects_without_dependencies(self) -> None:
        class Plain:
            pass

        target = Plain()

        self.assertIs(self.injector.inject_into(target), target)


if __name__ == "__main__":
    unittest.main()
