"""
Tests for the function and constant registry.
"""

import math
import threading

import pytest

from mathast import error as E
from mathast import printer
from mathast.nodes import FunctionCall, NumberLiteral, Variable
from mathast.registry import (VARIADIC, Registry, get_default_registry,
                              reset_default_registry, resolve)


def constant_one(walker, args):
    return 1.0


class TestDefaults:
    def test_default_constants(self, registry):
        assert registry.get_constant("pi") == math.pi
        assert registry.get_constant("e") == math.e
        assert registry.get_constant("infty") == 0.0
        assert registry.constant_names() == ["e", "infty", "pi"]

    def test_default_display_forms(self, registry):
        assert registry.get_constant_display_form("pi") == "π"
        assert registry.get_constant_display_form("infty") == "\\infty"

    def test_no_default_functions(self, registry):
        assert registry.function_names() == []

    def test_missing_lookups_return_none(self, registry):
        assert registry.get_function("nope") is None
        assert registry.get_constant("nope") is None
        assert registry.get_constant_display_form("nope") is None


class TestFunctionRegistration:
    def test_register_and_lookup(self, registry):
        definition = registry.register_function("one", 0, constant_one)
        assert registry.get_function("one") is definition
        assert registry.has_function("one")
        assert definition.accepts(0)
        assert not definition.accepts(1)

    def test_variadic(self, registry):
        definition = registry.register_function("sum", VARIADIC, constant_one)
        assert definition.is_variadic()
        assert definition.accepts(0)
        assert definition.accepts(7)

    def test_duplicate_name(self, registry):
        registry.register_function("one", 0, constant_one)
        with pytest.raises(E.RegistryError) as exc_info:
            registry.register_function("one", 1, constant_one)
        assert exc_info.value.code == "5001"

    @pytest.mark.parametrize("name, arity, evaluate", [
        ("", 1, constant_one),
        ("f", -2, constant_one),
        ("f", 1.5, constant_one),
        ("f", 1, None),
    ])
    def test_invalid_registrations(self, registry, name, arity, evaluate):
        with pytest.raises(E.RegistryError):
            registry.register_function(name, arity, evaluate)

    def test_generic_renderer(self, registry):
        registry.register_function("f", 2, constant_one)
        call = FunctionCall("f", [NumberLiteral(1.0, "1"), Variable("x")])
        assert printer.render(call, registry=registry) == "f(1, x)"


class TestConstantRegistration:
    def test_register_constant(self, registry):
        registry.register_constant("tau", 2 * math.pi)
        assert registry.get_constant("tau") == 2 * math.pi
        assert registry.has_constant("tau")

    def test_duplicate_constant(self, registry):
        with pytest.raises(E.RegistryError):
            registry.register_constant("pi", 3.0)

    def test_empty_constant_name(self, registry):
        with pytest.raises(E.RegistryError):
            registry.register_constant("", 3.0)

    def test_display_form(self, registry):
        registry.register_constant_display_form("tau", "\\tau")
        assert registry.get_constant_display_form("tau") == "\\tau"
        with pytest.raises(E.RegistryError):
            registry.register_constant_display_form("pi", "PI")

    def test_custom_constant_table(self):
        bare = Registry(constants={}, display_forms={})
        assert bare.constant_names() == []


class TestDefaultRegistry:
    def test_singleton(self):
        assert get_default_registry() is get_default_registry()

    def test_reset(self):
        first = get_default_registry()
        reset_default_registry()
        assert get_default_registry() is not first

    def test_resolve(self, registry):
        assert resolve(registry) is registry
        assert resolve(None) is get_default_registry()


class TestConcurrentRegistration:
    def test_each_name_registered_once(self, registry):
        errors = []

        def worker(index):
            try:
                registry.register_function(f"f{index}", 1, constant_one)
            except E.RegistryError as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(i % 10,)) for i in range(40)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(registry.function_names()) == 10
        assert len(errors) == 30
