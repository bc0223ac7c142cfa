"""
Tests for the tree-walking evaluator and the evaluation context.
"""

import math
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from fractions import Fraction

import pytest

from mathast import error as E
from mathast import evaluator, printer
from mathast.evaluator import Evaluator
from mathast.nodes import EvaluationContext, FunctionCall, make_context


@pytest.fixture
def calc(parse, registry):
    """Parse and evaluate in one step."""
    def _calc(source, context=None):
        return evaluator.evaluate(parse(source), context, registry)
    return _calc


# =============================================================================
# Arithmetic
# =============================================================================


class TestArithmetic:
    @pytest.mark.parametrize(
        "source, expected",
        [
            ("1+2*3", 7.0),
            ("(1+2)*3", 9.0),
            ("2^3^2", 64.0),
            ("-5+2", -3.0),
            ("2*-3", -6.0),
            ("-(1+2)^2", 9.0),
            ("7 % 3 * 2", 2.0),
            ("10/4", 2.5),
            ("1e5-3", 99997.0),
            ("1_000.5 + 0.5", 1001.0),
            ("0.1+0.2", 0.3),
        ],
    )
    def test_values(self, calc, source, expected):
        assert calc(source) == pytest.approx(expected)

    def test_constants(self, calc):
        assert calc("2*pi") == pytest.approx(2 * math.pi)
        assert calc("infty") == 0.0

    def test_division_by_zero_parses_but_fails(self, parse, calc):
        parse("1/0")
        with pytest.raises(E.DivisionByZeroError):
            calc("1/0")
        with pytest.raises(E.DivisionByZeroError):
            calc("1%0")

    def test_invalid_power_is_nan(self, calc):
        assert math.isnan(calc("(0-8)^0.5"))
        assert calc("10^400") == math.inf


# =============================================================================
# Variables
# =============================================================================


class TestVariables:
    def test_number_binding(self, calc):
        assert calc("x+1", make_context(x=5)) == 6.0

    @pytest.mark.parametrize("value", [5, 5.0, Decimal("5"), Fraction(10, 2)])
    def test_number_types(self, calc, value):
        assert calc("x*2", EvaluationContext({"x": value})) == 10.0

    @pytest.mark.parametrize("value", [10 ** 400, Fraction(10 ** 400, 3)])
    def test_number_too_big_for_float(self, calc, value):
        with pytest.raises(E.CalculationError) as exc_info:
            calc("x+1", EvaluationContext({"x": value}))
        assert exc_info.value.code == "3026"

    def test_unbound_variable(self, calc):
        with pytest.raises(E.UnboundVariableError) as exc_info:
            calc("y+1", make_context(x=5))
        assert exc_info.value.name == "y"
        assert exc_info.value.code == "3035"

    def test_missing_context(self, calc):
        with pytest.raises(E.MissingContextError):
            calc("y+1")

    def test_string_binding_is_parsed(self, calc):
        context = EvaluationContext({"x": "2*y", "y": 3})
        assert calc("x+1", context) == 7.0

    def test_node_binding(self, parse, calc):
        context = EvaluationContext({"x": parse("2*3")})
        assert calc("x+1", context) == 7.0

    def test_string_binding_keeps_grouping(self, calc):
        context = EvaluationContext({"x": "1+2"})
        assert calc("x*3", context) == 9.0

    def test_broken_string_binding(self, calc):
        with pytest.raises(E.ParseError):
            calc("x", EvaluationContext({"x": "1 +"}))

    def test_self_reference(self, calc):
        with pytest.raises(E.CyclicSubstitutionError) as exc_info:
            calc("x", EvaluationContext({"x": "x+1"}))
        assert exc_info.value.name == "x"

    def test_mutual_reference(self, calc):
        with pytest.raises(E.CyclicSubstitutionError):
            calc("x", EvaluationContext({"x": "y", "y": "2*x"}))

    def test_same_variable_twice_is_not_a_cycle(self, calc):
        context = EvaluationContext({"x": "y*y", "y": 3})
        assert calc("x+x", context) == 18.0

    def test_substitution_depth(self, parse, registry):
        bindings = {f"a{i}": f"a{i + 1}" for i in range(5)}
        bindings["a5"] = 1
        context = EvaluationContext(bindings)
        with pytest.raises(E.SubstitutionDepthError):
            Evaluator(context, registry, max_depth=3).evaluate(parse("a0"))
        assert Evaluator(context, registry, max_depth=10).evaluate(parse("a0")) == 1.0


class TestContext:
    @pytest.mark.parametrize("value", [True, [1], None, {"a": 1}])
    def test_rejected_values(self, value):
        with pytest.raises(E.ContextError) as exc_info:
            EvaluationContext({"x": value})
        assert exc_info.value.code == "3038"

    def test_with_bindings_leaves_original(self):
        context = make_context(x=1)
        changed = context.with_bindings({"x": 2, "x'": 3})
        assert context.lookup("x")[1] == 1
        assert changed.lookup("x")[1] == 2
        assert "x'" in changed

    def test_without(self):
        context = make_context(x=1, y=2).without(["x"])
        assert "x" not in context
        assert "y" in context

    def test_differentiation_names(self):
        context = make_context(differentiation_names=["x"], x=1)
        assert context.is_differentiation_name("x")
        assert not context.is_differentiation_name("y")
        assert context.with_bindings({"x": 2}).is_differentiation_name("x")


# =============================================================================
# Functions
# =============================================================================


class TestFunctions:
    def test_arguments_are_evaluated_lazily(self, registry, calc):
        registry.register_function("first", 2, lambda walker, args: walker.evaluate(args[0]))
        assert calc("first(1, 1/0)") == 1.0

    def test_function_sees_context(self, registry, calc):
        registry.register_function("double", 1, lambda walker, args: 2 * walker.evaluate(args[0]))
        assert calc("double(x)+1", make_context(x=4)) == 9.0

    def test_argument_evaluated_as_often_as_requested(self, registry, calc):
        calls = []

        def count(walker, args):
            calls.append(1)
            return 1.0

        registry.register_function("count", 0, count)
        registry.register_function("twice", 1,
                                   lambda walker, args: walker.evaluate(args[0]) + walker.evaluate(args[0]))
        assert calc("twice(count())") == 2.0
        assert len(calls) == 2

    def test_function_errors_propagate(self, registry, calc):
        def fail(walker, args):
            raise E.CalculationError("nope", code="3004")

        registry.register_function("fail", 0, fail)
        with pytest.raises(E.CalculationError):
            calc("1 + fail()")

    def test_unregistered_function_node(self, registry):
        with pytest.raises(E.UndefinedFunctionError):
            evaluator.evaluate(FunctionCall("ghost", []), None, registry)


# =============================================================================
# Round trip and sharing
# =============================================================================


class TestRoundTrip:
    @pytest.mark.parametrize(
        "source",
        [
            "1+2*3",
            "(1+2)*3",
            "2^3^2",
            "-5+2",
            "2*-3",
            "7 % 3 * 2",
            "-(1+2)^2",
            "x*(y-1)/4",
            "1e5-3",
            "1_000.5 + pi",
            "2*x^-1",
            "z*2",
        ],
    )
    def test_rendered_text_evaluates_the_same(self, parse, registry, source):
        context = EvaluationContext({"x": 2.5, "y": -3, "z": "x+y"})
        tree = parse(source)
        rendered = printer.render(tree, context, registry)
        assert evaluator.evaluate(parse(rendered), context, registry) == pytest.approx(
            evaluator.evaluate(tree, context, registry))


class TestSharedTrees:
    def test_concurrent_evaluation(self, parse, registry):
        tree = parse("x^2 + y")

        def run(i):
            return evaluator.evaluate(tree, make_context(x=i, y=1), registry)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(run, range(100)))

        assert results == [float(i * i + 1) for i in range(100)]
