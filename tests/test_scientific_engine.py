"""
Tests for the scientific function set.
"""

import math

import pytest

from mathast import MathEngine, ScientificEngine
from mathast import error as E
from mathast import evaluator, printer
from mathast.nodes import EvaluationContext
from mathast.registry import Registry


@pytest.fixture
def sci(scientific_registry):
    def _sci(source, context=None):
        tree = MathEngine.parse_expression(source, scientific_registry)
        return evaluator.evaluate(tree, context, scientific_registry)
    return _sci


@pytest.fixture
def diff_context():
    return EvaluationContext({"x": 3}, differentiation_names=["x"])


class TestFunctions:
    @pytest.mark.parametrize(
        "source, expected",
        [
            ("sin(0)", 0.0),
            ("cos(pi)", -1.0),
            ("tan(pi/4)", 1.0),
            ("asin(1)", math.pi / 2),
            ("sqrt(16)", 4.0),
            ("exp(0)", 1.0),
            ("ln(e)", 1.0),
            ("log(e^2)", 2.0),
            ("log(8, 2)", 3.0),
            ("abs(-3)", 3.0),
            ("floor(2.7)", 2.0),
            ("ceil(2.1)", 3.0),
            ("min(4, -1, 3)", -1.0),
            ("max(4, -1, 3)", 4.0),
            ("sqrt(abs(-9)) + 1", 4.0),
        ],
    )
    def test_values(self, sci, source, expected):
        assert sci(source) == pytest.approx(expected)

    def test_domain_error(self, sci):
        with pytest.raises(E.CalculationError) as exc_info:
            sci("sqrt(-1)")
        assert exc_info.value.code == "3218"

    def test_log_of_zero(self, sci):
        with pytest.raises(E.CalculationError):
            sci("ln(0)")

    @pytest.mark.parametrize("source", ["log()", "log(1, 2, 3)", "min()"])
    def test_variadic_argument_counts(self, sci, source):
        with pytest.raises(E.EvaluationError):
            sci(source)

    def test_fixed_arity_checked_at_parse_time(self, scientific_registry):
        with pytest.raises(E.ArityError):
            MathEngine.parse_expression("sin(1, 2)", scientific_registry)


class TestDegreeMode:
    @pytest.fixture
    def degrees(self):
        registry = ScientificEngine.install(Registry(), degree_mode=True)

        def _degrees(source):
            return evaluator.evaluate(MathEngine.parse_expression(source, registry), None, registry)
        return _degrees

    def test_trigonometry_in_degrees(self, degrees):
        assert degrees("sin(90)") == pytest.approx(1.0)
        assert degrees("cos(180)") == pytest.approx(-1.0)

    def test_inverse_trigonometry_in_degrees(self, degrees):
        assert degrees("asin(1)") == pytest.approx(90.0)
        assert degrees("atan(1)") == pytest.approx(45.0)


class TestDiff:
    def test_derivative_of_square(self, sci, diff_context):
        assert sci("diff(x^2, x)", diff_context) == pytest.approx(6.0, rel=1e-6)

    def test_derivative_of_sine(self, sci):
        context = EvaluationContext({"x": 0}, differentiation_names=["x"])
        assert sci("diff(sin(x), x)", context) == pytest.approx(1.0, rel=1e-6)

    def test_derivative_through_substitution(self, sci):
        context = EvaluationContext({"x": 2, "f": "x^3"}, differentiation_names=["x"])
        assert sci("diff(f, x)", context) == pytest.approx(12.0, rel=1e-6)

    def test_variable_must_be_declared(self, sci):
        with pytest.raises(E.EvaluationError):
            sci("diff(x^2, x)", EvaluationContext({"x": 3}))

    def test_second_argument_must_be_variable(self, sci, diff_context):
        with pytest.raises(E.EvaluationError):
            sci("diff(x^2, 2)", diff_context)

    def test_needs_context(self, sci):
        with pytest.raises(E.MissingContextError):
            sci("diff(x^2, x)")

    def test_unbound_point(self, sci):
        with pytest.raises(E.UnboundVariableError):
            sci("diff(x^2, x)", EvaluationContext({}, differentiation_names=["x"]))


class TestRendering:
    def test_diff_keeps_variable_symbolic(self, scientific_registry, diff_context):
        tree = MathEngine.parse_expression("diff(x^2, x) + x", scientific_registry)
        assert printer.render(tree, diff_context, scientific_registry) == "diff(x^2, x) + 3"
        assert printer.render_latex(tree, diff_context, scientific_registry) == (
            "\\frac{d}{dx}\\left(x^{2}\\right) + 3")

    @pytest.mark.parametrize(
        "source, expected",
        [
            ("sqrt(16)", "\\sqrt{16}"),
            ("sin(x)", "\\sin\\left(x\\right)"),
            ("acos(x)", "\\arccos\\left(x\\right)"),
            ("log(8, 2)", "\\log_{2}\\left(8\\right)"),
            ("log(8)", "\\ln\\left(8\\right)"),
            ("abs(x)", "\\left|x\\right|"),
            ("exp(x)", "e^{x}"),
        ],
    )
    def test_latex(self, scientific_registry, source, expected):
        tree = MathEngine.parse_expression(source, scientific_registry)
        assert printer.render_latex(tree, None, scientific_registry) == expected

    def test_infix_uses_generic_form(self, scientific_registry):
        tree = MathEngine.parse_expression("max(1, x)", scientific_registry)
        assert printer.render(tree, None, scientific_registry) == "max(1, x)"


class TestInstall:
    def test_installs_into_given_registry(self):
        registry = ScientificEngine.install(Registry(), degree_mode=False)
        assert {"sin", "log", "diff", "min"} <= set(registry.function_names())

    def test_installing_twice_fails(self, scientific_registry):
        with pytest.raises(E.RegistryError):
            ScientificEngine.install(scientific_registry, degree_mode=False)
