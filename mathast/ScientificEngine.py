# ScientificEngine
"""
Standard scientific functions for the registry.

Nothing here is registered by default; call install(registry) to add
sin/cos/tan, their inverses, roots, logarithms, rounding helpers, min/max and
the numeric derivative diff(expr, x).
"""

import math

from . import config_manager as config_manager
from . import error as E
from .nodes import Variable
from .registry import VARIADIC, resolve

# Relative step of the central difference used by diff()
DIFF_STEP = 1e-6


def _call_math(name, function, *values):
    try:
        return function(*values)
    except (ValueError, OverflowError, ZeroDivisionError) as e:
        raise E.CalculationError(f"Error with scientific function {name}{values}: {e}", code="3218")


def _unary(name, function):
    def evaluate(walker, args):
        return _call_math(name, function, walker.evaluate(args[0]))
    return evaluate


def _latex_call(command):
    def latex(walker, args):
        return f"{command}\\left({', '.join(walker.render(arg) for arg in args)}\\right)"
    return latex


# -----------------------------
# Trigonometry
# -----------------------------

def _trig(name, function, degree_setting_sincostan):
    def evaluate(walker, args):
        clean_number = walker.evaluate(args[0])
        if degree_setting_sincostan:
            clean_number = math.radians(clean_number)
        return _call_math(name, function, clean_number)
    return evaluate


def _inverse_trig(name, function, degree_setting_sincostan):
    def evaluate(walker, args):
        ergebnis = _call_math(name, function, walker.evaluate(args[0]))
        if degree_setting_sincostan:
            return math.degrees(ergebnis)
        return ergebnis
    return evaluate


# -----------------------------
# Logarithms
# -----------------------------

def _log(walker, args):
    """log(x) is the natural logarithm, log(x, base) any base."""
    if len(args) not in (1, 2):
        raise E.EvaluationError(f"log takes 1 or 2 arguments, got {len(args)}")
    number = walker.evaluate(args[0])
    if len(args) == 1:
        return _call_math("log", math.log, number)
    base = walker.evaluate(args[1])
    return _call_math("log", math.log, number, base)


def _log_latex(walker, args):
    if len(args) == 2:
        return f"\\log_{{{walker.render(args[1])}}}\\left({walker.render(args[0])}\\right)"
    return f"\\ln\\left({walker.render(args[0])}\\right)"


# -----------------------------
# min / max
# -----------------------------

def _extremum(name, function):
    def evaluate(walker, args):
        if not args:
            raise E.EvaluationError(f"{name} needs at least one argument")
        return function(walker.evaluate(arg) for arg in args)
    return evaluate


# -----------------------------
# Numeric derivative
# -----------------------------

def _diff(walker, args):
    """Central difference of args[0] with respect to the variable args[1].

    The variable has to be listed in the context's differentiation names and
    bound to a number; the expression is evaluated twice around that point.
    """
    expression, variable = args
    if not isinstance(variable, Variable):
        raise E.EvaluationError("diff needs a variable as its second argument")
    name = variable.name
    context = walker.context
    if context is None:
        raise E.MissingContextError(f"No parameters given while differentiating by '{name}'")
    if not context.is_differentiation_name(name):
        raise E.EvaluationError(f"'{name}' is not declared as a differentiation variable")

    point = walker.evaluate(variable)
    h = DIFF_STEP * max(1.0, abs(point))
    ahead = walker.with_context(context.with_bindings({name: point + h})).evaluate(expression)
    behind = walker.with_context(context.with_bindings({name: point - h})).evaluate(expression)
    return (ahead - behind) / (2 * h)


def _symbolic(walker, variable):
    """Walker that prints `variable` by name instead of its bound value."""
    if not isinstance(variable, Variable) or walker.context is None:
        return walker
    return walker.with_context(walker.context.without([variable.name]))


def _diff_latex(walker, args):
    symbolic = _symbolic(walker, args[1])
    return f"\\frac{{d}}{{d{symbolic.render(args[1])}}}\\left({symbolic.render(args[0])}\\right)"


def _diff_render(walker, args):
    # The variable stays symbolic, its bound value is only the evaluation point
    symbolic = _symbolic(walker, args[1])
    return f"diff({symbolic.render(args[0])}, {symbolic.render(args[1])})"


def install(registry=None, degree_mode=None):
    """Register the standard function set on `registry` (default: process-wide)."""
    registry = resolve(registry)
    if degree_mode is None:
        degree_mode = bool(config_manager.load_setting_value("degree_mode"))

    for name, function in (("sin", math.sin), ("cos", math.cos), ("tan", math.tan)):
        registry.register_function(name, 1, _trig(name, function, degree_mode),
                                   latex=_latex_call(f"\\{name}"))

    for name, function in (("asin", math.asin), ("acos", math.acos), ("atan", math.atan)):
        registry.register_function(name, 1, _inverse_trig(name, function, degree_mode),
                                   latex=_latex_call(f"\\arc{name[1:]}"))

    registry.register_function("sqrt", 1, _unary("sqrt", math.sqrt),
                               latex=lambda walker, args: f"\\sqrt{{{walker.render(args[0])}}}")
    registry.register_function("exp", 1, _unary("exp", math.exp),
                               latex=lambda walker, args: f"e^{{{walker.render(args[0])}}}")
    registry.register_function("ln", 1, _unary("ln", math.log), latex=_latex_call("\\ln"))
    registry.register_function("log", VARIADIC, _log, latex=_log_latex)
    registry.register_function("abs", 1, _unary("abs", abs),
                               latex=lambda walker, args: f"\\left|{walker.render(args[0])}\\right|")
    registry.register_function("floor", 1, _unary("floor", math.floor),
                               latex=lambda walker, args: f"\\lfloor {walker.render(args[0])} \\rfloor")
    registry.register_function("ceil", 1, _unary("ceil", math.ceil),
                               latex=lambda walker, args: f"\\lceil {walker.render(args[0])} \\rceil")
    registry.register_function("min", VARIADIC, _extremum("min", min), latex=_latex_call("\\min"))
    registry.register_function("max", VARIADIC, _extremum("max", max), latex=_latex_call("\\max"))
    registry.register_function("diff", 2, _diff, render=_diff_render, latex=_diff_latex)
    return registry
