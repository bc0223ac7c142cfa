# MathEngine.py
"""
Public entry points of the expression engine.

Pipeline
--------
1) Lexer: converts a raw input string into a flat list of tokens.
2) Parser (AST): builds an Abstract Syntax Tree (recursive-descent, precedence climbing).
3) Evaluator / Printer: reduce the tree to a float, or render it as infix text or LaTeX,
   under a caller supplied EvaluationContext.
4) Formatter: renders results using Decimal and the `decimal_places` setting.
"""

import logging
from decimal import Decimal, localcontext
import math

from . import config_manager as config_manager
from . import error as E
from . import evaluator as evaluator
from . import operators as operators
from . import parser as parser_module
from . import printer as printer
from .lexer import tokenize
from .nodes import EvaluationContext
from .parser import parse
from .registry import get_default_registry, resolve

logger = logging.getLogger(__name__)


def parse_expression(source, registry=None):
    """Parse `source` into an ExpressionNode; raises LexError or a ParseError."""
    registry = resolve(registry)
    return parse(tokenize(source), source, registry)


def evaluate(node, context=None, registry=None):
    """Reduce `node` to a float; raises CalculationError or EvaluationError."""
    return evaluator.evaluate(node, context, registry)


def render(node, context=None, registry=None):
    """Render `node` as linear infix text. Never fails on unresolved names."""
    return printer.render(node, context, registry)


def render_latex(node, context=None, registry=None):
    return printer.render_latex(node, context, registry)


def configure(settings=None):
    """Apply precision and depth limits from `settings` (default: config.json)."""
    if settings is None:
        settings = config_manager.load_setting_value("all")
    operators.set_decimal_precision(settings["decimal_precision"])
    parser_module.max_parse_depth = settings["max_parse_depth"]
    evaluator.max_substitution_depth = settings["max_substitution_depth"]
    logger.debug("Engine configured: precision=%s parse depth=%s substitution depth=%s",
                 settings["decimal_precision"], settings["max_parse_depth"],
                 settings["max_substitution_depth"])


def register_function(name, arity, evaluate, render=None, latex=None):
    return get_default_registry().register_function(name, arity, evaluate, render, latex)


def register_constant(name, value):
    get_default_registry().register_constant(name, value)


def register_constant_display_form(name, rendered_form):
    get_default_registry().register_constant_display_form(name, rendered_form)


# -----------------------------
# Result formatting
# -----------------------------

def format_result(ergebnis, decimal_places=None):
    """Format a float result for display.

    Returns:
        (rendered_value, rounding_flag)
    where rounding_flag indicates whether Decimal rounding occurred.
    """
    rounding = False

    if not math.isfinite(ergebnis):
        return str(ergebnis), rounding

    if decimal_places is None:
        decimal_places = config_manager.load_setting_value("decimal_places")

    value = Decimal(repr(ergebnis))
    if value == value.to_integral_value():
        # Integer result - return normalized without rounding
        return f"{value.normalize():f}", rounding

    with localcontext() as ctx:
        ctx.prec = 128  # Prevent quantize overflow
        if decimal_places >= 0:
            rundungs_muster = Decimal('1e-' + str(decimal_places))
        else:
            rundungs_muster = Decimal('1')
        gerundetes_ergebnis = value.quantize(rundungs_muster)

    if gerundetes_ergebnis != value:
        rounding = True

    return f"{gerundetes_ergebnis.normalize():f}", rounding


# -----------------------------
# Calculator entry point
# -----------------------------

def calculate(problem, variables=None, registry=None, differentiation_names=None):
    """Main API: parse → evaluate → format → render string ("= 7" or "≈ 0.33")."""
    try:
        context = EvaluationContext(variables, differentiation_names)
        finaler_baum = parse_expression(problem, registry)
        ergebnis = evaluate(finaler_baum, context, registry)
        ausgabe_string, rounding = format_result(ergebnis)

        ungefaehr_zeichen = "\u2248"  # "≈"
        if rounding:
            return f"{ungefaehr_zeichen} {ausgabe_string}"
        return f"= {ausgabe_string}"

    # Re-raise our domain errors after attaching the source equation
    except E.MathError as e:
        e.equation = problem
        raise e
    except RecursionError:
        raise E.CalculationError("Expression is too long to evaluate.", code="3033", equation=problem)
    # Convert unexpected Python exceptions to our unified error type
    except Exception as e:
        logger.exception("Unexpected error while calculating %r", problem)
        raise E.MathError(message=str(e).strip(), code="9999", equation=problem) from e
