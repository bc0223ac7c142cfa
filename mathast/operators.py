"""
Operator table: precedence, numeric reduction and rendering per symbol.

`+ - * /` are reduced through Decimal at `decimal_precision` digits before
converting back to float, like the calculator engine always did.
"""

from decimal import Decimal, localcontext
import math

from . import config_manager as config_manager
from . import error as E

NONE_PRECEDENCE = -1

# Digits used for the Decimal intermediate results
decimal_precision = config_manager.load_setting_value("decimal_precision") or 50


class OperatorDefinition:
    __slots__ = ("symbol", "precedence", "reduce", "to_infix", "to_latex")

    def __init__(self, symbol, precedence, reduce, to_infix, to_latex):
        self.symbol = symbol
        self.precedence = precedence
        self.reduce = reduce
        self.to_infix = to_infix
        self.to_latex = to_latex

    def __repr__(self):
        return f"OperatorDefinition({self.symbol!r}, precedence={self.precedence})"


def _decimal(operation, a, b):
    """Apply `operation` to a and b as Decimals and return a float."""
    if not (math.isfinite(a) and math.isfinite(b)):
        # Decimal cannot carry nan/inf through every operation; plain floats can
        return float(operation(a, b))
    with localcontext() as ctx:
        ctx.prec = decimal_precision
        return float(operation(Decimal(a), Decimal(b)))


def set_decimal_precision(digits):
    global decimal_precision
    if digits < 1:
        raise ValueError(f"Decimal precision must be positive, got {digits}")
    decimal_precision = digits


def _add(a, b):
    return _decimal(lambda x, y: x + y, a, b)


def _sub(a, b):
    return _decimal(lambda x, y: x - y, a, b)


def _mul(a, b):
    return _decimal(lambda x, y: x * y, a, b)


def _div(a, b):
    if b == 0:
        raise E.DivisionByZeroError(f"Division by zero: [{a:g}/{b:g}]")
    return _decimal(lambda x, y: x / y, a, b)


def _mod(a, b):
    if b == 0:
        raise E.DivisionByZeroError(f"Division by zero: [{a:g}%{b:g}]")
    if not (math.isfinite(a) and math.isfinite(b)):
        raise E.CalculationError(f"Modulo needs finite operands: [{a:g}%{b:g}]", code="3004")
    dividend = int(a)
    divisor = int(b)
    if divisor == 0:
        # 0 < |b| < 1 truncates to zero
        raise E.DivisionByZeroError(f"Division by zero: [{a:g}%{b:g}]")
    # Truncated remainder: sign follows the dividend
    remainder = abs(dividend) % abs(divisor)
    return float(-remainder if dividend < 0 else remainder)


def _is_odd_integer(value):
    return math.isfinite(value) and value == int(value) and int(value) % 2 == 1


def _pow(a, b):
    """Real exponentiation; invalid domains give nan or inf instead of raising."""
    try:
        return math.pow(a, b)
    except OverflowError:
        if a < 0 and _is_odd_integer(b):
            return -math.inf
        return math.inf
    except ValueError:
        if a == 0 and b < 0:
            if _is_odd_integer(b):
                return math.copysign(math.inf, a)
            return math.inf
        return math.nan


def _no_result(a, b):
    return 0.0


def _no_render(a, b):
    return ""


def _minus_infix(a, b):
    # An empty left side is the unary minus placeholder
    if a == "":
        return f"-{b}"
    return f"{a} - {b}"


OPERATORS = {
    '(': OperatorDefinition('(', NONE_PRECEDENCE, _no_result, _no_render, _no_render),
    ')': OperatorDefinition(')', NONE_PRECEDENCE, _no_result, _no_render, _no_render),
    '+': OperatorDefinition('+', 20, _add,
                            lambda a, b: f"{a} + {b}",
                            lambda a, b: f"{a} + {b}"),
    '-': OperatorDefinition('-', 20, _sub, _minus_infix, _minus_infix),
    '*': OperatorDefinition('*', 40, _mul,
                            lambda a, b: f"{a} * {b}",
                            lambda a, b: f"{a} \\times {b}"),
    '/': OperatorDefinition('/', 40, _div,
                            lambda a, b: f"{a}/{b}",
                            lambda a, b: f"\\frac{{{a}}}{{{b}}}"),
    '%': OperatorDefinition('%', 40, _mod,
                            lambda a, b: f"({a} % {b})",
                            lambda a, b: f"({a} \\bmod {b})"),
    '^': OperatorDefinition('^', 60, _pow,
                            lambda a, b: f"{a}^{b}",
                            lambda a, b: f"{a}^{{{b}}}"),
}


def is_operator(symbol):
    return symbol in OPERATORS


def get_operator(symbol):
    """Return the OperatorDefinition for `symbol` or None."""
    return OPERATORS.get(symbol)


def precedence_of(symbol):
    definition = OPERATORS.get(symbol)
    if definition is None:
        return NONE_PRECEDENCE
    return definition.precedence
