"""
AST node types, tokens and the evaluation context.

Tokens and nodes are immutable once built: attributes are set in __init__,
reassignment raises AttributeError, and child collections are tuples, so a tree can be shared by
several evaluations at the same time.
"""

from decimal import Decimal
from enum import Enum, auto
import numbers

from . import error as E


class TokenKind(Enum):
    IDENTIFIER = auto()
    LITERAL = auto()
    OPERATOR = auto()
    COMMA = auto()


class Frozen:
    """Attributes are assigned once in __init__ through _assign and are read-only afterwards."""
    __slots__ = ()

    def _assign(self, **fields):
        for name, value in fields.items():
            object.__setattr__(self, name, value)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable, cannot set '{name}'")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is immutable, cannot delete '{name}'")


class Token(Frozen):
    __slots__ = ("kind", "text", "offset")

    def __init__(self, kind, text, offset):
        self._assign(kind=kind, text=text, offset=offset)

    def __eq__(self, other):
        return (isinstance(other, Token) and self.kind == other.kind
                and self.text == other.text and self.offset == other.offset)

    def __repr__(self):
        return f"Token({self.kind.name}, {self.text!r}, {self.offset})"


# -----------------------------
# AST node types
# -----------------------------

class ExpressionNode(Frozen):
    """Base class of every AST node."""
    __slots__ = ()

    def __eq__(self, other):
        return type(self) is type(other) and self._key() == other._key()

    def __hash__(self):
        return hash((type(self).__name__, self._key()))

    def _key(self):
        raise NotImplementedError


class NumberLiteral(ExpressionNode):
    """Numeric literal; `rendering` keeps the text the user typed."""
    __slots__ = ("value", "rendering")

    def __init__(self, value, rendering):
        self._assign(value=float(value), rendering=rendering)

    def _key(self):
        return (self.value, self.rendering)

    def __repr__(self):
        return f"NumberLiteral({self.rendering!r})"


class Constant(ExpressionNode):
    """Registry constant, value frozen when the expression was parsed."""
    __slots__ = ("name", "value", "rendering")

    def __init__(self, name, value, rendering):
        self._assign(name=name, value=float(value), rendering=rendering)

    def _key(self):
        return (self.name, self.value, self.rendering)

    def __repr__(self):
        return f"Constant({self.name}={self.value!r})"


class Variable(ExpressionNode):
    __slots__ = ("name",)

    def __init__(self, name):
        self._assign(name=name)

    def _key(self):
        return (self.name,)

    def __repr__(self):
        return f"Variable('{self.name}')"


class BinaryOperation(ExpressionNode):
    """AST node for a binary operation: left <operator> right.

    `parenthesized` records that the user wrapped this operation in brackets;
    the printer keeps the brackets, the evaluator ignores the flag.
    """
    __slots__ = ("operator_symbol", "left", "right", "parenthesized")

    def __init__(self, operator_symbol, left, right, parenthesized=False):
        self._assign(operator_symbol=operator_symbol, left=left, right=right,
                     parenthesized=parenthesized)

    def with_parentheses(self):
        return BinaryOperation(self.operator_symbol, self.left, self.right, parenthesized=True)

    def _key(self):
        return (self.operator_symbol, self.left, self.right, self.parenthesized)

    def __repr__(self):
        return f"BinaryOperation({self.operator_symbol!r}, left={self.left}, right={self.right})"


class FunctionCall(ExpressionNode):
    __slots__ = ("name", "arguments")

    def __init__(self, name, arguments):
        self._assign(name=name, arguments=tuple(arguments))

    def _key(self):
        return (self.name, self.arguments)

    def __repr__(self):
        return f"FunctionCall({self.name}, {list(self.arguments)})"


def unary_minus(operand):
    """Unary minus is stored as `0 - operand` with an empty placeholder rendering."""
    return BinaryOperation('-', NumberLiteral(0.0, ""), operand)


# -----------------------------
# Evaluation context
# -----------------------------

class BindingKind(Enum):
    NUMBER = auto()
    SOURCE = auto()
    NODE = auto()


def classify_binding(name, value):
    """Return the BindingKind of a bound value; reject anything else."""
    if isinstance(value, bool):
        raise E.ContextError(f"Parameter '{name}' is a boolean, expected a number, string or expression")
    if isinstance(value, (numbers.Real, Decimal)):
        return BindingKind.NUMBER
    if isinstance(value, str):
        return BindingKind.SOURCE
    if isinstance(value, ExpressionNode):
        return BindingKind.NODE
    raise E.ContextError(f"Unsupported value for parameter '{name}': {type(value).__name__}")


class EvaluationContext:
    """Variable bindings plus the names that may be differentiated.

    A binding is a real number, a source string re-parsed on demand, or an
    already built ExpressionNode.
    """

    def __init__(self, bindings=None, differentiation_names=None):
        bindings = dict(bindings or {})
        self._kinds = {name: classify_binding(name, value) for name, value in bindings.items()}
        self._bindings = bindings
        self.differentiation_names = frozenset(differentiation_names or ())

    @property
    def bindings(self):
        return dict(self._bindings)

    def __contains__(self, name):
        return name in self._bindings

    def lookup(self, name):
        """Return (kind, value) for `name` or None when it is unbound."""
        if name not in self._bindings:
            return None
        return self._kinds[name], self._bindings[name]

    def is_differentiation_name(self, name):
        return name in self.differentiation_names

    def with_bindings(self, overrides):
        """Return a new context with the bindings in `overrides` replaced."""
        merged = dict(self._bindings)
        merged.update(overrides)
        return EvaluationContext(merged, self.differentiation_names)

    def without(self, names):
        """Return a new context in which `names` are unbound."""
        remaining = {name: value for name, value in self._bindings.items() if name not in names}
        return EvaluationContext(remaining, self.differentiation_names)

    def __repr__(self):
        return f"EvaluationContext({self._bindings!r}, diff={sorted(self.differentiation_names)})"


def make_context(differentiation_names=None, **bindings):
    return EvaluationContext(bindings, differentiation_names)
