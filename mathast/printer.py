"""
Render an expression tree back to text.

Printer produces the linear infix form, LatexPrinter the LaTeX form. Both
walk the tree like the Evaluator but never raise: anything that cannot be
resolved is printed as the variable name.
"""

import logging

from . import error as E
from . import evaluator as evaluator
from . import operators as operators
from .evaluator import parse_source
from .nodes import (BinaryOperation, BindingKind, Constant, FunctionCall,
                    NumberLiteral, Variable)
from .registry import resolve

logger = logging.getLogger(__name__)


def format_number(value):
    """Shortest text for a bound number that parses back to the same value."""
    if isinstance(value, int):
        return str(value)
    try:
        value = float(value)
    except OverflowError:
        # Fractions beyond the float range keep their exact form
        return str(value)
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


class Printer:
    def __init__(self, context=None, registry=None, max_depth=None, resolving=()):
        self.context = context
        self.registry = resolve(registry)
        self.max_depth = max_depth or evaluator.max_substitution_depth
        self.resolving = tuple(resolving)

    # --- Hooks overridden by LatexPrinter ---

    def apply_operator(self, definition, left, right):
        return definition.to_infix(left, right)

    def group(self, text):
        return f"({text})"

    def render_constant(self, node):
        return node.rendering

    def render_call(self, definition, node):
        return definition.render(self, node.arguments)

    # --- Walk ---

    def render(self, node):
        if isinstance(node, BinaryOperation):
            left = self.render(node.left)
            right = self.render(node.right)
            definition = operators.get_operator(node.operator_symbol)
            if definition is None:
                return f"{left} {node.operator_symbol} {right}"
            text = self.apply_operator(definition, left, right)
            if node.parenthesized:
                return self.group(text)
            return text

        elif isinstance(node, NumberLiteral):
            return node.rendering

        elif isinstance(node, Constant):
            return self.render_constant(node)

        elif isinstance(node, Variable):
            return self.render_variable(node.name)

        elif isinstance(node, FunctionCall):
            definition = self.registry.get_function(node.name)
            if definition is None:
                return f"{node.name}({', '.join(self.render(arg) for arg in node.arguments)})"
            return self.render_call(definition, node)

        return ""

    def render_variable(self, name):
        if self.context is None:
            return name
        binding = self.context.lookup(name)
        if binding is None:
            return name
        kind, value = binding

        if kind is BindingKind.NUMBER:
            return format_number(value)

        if name in self.resolving or len(self.resolving) >= self.max_depth:
            return name

        if kind is BindingKind.SOURCE:
            try:
                value = parse_source(value, self.registry)
            except E.MathError as e:
                logger.debug("Printing %s unresolved: %s", name, e.message)
                return name
            except RecursionError:
                logger.debug("Printing %s unresolved: nested too deeply", name)
                return name

        text = self.nested(name).render(value)
        # Keep the substituted operation together when it lands next to other operators
        if isinstance(value, BinaryOperation) and not value.parenthesized:
            return self.group(text)
        return text

    def nested(self, name):
        return type(self)(self.context, self.registry, self.max_depth, self.resolving + (name,))

    def with_context(self, context):
        return type(self)(context, self.registry, self.max_depth, self.resolving)


class LatexPrinter(Printer):
    def apply_operator(self, definition, left, right):
        return definition.to_latex(left, right)

    def group(self, text):
        return f"\\left({text}\\right)"

    def render_constant(self, node):
        display_form = self.registry.get_constant_display_form(node.name)
        if display_form is None:
            return node.rendering
        return display_form

    def render_call(self, definition, node):
        if definition.latex is not None:
            return definition.latex(self, node.arguments)
        arguments = ", ".join(self.render(arg) for arg in node.arguments)
        return f"\\operatorname{{{node.name}}}\\left({arguments}\\right)"


def render(node, context=None, registry=None):
    return Printer(context, registry).render(node)


def render_latex(node, context=None, registry=None):
    return LatexPrinter(context, registry).render(node)
