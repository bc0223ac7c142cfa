"""Reduce an expression tree to a float under an EvaluationContext."""

import logging

from . import config_manager as config_manager
from . import error as E
from . import operators as operators
from .lexer import tokenize
from .nodes import (BinaryOperation, BindingKind, Constant, FunctionCall,
                    NumberLiteral, Variable)
from .parser import parse
from .registry import resolve

logger = logging.getLogger(__name__)

# Deepest chain of variables whose values are themselves expressions
max_substitution_depth = config_manager.load_setting_value("max_substitution_depth") or 32


def parse_source(source, registry):
    return parse(tokenize(source), source, registry)


class Evaluator:
    """Tree walk producing a float.

    Variables bound to strings or nodes are evaluated in place. `resolving`
    holds the variable names currently being substituted on this path so a
    binding that leads back to itself fails instead of recursing forever.
    """

    def __init__(self, context=None, registry=None, max_depth=None, resolving=()):
        self.context = context
        self.registry = resolve(registry)
        self.max_depth = max_depth or max_substitution_depth
        self.resolving = tuple(resolving)

    def evaluate(self, node):
        if isinstance(node, BinaryOperation):
            left_value = self.evaluate(node.left)
            right_value = self.evaluate(node.right)
            definition = operators.get_operator(node.operator_symbol)
            if definition is None:
                raise E.CalculationError(f"Unknown operator: {node.operator_symbol}", code="3004")
            return definition.reduce(left_value, right_value)

        elif isinstance(node, (NumberLiteral, Constant)):
            return node.value

        elif isinstance(node, Variable):
            return self.evaluate_variable(node.name)

        elif isinstance(node, FunctionCall):
            definition = self.registry.get_function(node.name)
            if definition is None:
                raise E.UndefinedFunctionError(f"Function `{node.name}` is not registered")
            return float(definition.evaluate(self, node.arguments))

        raise E.EvaluationError(f"Invalid AST node: {node!r}")

    def evaluate_variable(self, name):
        if self.context is None:
            raise E.MissingContextError(f"No parameters given while evaluating '{name}'")

        binding = self.context.lookup(name)
        if binding is None:
            raise E.UnboundVariableError(name)
        kind, value = binding

        if kind is BindingKind.NUMBER:
            try:
                return float(value)
            except OverflowError:
                raise E.CalculationError(f"Value of '{name}' is too big for a float", code="3026")

        if name in self.resolving:
            raise E.CyclicSubstitutionError(name)
        if len(self.resolving) >= self.max_depth:
            raise E.SubstitutionDepthError(
                f"More than {self.max_depth} nested substitutions while resolving '{name}'")

        nested = self.nested(name)
        if kind is BindingKind.SOURCE:
            logger.debug("Substituting %s = %r", name, value)
            return nested.evaluate(parse_source(value, self.registry))
        return nested.evaluate(value)

    def nested(self, name):
        return Evaluator(self.context, self.registry, self.max_depth, self.resolving + (name,))

    def with_context(self, context):
        """Walker over the same registry with a different context, used by functions."""
        return Evaluator(context, self.registry, self.max_depth, self.resolving)


def evaluate(node, context=None, registry=None):
    return Evaluator(context, registry).evaluate(node)
