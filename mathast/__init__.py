"""
mathast: parse arithmetic expressions into an AST, then evaluate or render
them under a context of variable bindings.

    from mathast import parse_expression, evaluate, render, make_context

    tree = parse_expression("x^2 + 1")
    evaluate(tree, make_context(x=3))   # 10.0
    render(tree)                        # "x^2 + 1"
"""

from .MathEngine import (calculate, evaluate, format_result, parse_expression,
                         register_constant, register_constant_display_form,
                         register_function, render, render_latex)
from .nodes import (BinaryOperation, Constant, EvaluationContext, ExpressionNode,
                    FunctionCall, NumberLiteral, Token, TokenKind, Variable,
                    make_context)
from .registry import VARIADIC, Registry, get_default_registry
from .lexer import tokenize
from .parser import parse

__version__ = '1.0.0'

__all__ = [
    'calculate', 'evaluate', 'format_result', 'parse_expression',
    'register_constant', 'register_constant_display_form', 'register_function',
    'render', 'render_latex',
    'BinaryOperation', 'Constant', 'EvaluationContext', 'ExpressionNode',
    'FunctionCall', 'NumberLiteral', 'Token', 'TokenKind', 'Variable',
    'make_context', 'VARIADIC', 'Registry', 'get_default_registry',
    'tokenize', 'parse',
]
