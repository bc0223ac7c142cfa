# parser.py
"""
Recursive-descent parser with operator-precedence climbing.

    expression := primary (operator primary)*
    primary    := identifier | identifier '(' [expression (',' expression)*] ')'
                | literal | '(' expression ')' | '-' primary

Operators of equal precedence associate to the left, so 2^3^2 is (2^3)^2.
Unary minus is stored as 0 - primary.
"""

import logging

from . import config_manager as config_manager
from . import error as E
from . import operators as operators
from .nodes import (BinaryOperation, Constant, FunctionCall, NumberLiteral,
                    TokenKind, Variable, unary_minus)
from .registry import resolve

logger = logging.getLogger(__name__)

# Deepest allowed nesting of brackets, call arguments and unary minus
max_parse_depth = config_manager.load_setting_value("max_parse_depth") or 100


class Parser:
    def __init__(self, tokens, source, registry=None, max_depth=None):
        self.tokens = list(tokens)
        self.source = source
        self.registry = resolve(registry)
        self.max_depth = max_depth or max_parse_depth
        self.index = 0
        self.depth = 0

    # --- Token cursor ---

    @property
    def current(self):
        if self.index < len(self.tokens):
            return self.tokens[self.index]
        return None

    def advance(self):
        self.index += 1
        return self.current

    def at_operator(self, symbol):
        token = self.current
        return token is not None and token.kind is TokenKind.OPERATOR and token.text == symbol

    def lookahead_precedence(self):
        token = self.current
        if token is None or token.kind is not TokenKind.OPERATOR:
            return operators.NONE_PRECEDENCE
        return operators.precedence_of(token.text)

    def fail(self, error_class, message, token=None):
        offset = token.offset if token is not None else len(self.source)
        raise error_class(message, source=self.source, offset=offset)

    def enter(self):
        self.depth += 1
        if self.depth > self.max_depth:
            self.fail(E.NestingDepthError,
                      f"Expression is nested deeper than {self.max_depth} levels", self.current)

    def leave(self):
        self.depth -= 1

    # --- Grammar ---

    def parse(self):
        if not self.tokens:
            raise E.EmptyExpressionError("Empty expression", source=self.source, offset=0)
        tree = self.parse_expression()
        logger.debug("Final AST: %s", tree)
        return tree

    def parse_expression(self):
        self.enter()
        lhs = self.parse_primary()
        result = self.parse_binary_rhs(0, lhs)
        self.leave()

        if self.depth == 0 and self.current is not None:
            if self.at_operator(")"):
                self.fail(E.UnmatchedParenError, "Missing opening parenthesis '('", self.current)
            self.fail(E.TrailingTokensError,
                      "Bad expression, reaching the end or missing the operator", self.current)
        return result

    def parse_primary(self):
        token = self.current
        if token is None:
            self.fail(E.UnexpectedEndError, "Want '(' or '0-9' but reached the end")

        if token.kind is TokenKind.IDENTIFIER:
            return self.parse_function_call_or_constant_or_variable()
        elif token.kind is TokenKind.LITERAL:
            return self.parse_number()
        elif token.kind is TokenKind.OPERATOR:
            return self.parse_paren_or_unary_minus()
        else:
            # Commas only separate call arguments
            self.fail(E.UnexpectedTokenError, f"Want '(' or '0-9' but get '{token.text}'", token)

    def parse_number(self):
        token = self.current
        try:
            value = float(token.text)
        except ValueError:
            self.fail(E.UnexpectedTokenError, f"Want '(' or '0-9' but get '{token.text}'", token)
        self.advance()
        return NumberLiteral(value, token.text)

    def parse_function_call_or_constant_or_variable(self):
        token = self.current
        name = token.text
        self.advance()

        if self.at_operator("("):
            return self.parse_call(token)

        value = self.registry.get_constant(name)
        if value is not None:
            return Constant(name, value, name)
        # Unknown names are resolved against the context at evaluation time
        return Variable(name)

    def parse_call(self, name_token):
        name = name_token.text
        definition = self.registry.get_function(name)
        if definition is None:
            self.fail(E.UndefinedFunctionError, f"Function `{name}` is undefined", name_token)

        open_paren = self.current
        self.advance()
        arguments = []

        if self.at_operator(")"):
            self.advance()
        else:
            while True:
                arguments.append(self.parse_expression())
                token = self.current
                if token is None:
                    self.fail(E.UnmatchedParenError,
                              f"Missing ')' after the arguments of `{name}`", open_paren)
                if token.kind is TokenKind.COMMA:
                    self.advance()
                elif self.at_operator(")"):
                    self.advance()
                    break
                else:
                    self.fail(E.UnexpectedTokenError, f"Want ',' or ')' but get '{token.text}'", token)

        if not definition.accepts(len(arguments)):
            self.fail(E.ArityError,
                      f"Wrong way calling function `{name}`, parameters want {definition.arity} "
                      f"but get {len(arguments)}", name_token)
        return FunctionCall(name, arguments)

    def parse_paren_or_unary_minus(self):
        token = self.current

        if token.text == "(":
            self.advance()
            inner = self.parse_expression()
            if not self.at_operator(")"):
                self.fail(E.UnmatchedParenError, "Missing closing parenthesis ')'", token)
            self.advance()
            if isinstance(inner, BinaryOperation):
                inner = inner.with_parentheses()
            return inner

        elif token.text == "-":
            self.advance()
            self.enter()
            operand = self.parse_primary()
            self.leave()
            return unary_minus(operand)

        return self.parse_number()

    def parse_binary_rhs(self, min_precedence, lhs):
        while True:
            precedence = self.lookahead_precedence()
            if precedence < min_precedence:
                return lhs

            operator_token = self.current
            self.advance()
            rhs = self.parse_primary()

            # A tighter operator after rhs takes rhs as its left operand
            if precedence < self.lookahead_precedence():
                rhs = self.parse_binary_rhs(precedence + 1, rhs)

            lhs = BinaryOperation(operator_token.text, lhs, rhs)


def parse(tokens, source, registry=None, max_depth=None):
    """Build an ExpressionNode from `tokens`; `source` is used for error diagrams."""
    return Parser(tokens, source, registry, max_depth).parse()
