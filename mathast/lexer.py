# lexer.py
"""
Tokenizer: converts a raw expression string into a flat list of Tokens.

- Operators are single characters from the operator table.
- Numeric literals take digits, '.', '_' (a visual separator, dropped) and
  an exponent; '+'/'-' only belong to a literal right after 'e'/'E'.
- Identifiers start with a letter, "'", '$' or '#' and may contain digits
  after the first character.
"""

import logging

from . import error as E
from . import operators as operators
from .nodes import Token, TokenKind

logger = logging.getLogger(__name__)

WHITESPACE = " \t\n\v\f\r"
IDENTIFIER_SIGILS = "'$#"


def is_digit(char):
    return "0" <= char <= "9"


def is_identifier_start(char):
    return char.isalpha() or char in IDENTIFIER_SIGILS


def is_identifier_char(char):
    return is_identifier_start(char) or is_digit(char)


def is_literal_char(char):
    return is_digit(char) or char in "._eE"


def _scan_literal(source, b):
    """Return the end index of the numeric literal starting at b."""
    n = len(source)
    while b < n:
        current_char = source[b]
        if is_literal_char(current_char):
            b += 1
        elif current_char in "+-" and source[b - 1] in "eE":
            b += 1
        else:
            break
    return b


def tokenize(source):
    """Split `source` into Tokens, raising LexError on an unknown character."""
    tokens = []
    b = 0
    n = len(source)

    while b < n:
        current_char = source[b]

        # --- Whitespace (ignored) ---
        if current_char in WHITESPACE:
            b += 1

        # --- Operators, brackets included ---
        elif operators.is_operator(current_char):
            tokens.append(Token(TokenKind.OPERATOR, current_char, b))
            b += 1

        # --- Numbers ---
        elif is_digit(current_char):
            end = _scan_literal(source, b)
            tokens.append(Token(TokenKind.LITERAL, source[b:end].replace("_", ""), b))
            b = end

        # --- Argument separator ---
        elif current_char == ",":
            tokens.append(Token(TokenKind.COMMA, current_char, b))
            b += 1

        # --- Identifiers: constants, functions, variables ---
        elif is_identifier_start(current_char):
            end = b + 1
            while end < n and is_identifier_char(source[end]):
                end += 1
            tokens.append(Token(TokenKind.IDENTIFIER, source[b:end], b))
            b = end

        else:
            raise E.LexError(source, b)

    logger.debug("Tokens for %r: %s", source, tokens)
    return tokens
