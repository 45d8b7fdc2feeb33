"""
Lexer for NMRI expressions.

Converts a raw line into typed tokens. Constants and variables are
resolved to numeric literals immediately, and a unary sign becomes a
synthetic zero operand followed by the binary operator, so "-7" reaches
the converter as "0 - 7".
"""

import re
from typing import Protocol

import structlog

from nmri.config import Settings, settings as default_settings
from nmri.errors import ErrorKind, LexError
from nmri.models import (
    ANS,
    CONSTANTS,
    FUNCTIONS,
    AssignmentStart,
    FunctionToken,
    LeftParen,
    NumberToken,
    OperatorKind,
    OperatorToken,
    RightParen,
    Token,
)

logger = structlog.get_logger()

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_NUMBER = re.compile(r"(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_WHITESPACE = " \t\n\r\f\v"


class VariableLookup(Protocol):
    def get(self, name: str) -> float | None: ...


class _Tokens:
    """Token list that enforces the token-count ceiling on every append."""

    def __init__(self, limit: int):
        self.limit = limit
        self.items: list[Token] = []

    def append(self, token: Token) -> None:
        if len(self.items) >= self.limit:
            raise LexError(
                ErrorKind.TOO_COMPLEX,
                f"Expression too complex (more than {self.limit} tokens)",
            )
        self.items.append(token)


def tokenize(
    text: str,
    variables: VariableLookup | None = None,
    last_result: float = 0.0,
    settings: Settings | None = None,
) -> list[Token]:
    """
    Split an expression into tokens.

    Identifiers resolve in order: assignment start (name followed by '='),
    constant (including 'ans' -> last_result), function, variable.
    Raises LexError on the first invalid character, over-long or unknown
    identifier, or when the token ceiling is exceeded.
    """
    settings = settings or default_settings
    tokens = _Tokens(settings.max_tokens)
    expecting_operand = True
    pos = 0
    length = len(text)

    while pos < length:
        while pos < length and text[pos] in _WHITESPACE:
            pos += 1
        if pos >= length:
            break

        char = text[pos]

        match = _IDENTIFIER.match(text, pos)
        if match:
            name = match.group()
            if len(name) >= settings.max_identifier_length:
                raise LexError(
                    ErrorKind.IDENTIFIER_TOO_LONG,
                    f"Identifier '{name[:settings.max_identifier_length // 2]}...' too long "
                    f"(max {settings.max_identifier_length - 1} chars)",
                )
            pos = match.end()

            lookahead = pos
            while lookahead < length and text[lookahead] in _WHITESPACE:
                lookahead += 1
            if lookahead < length and text[lookahead] == "=":
                tokens.append(AssignmentStart(name))
                pos = lookahead + 1
                expecting_operand = True
                continue

            if name == ANS:
                tokens.append(NumberToken(last_result))
                expecting_operand = False
            elif name in CONSTANTS:
                tokens.append(NumberToken(CONSTANTS[name]))
                expecting_operand = False
            elif name in FUNCTIONS:
                tokens.append(FunctionToken(FUNCTIONS[name]))
                expecting_operand = True
            else:
                value = variables.get(name) if variables is not None else None
                if value is None:
                    raise LexError(ErrorKind.UNKNOWN_IDENTIFIER, f"Unknown identifier '{name}'")
                tokens.append(NumberToken(value))
                expecting_operand = False
            continue

        match = _NUMBER.match(text, pos)
        if match:
            pos = match.end()
            is_percentage = pos < length and text[pos] == "%"
            if is_percentage:
                pos += 1
            tokens.append(NumberToken(float(match.group()), is_percentage))
            expecting_operand = False
            continue

        if char in "+-*/^%":
            kind = OperatorKind(char)
            if expecting_operand and kind in (OperatorKind.ADD, OperatorKind.SUB):
                tokens.append(NumberToken(0.0))
            tokens.append(OperatorToken(kind))
            pos += 1
            expecting_operand = True
            continue

        if char == "(":
            tokens.append(LeftParen())
            pos += 1
            expecting_operand = True
            continue

        if char == ")":
            tokens.append(RightParen())
            pos += 1
            expecting_operand = False
            continue

        raise LexError(ErrorKind.INVALID_CHAR, f"Invalid character '{char}' in expression")

    logger.debug("Tokenized expression", expression=text, count=len(tokens.items))
    return tokens.items
