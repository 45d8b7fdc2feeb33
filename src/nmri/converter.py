"""
Infix-to-postfix conversion (shunting-yard).

Reorders a token sequence into RPN honoring operator precedence
({+,-} < {*,/,%} < {^}) and associativity (all left except '^').
A function waits on the operator stack until its parenthesized
argument closes.
"""

import structlog

from nmri.config import Settings, settings as default_settings
from nmri.errors import ErrorKind, ParseError
from nmri.models import (
    AssignmentStart,
    FunctionToken,
    LeftParen,
    NumberToken,
    OperatorToken,
    RightParen,
    Token,
)

logger = structlog.get_logger()


def to_postfix(tokens: list[Token], settings: Settings | None = None) -> list[Token]:
    """Convert infix tokens to postfix order; raises ParseError."""
    limit = (settings or default_settings).max_tokens
    output: list[Token] = []
    stack: list[Token] = []

    def emit(token: Token) -> None:
        if len(output) >= limit:
            raise ParseError(ErrorKind.OVERFLOW, "Output queue overflow during parsing")
        output.append(token)

    def push(token: Token) -> None:
        if len(stack) >= limit:
            raise ParseError(ErrorKind.OVERFLOW, "Operator stack overflow during parsing")
        stack.append(token)

    for token in tokens:
        if isinstance(token, NumberToken):
            emit(token)

        elif isinstance(token, FunctionToken):
            push(token)

        elif isinstance(token, OperatorToken):
            op = token.kind
            while stack and isinstance(stack[-1], OperatorToken):
                top = stack[-1].kind
                if top.precedence > op.precedence or (
                    top.precedence == op.precedence and op.left_associative
                ):
                    emit(stack.pop())
                else:
                    break
            push(token)

        elif isinstance(token, LeftParen):
            push(token)

        elif isinstance(token, RightParen):
            while stack and not isinstance(stack[-1], LeftParen):
                emit(stack.pop())
            if not stack:
                raise ParseError(
                    ErrorKind.MISMATCHED_PAREN,
                    "Mismatched parentheses (extra right parenthesis?)",
                )
            stack.pop()
            if stack and isinstance(stack[-1], FunctionToken):
                emit(stack.pop())

        elif isinstance(token, AssignmentStart):
            raise ParseError(
                ErrorKind.INTERNAL_INVARIANT,
                f"Assignment to '{token.name}' found inside an expression",
            )

        else:
            raise ParseError(ErrorKind.INTERNAL_INVARIANT, f"Unexpected token {token!r}")

    while stack:
        token = stack.pop()
        if isinstance(token, LeftParen):
            raise ParseError(
                ErrorKind.MISMATCHED_PAREN,
                "Mismatched parentheses (extra left parenthesis?)",
            )
        emit(token)

    logger.debug("Converted to postfix", count=len(output))
    return output
