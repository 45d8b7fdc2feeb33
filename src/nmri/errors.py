"""
Error taxonomy for the NMRI expression pipeline.

Every failure carries an ErrorKind so callers and tests can tell the
stages apart without matching on message text.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Distinct failure kinds surfaced by the calculator."""
    # Lexical
    INVALID_CHAR = "invalid_char"
    IDENTIFIER_TOO_LONG = "identifier_too_long"
    UNKNOWN_IDENTIFIER = "unknown_identifier"
    TOO_COMPLEX = "too_complex"
    # Structural
    MISMATCHED_PAREN = "mismatched_paren"
    OVERFLOW = "overflow"
    INTERNAL_INVARIANT = "internal_invariant"
    # Evaluation
    INSUFFICIENT_OPERANDS = "insufficient_operands"
    INSUFFICIENT_ARGUMENTS = "insufficient_arguments"
    DIV_BY_ZERO = "div_by_zero"
    MOD_BY_ZERO = "mod_by_zero"
    DOMAIN_ERROR = "domain_error"
    MALFORMED_EXPRESSION = "malformed_expression"
    # Storage
    VARIABLE_STORE_FULL = "variable_store_full"
    # Input and command layer
    EMPTY_EXPRESSION = "empty_expression"
    INPUT_TOO_LONG = "input_too_long"
    INVALID_NAME = "invalid_name"
    RESERVED_NAME = "reserved_name"


class CalculatorError(Exception):
    """Base exception for calculator errors."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind.value!r}, {self.message!r})"


class LexError(CalculatorError):
    """Raised when the input cannot be split into tokens."""
    pass


class ParseError(CalculatorError):
    """Raised when tokens cannot be reordered into postfix form."""
    pass


class EvalError(CalculatorError):
    """Raised when a postfix sequence cannot be evaluated."""
    pass


class StoreError(CalculatorError):
    """Raised when the variable store rejects a write."""
    pass


class CommandError(CalculatorError):
    """Raised for invalid input at the command and assignment layer."""
    pass
