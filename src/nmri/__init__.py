"""
NMRI - Command Line Calculator

An interactive arithmetic expression evaluator: numbers, named constants,
user variables, binary operators, unary sign, percentages and unary
mathematical functions, evaluated through a tokenizer, a shunting-yard
infix-to-postfix converter and a postfix evaluator.
"""

from nmri.calculator import Calculator, CalculatorState, LineResult
from nmri.errors import (
    CalculatorError,
    CommandError,
    ErrorKind,
    EvalError,
    LexError,
    ParseError,
    StoreError,
)

__version__ = "1.0.0"
__author__ = "NMRI Team"

__all__ = [
    "Calculator",
    "CalculatorState",
    "LineResult",
    "CalculatorError",
    "CommandError",
    "ErrorKind",
    "EvalError",
    "LexError",
    "ParseError",
    "StoreError",
]
