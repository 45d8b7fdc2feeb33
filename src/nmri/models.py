"""
Core data models for NMRI.

Defines the token sum type produced by the lexer, the tagged values used
on the evaluation stack, user variables, and the static name tables
(constants, functions, reserved words).
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Union

from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class OperatorKind(str, Enum):
    """Binary arithmetic operators."""
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    POW = "^"
    MOD = "%"

    @property
    def precedence(self) -> int:
        if self in (OperatorKind.ADD, OperatorKind.SUB):
            return 1
        if self is OperatorKind.POW:
            return 3
        return 2

    @property
    def left_associative(self) -> bool:
        return self is not OperatorKind.POW


class FunctionKind(str, Enum):
    """Unary mathematical functions (arguments in radians)."""
    SIN = "sin"
    COS = "cos"
    TAN = "tan"
    ASIN = "asin"
    ACOS = "acos"
    ATAN = "atan"
    LOG = "log"  # Natural logarithm
    SQRT = "sqrt"
    EXP = "exp"
    ABS = "abs"
    FLOOR = "floor"
    CEIL = "ceil"
    ROUND = "round"  # Half away from zero


# =============================================================================
# Tokens
# =============================================================================

@dataclass(frozen=True)
class NumberToken:
    """A numeric literal, resolved constant or resolved variable."""
    value: float
    is_percentage: bool = False

    def __str__(self) -> str:
        return f"{self.value:g}%" if self.is_percentage else f"{self.value:g}"


@dataclass(frozen=True)
class OperatorToken:
    kind: OperatorKind

    def __str__(self) -> str:
        return self.kind.value


@dataclass(frozen=True)
class FunctionToken:
    kind: FunctionKind

    def __str__(self) -> str:
        return self.kind.value


@dataclass(frozen=True)
class LeftParen:
    def __str__(self) -> str:
        return "("


@dataclass(frozen=True)
class RightParen:
    def __str__(self) -> str:
        return ")"


@dataclass(frozen=True)
class AssignmentStart:
    """An identifier immediately followed by '='."""
    name: str

    def __str__(self) -> str:
        return f"{self.name} ="


Token = Union[NumberToken, OperatorToken, FunctionToken, LeftParen, RightParen, AssignmentStart]


def format_tokens(tokens: list[Token]) -> str:
    """Render a token sequence as space separated text (debugging aid)."""
    return " ".join(str(token) for token in tokens)


# =============================================================================
# Evaluation Models
# =============================================================================

@dataclass(frozen=True)
class Value:
    """Evaluation-stack element; the percentage tag never outlives one operation."""
    num: float
    is_percentage: bool = False

    @property
    def normalized(self) -> float:
        return self.num / 100.0 if self.is_percentage else self.num


class Variable(BaseModel):
    """A user variable (created on first assignment, never deleted)."""
    name: str = Field(..., min_length=1)
    value: float


# =============================================================================
# Name Tables
# =============================================================================

CONSTANTS: dict[str, float] = {
    "pi": math.pi,
    "e": math.e,
    "phi": (1.0 + math.sqrt(5.0)) / 2.0,  # Golden ratio
    "gamma": 0.5772156649015329,  # Euler-Mascheroni
    "c": 299792458.0,  # Speed of light, m/s
    "h": 6.62607015e-34,  # Planck, J*s
    "G": 6.67430e-11,  # Gravitational, m^3/kg/s^2
    "Na": 6.02214076e23,  # Avogadro, 1/mol
    "k": 1.380649e-23,  # Boltzmann, J/K
    "inf": math.inf,
}

# Resolved to the last successful result by the lexer
ANS = "ans"

FUNCTIONS: dict[str, FunctionKind] = {kind.value: kind for kind in FunctionKind}
FUNCTIONS["ln"] = FunctionKind.LOG

COMMAND_VERBS = frozenset({
    "help", "exit", "quit", "clear", "cls", "history",
    "vars", "variables", "mem", "memory", "store", "log",
})

RESERVED_NAMES = frozenset(CONSTANTS) | {ANS} | frozenset(FUNCTIONS) | COMMAND_VERBS
