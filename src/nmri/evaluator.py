"""
Postfix evaluator for NMRI.

Executes an RPN token sequence against a stack of tagged values.
Percentage semantics are asymmetric:

- '+' and '-' read a percentage right operand as "percent of the left
  operand" (100 - 20% == 80).
- '*' and '/' read either operand's percentage as a plain fraction
  (100 * 20% == 20).
- '^' and '%' ignore the tag and report a warning.

Every operator and function result is untagged; a bare percentage that
survives to the end resolves to num / 100.
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable

import structlog

from nmri.config import Settings, settings as default_settings
from nmri.errors import ErrorKind, EvalError
from nmri.models import (
    FunctionKind,
    FunctionToken,
    NumberToken,
    OperatorKind,
    OperatorToken,
    Token,
    Value,
)

logger = structlog.get_logger()

WarningHandler = Callable[[str], None]


def _round_half_away(x: float) -> float:
    # Floats this large are already integral
    if abs(x) >= 2.0 ** 52:
        return x
    return float(Decimal(x).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _integral(fn: Callable[[float], int]) -> Callable[[float], float]:
    """Wrap floor/ceil/round so infinities pass through as floats."""
    def apply(x: float) -> float:
        return x if math.isinf(x) else float(fn(x))
    return apply


_FUNCTIONS: dict[FunctionKind, Callable[[float], float]] = {
    FunctionKind.SIN: math.sin,
    FunctionKind.COS: math.cos,
    FunctionKind.TAN: math.tan,
    FunctionKind.ASIN: math.asin,
    FunctionKind.ACOS: math.acos,
    FunctionKind.ATAN: math.atan,
    FunctionKind.LOG: math.log,
    FunctionKind.SQRT: math.sqrt,
    FunctionKind.EXP: math.exp,
    FunctionKind.ABS: math.fabs,
    FunctionKind.FLOOR: _integral(math.floor),
    FunctionKind.CEIL: _integral(math.ceil),
    FunctionKind.ROUND: _integral(_round_half_away),
}


def _is_odd_integer(x: float) -> bool:
    return math.isfinite(x) and x == math.floor(x) and math.fmod(x, 2.0) != 0.0


def _power(a: float, b: float) -> float:
    """a ** b with C pow() results for overflow and zero to a negative power."""
    try:
        return math.pow(a, b)
    except OverflowError:
        return -math.inf if a < 0 and _is_odd_integer(b) else math.inf
    except ValueError:
        if a == 0.0 and b < 0:
            return math.copysign(math.inf, a) if _is_odd_integer(b) else math.inf
        raise EvalError(ErrorKind.DOMAIN_ERROR, f"Power {a:g} ^ {b:g} is not a real number")


def _check_domain(func: FunctionKind, x: float) -> None:
    if func in (FunctionKind.ASIN, FunctionKind.ACOS) and not -1.0 <= x <= 1.0:
        raise EvalError(ErrorKind.DOMAIN_ERROR, f"{func.value} argument out of range [-1, 1]")
    if func is FunctionKind.LOG and not x > 0.0:
        raise EvalError(ErrorKind.DOMAIN_ERROR, "Logarithm requires positive argument")
    if func is FunctionKind.SQRT and x < 0.0:
        raise EvalError(ErrorKind.DOMAIN_ERROR, "Square root requires non-negative argument")


def apply_operator(op: OperatorKind, a: Value, b: Value, warn: WarningHandler | None = None) -> float:
    """Apply a binary operator to two tagged operands (a is the left one)."""
    if op is OperatorKind.ADD:
        result = a.num + (b.num / 100.0 * a.num) if b.is_percentage else a.num + b.num
    elif op is OperatorKind.SUB:
        result = a.num - (b.num / 100.0 * a.num) if b.is_percentage else a.num - b.num
    elif op is OperatorKind.MUL:
        result = a.normalized * b.normalized
    elif op is OperatorKind.DIV:
        if b.normalized == 0.0:
            raise EvalError(ErrorKind.DIV_BY_ZERO, "Division by zero")
        result = a.normalized / b.normalized
    elif op is OperatorKind.POW:
        if a.is_percentage or b.is_percentage:
            _warn(warn, "Percentage ignored in power operation", operator=op.value)
        result = _power(a.num, b.num)
    else:
        if a.is_percentage or b.is_percentage:
            _warn(warn, "Percentage ignored in modulo operation", operator=op.value)
        if b.num == 0.0:
            raise EvalError(ErrorKind.MOD_BY_ZERO, "Modulo by zero")
        try:
            result = math.fmod(a.num, b.num)
        except ValueError:
            raise EvalError(ErrorKind.DOMAIN_ERROR, f"Modulo {a.num:g} % {b.num:g} is undefined")

    if math.isnan(result):
        raise EvalError(ErrorKind.DOMAIN_ERROR, f"Result of '{op.value}' is not a number")
    return result


def apply_function(func: FunctionKind, arg: Value) -> float:
    """Apply a unary function to a tagged argument, checking its domain."""
    x = arg.normalized
    _check_domain(func, x)
    try:
        result = _FUNCTIONS[func](x)
    except OverflowError:
        result = math.inf
    except ValueError:
        raise EvalError(ErrorKind.DOMAIN_ERROR, f"{func.value}({x:g}) is undefined")

    if math.isnan(result):
        raise EvalError(ErrorKind.DOMAIN_ERROR, f"{func.value}({x:g}) is not a number")
    return result


def eval_postfix(
    postfix: list[Token],
    settings: Settings | None = None,
    on_warning: WarningHandler | None = None,
) -> float:
    """Evaluate a postfix token sequence; raises EvalError."""
    limit = (settings or default_settings).max_tokens
    stack: list[Value] = []

    def push(value: Value) -> None:
        if len(stack) >= limit:
            raise EvalError(ErrorKind.OVERFLOW, "Evaluation stack overflow")
        stack.append(value)

    for token in postfix:
        if isinstance(token, NumberToken):
            push(Value(token.value, token.is_percentage))

        elif isinstance(token, OperatorToken):
            if len(stack) < 2:
                raise EvalError(
                    ErrorKind.INSUFFICIENT_OPERANDS,
                    f"Insufficient operands for operator '{token.kind.value}'",
                )
            b = stack.pop()
            a = stack.pop()
            push(Value(apply_operator(token.kind, a, b, on_warning)))

        elif isinstance(token, FunctionToken):
            if not stack:
                raise EvalError(
                    ErrorKind.INSUFFICIENT_ARGUMENTS,
                    f"Insufficient arguments for function '{token.kind.value}'",
                )
            push(Value(apply_function(token.kind, stack.pop())))

        else:
            raise EvalError(ErrorKind.MALFORMED_EXPRESSION, f"Unexpected token {token!r} in postfix")

    if len(stack) != 1:
        raise EvalError(
            ErrorKind.MALFORMED_EXPRESSION,
            f"Invalid expression structure ({len(stack)} values left, expected 1)",
        )

    return stack[0].normalized


def _warn(handler: WarningHandler | None, message: str, **kwargs) -> None:
    logger.info(message, **kwargs)
    if handler is not None:
        handler(message)
