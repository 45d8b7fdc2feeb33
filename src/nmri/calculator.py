"""
Calculator facade for NMRI.

Orchestrates one evaluation cycle (lexer -> converter -> evaluator) and
commits its result to the calculator state. A failing cycle raises
before anything is written, so last_result, 'ans' and the variable
store are left exactly as they were.
"""

import re
from dataclasses import dataclass, field

import structlog

from nmri.config import Settings, settings as default_settings
from nmri.converter import to_postfix
from nmri.errors import CalculatorError, CommandError, ErrorKind
from nmri.evaluator import eval_postfix
from nmri.lexer import tokenize
from nmri.models import ANS, RESERVED_NAMES
from nmri.session_log import SessionLog
from nmri.variables import VariableStore

logger = structlog.get_logger()

_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_OPERATOR_CHARS = "+-*/^%"


@dataclass
class CalculatorState:
    """Process-wide calculator state, owned by one Calculator."""
    last_result: float = 0.0
    memory: float = 0.0
    variables: VariableStore = field(default_factory=VariableStore)

    def snapshot(self) -> tuple[float, float, dict[str, float]]:
        return self.last_result, self.memory, self.variables.snapshot()


@dataclass
class LineResult:
    """Outcome of one successfully evaluated input line."""
    value: float
    name: str | None = None  # Set for assignments
    warnings: list[str] = field(default_factory=list)


def split_assignment(line: str) -> tuple[str, str] | None:
    """
    Split "name = expr" into (name, expr).

    A line is an assignment when it has '=' after its first character and
    before any arithmetic operator. The name is returned unvalidated.
    """
    equals = line.find("=")
    if equals <= 0:
        return None
    operators = [pos for pos in (line.find(op) for op in _OPERATOR_CHARS) if pos >= 0]
    if operators and min(operators) < equals:
        return None
    return line[:equals].rstrip(), line[equals + 1:]


def format_result(value: float, epsilon: float = 1e-10) -> str:
    """Format a result like C's %g, printing near-zero values as 0."""
    if abs(value) < epsilon:
        value = 0.0
    return f"{value:g}"


class Calculator:
    """Evaluates expressions and assignments against shared calculator state."""

    def __init__(
        self,
        settings: Settings | None = None,
        session_log: SessionLog | None = None,
        state: CalculatorState | None = None,
    ):
        self.settings = settings or default_settings
        self.session_log = session_log or SessionLog(self.settings.log_path)
        self.state = state or CalculatorState(
            variables=VariableStore(self.settings.max_variables)
        )
        self.warnings: list[str] = []
        if ANS not in self.state.variables:
            self.state.variables.set(ANS, self.state.last_result)

    # -------------------------------------------------------------------------
    # Evaluation cycle
    # -------------------------------------------------------------------------

    def _run_pipeline(self, text: str) -> float:
        """Tokenize, convert and evaluate without touching state."""
        self.warnings = []
        tokens = tokenize(
            text,
            variables=self.state.variables,
            last_result=self.state.last_result,
            settings=self.settings,
        )
        if not tokens:
            raise CommandError(ErrorKind.EMPTY_EXPRESSION, "Empty expression")
        postfix = to_postfix(tokens, self.settings)
        result = eval_postfix(postfix, self.settings, on_warning=self._record_warning)
        for warning in self.warnings:
            self.session_log.write(f"Warning: {warning} ('{text.strip()}')")
        return result

    def _commit(self, result: float) -> None:
        self.state.last_result = result
        self.state.variables.set(ANS, result)

    def _record_warning(self, message: str) -> None:
        self.warnings.append(message)

    def evaluate_expression(self, text: str) -> float:
        """Evaluate an expression and update last_result/'ans' on success."""
        try:
            result = self._run_pipeline(text)
        except CalculatorError as e:
            logger.info("Evaluation failed", expression=text, kind=e.kind.value, error=e.message)
            self.session_log.write(f"Evaluation Error: {e.message} for '{text.strip()}'")
            raise

        self._commit(result)
        logger.info("Expression evaluated", expression=text, result=result)
        self.session_log.write(f"Result: {text.strip()} = {result:g}")
        return result

    def handle_assignment(self, name: str, text: str) -> float:
        """Evaluate the right-hand side and store it under name; all or nothing."""
        if not text.strip():
            self.session_log.write(f"Assignment Error: Missing expression for '{name}'")
            raise CommandError(
                ErrorKind.EMPTY_EXPRESSION,
                f"Missing expression after '=' for assignment to '{name}'",
            )
        try:
            result = self._run_pipeline(text)
            self.state.variables.set(name, result)
        except CalculatorError as e:
            logger.info("Assignment failed", name=name, expression=text, kind=e.kind.value)
            self.session_log.write(f"Assignment Error: {e.message} for '{name} = {text.strip()}'")
            raise

        self._commit(result)
        logger.info("Variable assigned", name=name, result=result)
        self.session_log.write(f"Assignment: {name} = {result:g} (Expression: '{text.strip()}')")
        return result

    def evaluate_line(self, line: str) -> LineResult:
        """Evaluate one input line, routing 'name = expr' to handle_assignment."""
        line = line.strip()
        if len(line) > self.settings.max_input_length:
            raise CommandError(
                ErrorKind.INPUT_TOO_LONG,
                f"Input too long (max {self.settings.max_input_length} characters)",
            )
        if not line:
            raise CommandError(ErrorKind.EMPTY_EXPRESSION, "Empty expression")

        assignment = split_assignment(line)
        if assignment is None:
            value = self.evaluate_expression(line)
            return LineResult(value=value, warnings=list(self.warnings))

        name, expression = assignment
        try:
            self.validate_name(name)
        except CommandError as e:
            self.session_log.write(f"Assignment Error: {e.message}")
            raise
        value = self.handle_assignment(name, expression)
        return LineResult(value=value, name=name, warnings=list(self.warnings))

    # -------------------------------------------------------------------------
    # Variables and memory
    # -------------------------------------------------------------------------

    def validate_name(self, name: str) -> None:
        """Check that name can be assigned: syntax, length, not reserved."""
        if not name:
            raise CommandError(ErrorKind.INVALID_NAME, "Missing variable name")
        if len(name) >= self.settings.max_identifier_length:
            raise CommandError(
                ErrorKind.IDENTIFIER_TOO_LONG,
                f"Variable name '{name[:self.settings.max_identifier_length // 2]}...' too long "
                f"(max {self.settings.max_identifier_length - 1} chars)",
            )
        if not _NAME.fullmatch(name):
            raise CommandError(ErrorKind.INVALID_NAME, f"Invalid variable name '{name}'")
        if name in RESERVED_NAMES:
            raise CommandError(ErrorKind.RESERVED_NAME, f"Cannot assign to reserved name '{name}'")

    def store(self, name: str) -> float:
        """Store the last result in a variable (the 'store' command)."""
        name = name.strip()
        try:
            self.validate_name(name)
            self.state.variables.set(name, self.state.last_result)
        except CalculatorError as e:
            self.session_log.write(f"Command Error: {e.message}")
            raise
        self.session_log.write(f"Command: Stored {self.state.last_result:g} in variable '{name}'")
        return self.state.last_result

    def variables(self) -> list[tuple[str, float]]:
        """Defined variables with 'ans' first."""
        listing = [(variable.name, variable.value) for variable in self.state.variables]
        listing.sort(key=lambda item: item[0] != ANS)
        return listing

    def memory_add(self) -> float:
        self.state.memory += self.state.last_result
        self.session_log.write(f"Memory += {self.state.last_result:g} --> {self.state.memory:g}")
        return self.state.memory

    def memory_subtract(self) -> float:
        self.state.memory -= self.state.last_result
        self.session_log.write(f"Memory -= {self.state.last_result:g} --> {self.state.memory:g}")
        return self.state.memory

    def memory_recall(self) -> float:
        """Make the memory register the last result (and 'ans')."""
        self._commit(self.state.memory)
        self.session_log.write(f"Memory Recall (mr): {self.state.memory:g}")
        return self.state.memory

    def memory_clear(self) -> None:
        self.state.memory = 0.0
        self.session_log.write("Memory Cleared (mc)")

    @property
    def last_result(self) -> float:
        return self.state.last_result

    @property
    def memory(self) -> float:
        return self.state.memory
