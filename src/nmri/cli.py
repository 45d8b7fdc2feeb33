"""
Command-line interface for NMRI.

Provides:
- Batch mode: `nmri 2 + 3` evaluates the joined arguments once
- Interactive mode: `nmri` starts a calculator prompt
"""

from pathlib import Path
from typing import List, Optional

import structlog
import typer
from rich.console import Console
from rich.markup import escape

from nmri.calculator import Calculator, format_result
from nmri.commands import CommandStatus, dispatch
from nmri.config import Settings, configure_logging
from nmri.errors import CalculatorError
from nmri.history import CommandHistory
from nmri.session_log import SessionLog

app = typer.Typer(
    name="nmri",
    help="NMRI - Command Line Calculator",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)

logger = structlog.get_logger()


# =============================================================================
# Entry Point
# =============================================================================

@app.command(context_settings={"allow_extra_args": True, "ignore_unknown_options": True})
def main(
    expression: Optional[List[str]] = typer.Argument(
        None, help="Expression to evaluate once; omit it to start the interactive calculator"
    ),
    log: Optional[bool] = typer.Option(None, "--log/--no-log", help="Enable the session log"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Session log file path"),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML configuration file"),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug diagnostics on stderr"),
):
    """Evaluate an expression, or start the interactive calculator."""
    settings = Settings.from_yaml(config) if config else Settings()
    if log_file is not None:
        settings = settings.model_copy(update={"log_path": log_file})

    configure_logging("DEBUG" if verbose else settings.log_level)

    enabled = settings.logging_enabled if log is None else log
    session_log = SessionLog(settings.log_path, enabled=enabled)
    calculator = Calculator(settings=settings, session_log=session_log)

    if expression:
        code = run_batch(calculator, " ".join(expression))
        session_log.disable()
        raise typer.Exit(code)

    run_interactive(calculator)


# =============================================================================
# Batch Mode
# =============================================================================

def run_batch(calculator: Calculator, text: str) -> int:
    """Evaluate one expression; returns the process exit code."""
    session_log = calculator.session_log
    limit = calculator.settings.max_input_length * 2
    if len(text) > limit:
        err_console.print(f"[red]Error:[/] Command line expression too long (max {limit} characters).")
        return 1

    session_log.write(f"Command line execution: {text}")
    try:
        result = calculator.evaluate_expression(text)
    except CalculatorError as e:
        err_console.print(f"[red]Error:[/] {escape(e.message)}.")
        session_log.write("Command line result: Error")
        return 1

    _print_warnings(calculator.warnings)
    console.print(
        format_result(result, calculator.settings.near_zero_epsilon),
        style="green",
        highlight=False,
    )
    session_log.write(f"Command line result: {result:g}")
    return 0


# =============================================================================
# Interactive Mode
# =============================================================================

def run_interactive(calculator: Calculator) -> None:
    """Read-evaluate-print loop until 'exit', EOF or Ctrl-C."""
    settings = calculator.settings
    session_log = calculator.session_log
    history = CommandHistory(settings.history_size)

    console.print(f"\n[bold]{settings.app_name}[/]")
    console.print("Type '[green]help[/]' for instructions, '[green]exit[/]' to quit.\n")
    logger.debug("Interactive session started")

    while True:
        try:
            line = console.input("> ").strip()
        except (EOFError, KeyboardInterrupt):
            console.print()
            break

        if not line:
            continue

        history.add(line)
        session_log.write(f"User input: {line}")

        status = dispatch(line, calculator, history, console)
        if status is CommandStatus.EXIT:
            break
        if status is CommandStatus.HANDLED:
            continue

        try:
            outcome = calculator.evaluate_line(line)
        except CalculatorError as e:
            err_console.print(f"[red]Error:[/] {escape(e.message)}.")
            continue

        _print_warnings(outcome.warnings)
        value = format_result(outcome.value, settings.near_zero_epsilon)
        if outcome.name is not None:
            console.print(f"[yellow]{outcome.name}[/] = [green]{value}[/]", highlight=False)
        else:
            console.print(value, style="green", highlight=False)

    console.print("\n[bold green]Goodbye![/]")
    session_log.disable()


# =============================================================================
# Helpers
# =============================================================================

def _print_warnings(warnings: list[str]) -> None:
    for warning in warnings:
        err_console.print(f"[yellow]Warning:[/] {escape(warning)}.")


if __name__ == "__main__":
    app()
