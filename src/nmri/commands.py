"""
Command dispatch for NMRI's non-mathematical verbs.

Handles help, exit, screen clearing, history, variable listing, the
memory register, 'store <name>' and the 'log' subcommands. Anything else
is left for the expression evaluator.
"""

from enum import Enum

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from nmri.calculator import Calculator, format_result
from nmri.errors import CalculatorError
from nmri.history import CommandHistory


class CommandStatus(str, Enum):
    """Outcome of dispatching one input line."""
    HANDLED = "handled"
    EXIT = "exit"
    NOT_A_COMMAND = "not_a_command"


HELP_TEXT = """
[bold yellow]NMRI Calculator Help[/]

[bold cyan]Commands:[/]
  [green]exit[/]       Exit the calculator (alias: quit).
  [green]help[/]       Show this help message.
  [green]clear[/]      Clear the terminal screen (alias: cls).
  [green]history[/]    Show the command history.
  [green]vars[/]       List all defined variables (alias: variables).
  [green]mem[/]        Show the value stored in memory (alias: memory).
  [green]m+[/]         Add the last result ('ans') to memory.
  [green]m-[/]         Subtract the last result ('ans') from memory.
  [green]mr[/]         Recall the value from memory (sets 'ans').
  [green]mc[/]         Clear the memory (set to 0).
  [green]store <n>[/]  Store the last result ('ans') in variable <n>.
  [green]log on[/]     Enable logging to the log file.
  [green]log off[/]    Disable logging.
  [green]log show[/]   Show the most recent log lines.
  [green]log file[/]   Show the log file path ('log file <path>' to change it).

[bold cyan]Constants:[/]
  [magenta]pi[/], [magenta]e[/], [magenta]phi[/] (golden ratio), [magenta]gamma[/] (Euler-Mascheroni),
  [magenta]c[/] (speed of light), [magenta]h[/] (Planck), [magenta]G[/] (gravitational),
  [magenta]Na[/] (Avogadro), [magenta]k[/] (Boltzmann), [magenta]inf[/],
  [magenta]ans[/] (result of the last successful calculation)

[bold cyan]Operators:[/]
  [blue]+, -[/]   Addition, subtraction. 'A + B%' means A + (B/100)*A
  [blue]*, /[/]   Multiplication, division. 'A * B%' means A * (B/100)
  [blue]^[/]      Power (right-associative)
  [blue]%[/]      Modulo (remainder)
  [blue]=[/]      Assignment, e.g. 'x = 5 * 2'. Must come before any operator.

[bold cyan]Functions:[/] (arguments in radians)
  sin, cos, tan, asin, acos, atan, log (alias ln), sqrt, exp,
  abs, floor, ceil, round
  [dim]Arguments can be percentages: sin(30%) == sin(0.3)[/]

[bold yellow]Examples:[/]
  > 100 + 20%        [green]120[/]
  > 100 * 50%        [green]50[/]
  > x = 5            [green]x = 5[/]
  > y = x^2 + 2*x + 1 [green]y = 36[/]
  > store result_var [green]Stored 36 in result_var[/]
"""


def dispatch(
    line: str,
    calculator: Calculator,
    history: CommandHistory,
    console: Console,
) -> CommandStatus:
    """Run a built-in command if line is one."""
    command = line.strip()

    if command == "help":
        console.print(HELP_TEXT)
        return CommandStatus.HANDLED

    if command in ("exit", "quit"):
        calculator.session_log.write("User requested exit.")
        return CommandStatus.EXIT

    if command in ("clear", "cls"):
        console.clear()
        return CommandStatus.HANDLED

    if command == "history":
        show_history(history, console)
        return CommandStatus.HANDLED

    if command in ("vars", "variables"):
        show_variables(calculator, console)
        return CommandStatus.HANDLED

    if command in ("mem", "memory"):
        console.print(f"Memory: {calculator.memory:g}")
        return CommandStatus.HANDLED

    if command == "m+":
        calculator.memory_add()
        console.print(f"Memory = {calculator.memory:g} (added {calculator.last_result:g})")
        return CommandStatus.HANDLED

    if command == "m-":
        calculator.memory_subtract()
        console.print(f"Memory = {calculator.memory:g} (subtracted {calculator.last_result:g})")
        return CommandStatus.HANDLED

    if command == "mr":
        value = calculator.memory_recall()
        console.print(f"Recalled from memory: {value:g}")
        return CommandStatus.HANDLED

    if command == "mc":
        calculator.memory_clear()
        console.print("Memory cleared.")
        return CommandStatus.HANDLED

    if command == "store" or command.startswith("store "):
        _store(command[len("store"):].strip(), calculator, console)
        return CommandStatus.HANDLED

    if command.startswith("log "):
        _log_command(command[len("log "):].strip(), calculator, history, console)
        return CommandStatus.HANDLED

    return CommandStatus.NOT_A_COMMAND


def show_history(history: CommandHistory, console: Console) -> None:
    entries = history.entries()
    if not entries:
        console.print("[dim](History is empty)[/]")
        return

    table = Table(title="Command History")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Command")
    for number, entry in enumerate(entries, start=1):
        table.add_row(str(number), entry)
    console.print(table)


def show_variables(calculator: Calculator, console: Console) -> None:
    listing = calculator.variables()
    if not listing:
        console.print("[dim](No variables defined)[/]")
        return

    table = Table(title="Variables")
    table.add_column("Name", style="yellow")
    table.add_column("Value", style="green", justify="right")
    for name, value in listing:
        table.add_row(name, f"{value:g}")
    console.print(table)


def _store(name: str, calculator: Calculator, console: Console) -> None:
    try:
        value = calculator.store(name)
    except CalculatorError as e:
        console.print(f"[red]Error:[/] {escape(e.message)}")
        return
    console.print(f"Stored {format_result(value)} in variable '{name}'")


def _log_command(
    subcommand: str,
    calculator: Calculator,
    history: CommandHistory,
    console: Console,
) -> None:
    session_log = calculator.session_log

    if subcommand == "on":
        if session_log.enabled:
            console.print(f"Logging is already enabled. Log file: {session_log.path}")
        elif session_log.enable():
            console.print(f"[green]Logging enabled.[/] To file: {session_log.path}")
            session_log.write("Command: Logging enabled")
        else:
            console.print(f"[red]Error:[/] Could not open log file '{session_log.path}'")
        return

    if subcommand == "off":
        if session_log.enabled:
            session_log.write("Command: Logging disabled")
            session_log.disable()
            console.print("[yellow]Logging disabled.[/]")
        else:
            console.print("Logging is already disabled.")
        return

    if subcommand == "show":
        session_log.write("Command: Show log requested")
        show_log(calculator, history.size, console)
        return

    if subcommand == "file":
        console.print(f"Current log file path: [yellow]{session_log.path}[/]")
        session_log.write(f"Command: Log file path requested ({session_log.path})")
        return

    if subcommand.startswith("file "):
        new_path = subcommand[len("file "):].strip()
        session_log.set_path(new_path)
        console.print(f"Log file path set to: [yellow]{session_log.path}[/]")
        session_log.write(f"Command: Log file path changed to {session_log.path}")
        return

    console.print(
        f"[red]Error:[/] Unknown 'log' subcommand '{escape(subcommand)}'. "
        "Use 'on', 'off', 'show', 'file', or 'file <path>'."
    )
    session_log.write(f"Command Error: Unknown log subcommand '{subcommand}'")


def show_log(calculator: Calculator, lines: int, console: Console) -> None:
    """Print the most recent session log lines, colored by content."""
    entries = calculator.session_log.tail(lines)
    console.print(f"[bold cyan]=== Recent Log Entries (Last {len(entries)} lines) ===[/]")
    for entry in entries:
        console.print(entry, style=_log_style(entry), markup=False, highlight=False)
    console.print("[bold cyan]=== End of Log ===[/]")


def _log_style(entry: str) -> str:
    if "Error:" in entry:
        return "red"
    if "SESSION START" in entry or "SESSION STOP" in entry:
        return "green"
    if "User input:" in entry:
        return "yellow"
    if "Result:" in entry or "Assignment:" in entry:
        return "green"
    return "cyan"
