"""
Tests for built-in command dispatch.
"""

import io

from rich.console import Console

from nmri.calculator import Calculator
from nmri.commands import CommandStatus, dispatch
from nmri.config import Settings
from nmri.history import CommandHistory
from nmri.session_log import SessionLog


class TestDispatch:
    """Test command recognition and output."""

    def setup_method(self):
        self.calc = Calculator(settings=Settings())
        self.history = CommandHistory()
        self.out = io.StringIO()
        self.console = Console(file=self.out, width=120)

    def run(self, line):
        return dispatch(line, self.calc, self.history, self.console)

    def output(self):
        return self.out.getvalue()

    def test_help(self):
        assert self.run("help") is CommandStatus.HANDLED
        assert "NMRI Calculator Help" in self.output()

    def test_exit_and_quit(self):
        assert self.run("exit") is CommandStatus.EXIT
        assert self.run("  quit ") is CommandStatus.EXIT

    def test_expressions_are_not_commands(self):
        assert self.run("1 + 1") is CommandStatus.NOT_A_COMMAND
        assert self.run("x = 5") is CommandStatus.NOT_A_COMMAND
        assert self.run("storex") is CommandStatus.NOT_A_COMMAND
        assert self.run("log") is CommandStatus.NOT_A_COMMAND

    def test_memory_commands(self):
        self.calc.evaluate_expression("5")
        self.run("m+")
        self.run("m+")
        self.calc.evaluate_expression("3")
        self.run("m-")
        assert self.calc.memory == 7.0

        self.run("mem")
        assert "Memory: 7" in self.output()

        self.run("mr")
        assert "Recalled from memory: 7" in self.output()
        assert self.calc.last_result == 7.0

        self.run("mc")
        assert "Memory cleared." in self.output()
        assert self.calc.memory == 0.0

    def test_store(self):
        self.calc.evaluate_expression("6 * 7")
        assert self.run("store answer") is CommandStatus.HANDLED
        assert "Stored 42 in variable 'answer'" in self.output()
        assert self.calc.evaluate_expression("answer") == 42.0

    def test_store_reserved_name(self):
        self.run("store pi")
        assert "Error:" in self.output()
        assert "reserved name 'pi'" in self.output()

    def test_store_without_name(self):
        self.run("store")
        assert "Missing variable name" in self.output()

    def test_vars(self):
        self.calc.handle_assignment("rate", "15")
        self.run("vars")
        assert "Variables" in self.output()
        assert "rate" in self.output()
        assert "15" in self.output()

    def test_history(self):
        self.run("history")
        assert "History is empty" in self.output()
        self.history.add("2 + 2")
        self.run("history")
        assert "2 + 2" in self.output()


class TestLogCommands:
    """Test the 'log' subcommands."""

    def setup_method(self):
        self.out = io.StringIO()
        self.console = Console(file=self.out, width=200)
        self.history = CommandHistory()

    def make_calc(self, path):
        return Calculator(settings=Settings(), session_log=SessionLog(path))

    def test_on_and_off(self, tmp_path):
        path = tmp_path / "nmri.log"
        calc = self.make_calc(path)

        dispatch("log on", calc, self.history, self.console)
        assert calc.session_log.enabled
        calc.evaluate_expression("1 + 2")
        dispatch("log off", calc, self.history, self.console)
        assert not calc.session_log.enabled

        content = path.read_text(encoding="utf-8")
        assert "Command: Logging enabled" in content
        assert "Result: 1 + 2 = 3" in content
        assert "Command: Logging disabled" in content
        assert "SESSION STOP" in content

    def test_already_disabled(self, tmp_path):
        calc = self.make_calc(tmp_path / "nmri.log")
        dispatch("log off", calc, self.history, self.console)
        assert "already disabled" in self.out.getvalue()

    def test_file(self, tmp_path):
        calc = self.make_calc(tmp_path / "nmri.log")
        dispatch("log file", calc, self.history, self.console)
        assert "Current log file path" in self.out.getvalue()

    def test_file_change(self, tmp_path):
        calc = self.make_calc(tmp_path / "first.log")
        dispatch("log on", calc, self.history, self.console)
        dispatch(f"log file {tmp_path / 'second.log'}", calc, self.history, self.console)
        assert calc.session_log.path == tmp_path / "second.log"
        assert "Log file path changed" in (tmp_path / "second.log").read_text(encoding="utf-8")

    def test_show(self, tmp_path):
        calc = self.make_calc(tmp_path / "nmri.log")
        dispatch("log on", calc, self.history, self.console)
        calc.evaluate_expression("2 * 21")
        dispatch("log show", calc, self.history, self.console)
        output = self.out.getvalue()
        assert "Recent Log Entries" in output
        assert "Result: 2 * 21 = 42" in output
        assert "End of Log" in output

    def test_unknown_subcommand(self, tmp_path):
        calc = self.make_calc(tmp_path / "nmri.log")
        status = dispatch("log rotate", calc, self.history, self.console)
        assert status is CommandStatus.HANDLED
        assert "Unknown 'log' subcommand 'rotate'" in self.out.getvalue()
