"""
Tests for the command-line interface.
"""

from typer.testing import CliRunner

from nmri.cli import app

runner = CliRunner()


class TestBatchMode:
    """Test one-shot evaluation of command-line arguments."""

    def test_joined_arguments(self):
        result = runner.invoke(app, ["2", "+", "3"])
        assert result.exit_code == 0
        assert result.output.strip() == "5"

    def test_single_argument(self):
        result = runner.invoke(app, ["(2+3)*4"])
        assert result.exit_code == 0
        assert "20" in result.output

    def test_negative_number(self):
        result = runner.invoke(app, ["-7"])
        assert result.exit_code == 0
        assert "-7" in result.output

    def test_percentage(self):
        result = runner.invoke(app, ["100", "-", "20%"])
        assert result.exit_code == 0
        assert "80" in result.output

    def test_division_by_zero(self):
        result = runner.invoke(app, ["5", "/", "0"])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_domain_error(self):
        result = runner.invoke(app, ["sqrt(-1)"])
        assert result.exit_code == 1

    def test_too_long(self):
        result = runner.invoke(app, ["1+" * 300 + "1"])
        assert result.exit_code == 1
        assert "too long" in result.output

    def test_session_log(self, tmp_path):
        path = tmp_path / "batch.log"
        result = runner.invoke(app, ["--log", "--log-file", str(path), "6", "*", "7"])
        assert result.exit_code == 0
        content = path.read_text(encoding="utf-8")
        assert "Command line execution: 6 * 7" in content
        assert "Command line result: 42" in content
        assert "SESSION STOP" in content

    def test_config_file(self, tmp_path):
        config = tmp_path / "nmri.yaml"
        config.write_text("max_tokens: 3\n", encoding="utf-8")
        result = runner.invoke(app, ["--config", str(config), "1 + 2 + 3"])
        assert result.exit_code == 1
        assert "too complex" in result.output


class TestInteractiveMode:
    """Test the read-evaluate-print loop."""

    def test_session(self):
        result = runner.invoke(app, [], input="x = 5\nx * 2\nexit\n")
        assert result.exit_code == 0
        assert "x = 5" in result.output
        assert "10" in result.output
        assert "Goodbye!" in result.output

    def test_errors_do_not_end_session(self):
        result = runner.invoke(app, [], input="1 / 0\nans + 1\nquit\n")
        assert result.exit_code == 0
        assert "Division by zero" in result.output
        assert "Goodbye!" in result.output

    def test_end_of_input(self):
        result = runner.invoke(app, [], input="1 + 1\n")
        assert result.exit_code == 0
        assert "2" in result.output
        assert "Goodbye!" in result.output

    def test_commands(self):
        result = runner.invoke(app, [], input="7 * 6\nstore answer\nvars\nexit\n")
        assert result.exit_code == 0
        assert "Stored 42 in variable 'answer'" in result.output
        assert "answer" in result.output

    def test_warning(self):
        result = runner.invoke(app, [], input="20% ^ 2\nexit\n")
        assert result.output.count("Percentage ignored in power operation") == 1
        assert "400" in result.output
