import pytest
import structlog

from nmri.calculator import Calculator
from nmri.config import Settings
from nmri.converter import to_postfix
from nmri.evaluator import eval_postfix
from nmri.lexer import tokenize
from nmri.session_log import SessionLog


@pytest.fixture(autouse=True)
def reset_structlog():
    """The CLI reconfigures structlog against captured streams; undo it per test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def calc():
    return Calculator(settings=Settings())


@pytest.fixture
def logged_calc(tmp_path):
    session_log = SessionLog(tmp_path / "nmri.log", enabled=True)
    return Calculator(settings=Settings(), session_log=session_log)


def evaluate(text, variables=None, last_result=0.0, settings=None, on_warning=None):
    """Run the bare pipeline without a Calculator."""
    tokens = tokenize(text, variables=variables, last_result=last_result, settings=settings)
    return eval_postfix(to_postfix(tokens, settings), settings, on_warning=on_warning)
