import pytest

from jlisp.builtin.env_builtin import register
from jlisp.interpreter import Interpreter
from jlisp.types.environment import Environment

# Every test starts from the default configuration. The JLISP_* variables
# are cleared so a developer's shell settings cannot change results.
_CONFIG_VARS = ("JLISP_PATH", "JLISP_LOG_LEVEL", "JLISP_EXTENDED", "JLISP_RECURSION_LIMIT")


@pytest.fixture(autouse=True)
def _clean_config(monkeypatch):
    for var in _CONFIG_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def env():
    """Fresh root environment with the core builtins bound."""
    e = Environment()
    register(e)
    return e


@pytest.fixture
def interp():
    return Interpreter(extended=False)


@pytest.fixture
def run(interp):
    """Evaluate each top-level form of `source` and return the last result."""
    def _run(source):
        results = interp.run(source)
        return results[-1] if results else None
    return _run
