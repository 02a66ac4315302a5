from __future__ import annotations

import logging
import sys
from pathlib import Path

from jlisp.builtin.env_builtin import make_load, register
from jlisp.builtin.extras import register_extras
from jlisp.config import extended_library_enabled, get_recursion_limit
from jlisp.errors import JLispSyntaxError, parse_failure
from jlisp.evaluation.evaluator import evaluate
from jlisp.reader.adapter import read, read_forms
from jlisp.reader.parser import Parser
from jlisp.types.environment import Environment
from jlisp.types.value import Error, String, Value

logger = logging.getLogger(__name__)


class Interpreter:
    """
    Evaluates jlisp source text against a persistent root environment.
    Definitions made by one call are visible to the next.
    """
    def __init__(self, prelude: str | None = None, extended: bool | None = None):
        self.parser = Parser()
        self.env = Environment()
        register(self.env, self.parser)
        self._load = make_load(self.parser)

        if extended is None:
            extended = extended_library_enabled()
        if extended:
            register_extras(self.env)

        limit = get_recursion_limit()
        if limit is not None and limit > sys.getrecursionlimit():
            sys.setrecursionlimit(limit)

        logger.debug("interpreter ready (extended=%s)", extended)
        if prelude:
            self.eval_prelude(prelude)

    def eval_prelude(self, code: str) -> None:
        """Evaluate a string of jlisp code form by form, printing any Errors."""
        for result in self.run(code, source_name="<prelude>"):
            if isinstance(result, Error):
                print(result)

    def eval(self, code: str, source_name: str = "<input>") -> Value:
        """Evaluate one line of input.

        The whole line is read as a single S-expression, so `+ 1 2` and
        `(+ 1 2)` both evaluate to 3. Malformed input yields an Error value.
        """
        try:
            tree = self.parser.parse(code, source_name)
        except JLispSyntaxError as ex:
            return parse_failure(f"parse error: {ex}")
        return evaluate(read(tree), self.env)

    def run(self, code: str, source_name: str = "<input>") -> list[Value]:
        """Evaluate each top-level form in turn and return every result."""
        try:
            tree = self.parser.parse(code, source_name)
        except JLispSyntaxError as ex:
            return [parse_failure(f"parse error: {ex}")]
        return [evaluate(form, self.env) for form in read_forms(tree)]

    def load(self, path: str | Path) -> Value:
        """Run a file through the `load` builtin."""
        return self._load(self.env, [String(str(path))])
