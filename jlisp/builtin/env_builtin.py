"""Built-in functions for the jlisp runtime environment.

This module defines list processing, arithmetic, comparison, control flow,
definition forms, lambda construction and I/O, plus `register`, which binds
them into the root environment. Every builtin takes the calling environment
and the evaluated argument list and returns a value; invalid arguments
produce an Error value, never an exception.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from jlisp.config import resolve_source_path
from jlisp.errors import (
    JLispSyntaxError,
    arity_mismatch,
    division_by_zero,
    empty_list,
    load_failure,
    overflow,
    type_mismatch,
)
from jlisp.evaluation.evaluator import evaluate
from jlisp.reader.adapter import read_forms
from jlisp.reader.parser import Parser
from jlisp.types.environment import Environment
from jlisp.types.lambda_fn import Formals, Lambda
from jlisp.types.symbol import Symbol
from jlisp.types.value import (
    INT64_MAX,
    INT64_MIN,
    Builtin,
    Error,
    ErrorKind,
    Number,
    QExpr,
    SExpr,
    String,
    Value,
    unit,
)

logger = logging.getLogger(__name__)


# -------------------------------
# Argument checks
# -------------------------------
def expect_arity(func: str, args: list[Value], n: int) -> Optional[Error]:
    if len(args) != n:
        return arity_mismatch(func, n, len(args))
    return None


def expect_type(func: str, args: list[Value], index: int, cls: type) -> Optional[Error]:
    if not isinstance(args[index], cls):
        return type_mismatch(func, index, cls.type_name, args[index])
    return None


def expect_all(func: str, args: list[Value], cls: type) -> Optional[Error]:
    for i in range(len(args)):
        err = expect_type(func, args, i, cls)
        if err:
            return err
    return None


def _single_list(func: str, args: list[Value]) -> QExpr | Error:
    """Validate the one-non-empty-Q-expression shape shared by head/tail/last."""
    err = expect_arity(func, args, 1) or expect_type(func, args, 0, QExpr)
    if err:
        return err
    if not args[0].cells:
        return empty_list(func)
    return args[0]


# -------------------------------
# List operations
# -------------------------------
def list_builtin(env: Environment, args: list[Value]) -> Value:
    """(list a b ...) => {a b ...}"""
    return QExpr(args)


def head(env: Environment, args: list[Value]) -> Value:
    """(head {a b c}) => {a}"""
    ls = _single_list("head", args)
    if isinstance(ls, Error):
        return ls
    return QExpr(ls.cells[:1])


def tail(env: Environment, args: list[Value]) -> Value:
    """(tail {a b c}) => {b c}"""
    ls = _single_list("tail", args)
    if isinstance(ls, Error):
        return ls
    return QExpr(ls.cells[1:])


def last(env: Environment, args: list[Value]) -> Value:
    """(last {a b c}) => {c}"""
    ls = _single_list("last", args)
    if isinstance(ls, Error):
        return ls
    return QExpr(ls.cells[-1:])


def join(env: Environment, args: list[Value]) -> Value:
    """Concatenate Q-expressions in order."""
    err = expect_all("join", args, QExpr)
    if err:
        return err
    out: list[Value] = []
    for q in args:
        out.extend(q.cells)
    return QExpr(out)


def eval_builtin(env: Environment, args: list[Value]) -> Value:
    """Evaluate a Q-expression as if it were an S-expression."""
    err = expect_arity("eval", args, 1) or expect_type("eval", args, 0, QExpr)
    if err:
        return err
    return evaluate(SExpr(args[0].cells), env)


# -------------------------------
# Arithmetic
# -------------------------------
def truncating_div(a: int, b: int) -> int:
    # Round toward zero like fixed-width integer division, not toward -inf
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def fold_numbers(func: str, args: list[Value], step: Callable[[int, int], int | Error]) -> Value:
    """Left fold `step` over Number arguments, checking the 64-bit range after each step."""
    if not args:
        return arity_mismatch(func, "at least 1", 0)
    err = expect_all(func, args, Number)
    if err:
        return err

    result = args[0].value
    for arg in args[1:]:
        result = step(result, arg.value)
        if isinstance(result, Error):
            return result
        if not INT64_MIN <= result <= INT64_MAX:
            return overflow(func)
    return Number(result)


def add(env: Environment, args: list[Value]) -> Value:
    """Return the sum of all arguments."""
    return fold_numbers("+", args, lambda a, b: a + b)


def sub(env: Environment, args: list[Value]) -> Value:
    """Subtract all subsequent numbers from the first; unary negation for one arg."""
    if len(args) == 1 and isinstance(args[0], Number):
        negated = -args[0].value
        return Number(negated) if negated <= INT64_MAX else overflow("-")
    return fold_numbers("-", args, lambda a, b: a - b)


def mul(env: Environment, args: list[Value]) -> Value:
    """Return the product of all arguments."""
    return fold_numbers("*", args, lambda a, b: a * b)


def div(env: Environment, args: list[Value]) -> Value:
    """Divide left-to-right, truncating; a zero divisor yields an Error naming the dividend."""

    def step(a: int, b: int) -> int | Error:
        if b == 0:
            return division_by_zero(a)
        return truncating_div(a, b)

    return fold_numbers("/", args, step)


# -------------------------------
# Comparison
# -------------------------------
def truth(flag: bool) -> Number:
    return Number(1 if flag else 0)


def equals(env: Environment, args: list[Value]) -> Value:
    """(== a b) => 1 if a and b are structurally equal, else 0."""
    err = expect_arity("==", args, 2)
    if err:
        return err
    return truth(args[0] == args[1])


def not_equals(env: Environment, args: list[Value]) -> Value:
    err = expect_arity("!=", args, 2)
    if err:
        return err
    return truth(args[0] != args[1])


def compare_numbers(func: str, args: list[Value], op: Callable[[int, int], bool]) -> Value:
    err = expect_arity(func, args, 2) or expect_all(func, args, Number)
    if err:
        return err
    return truth(op(args[0].value, args[1].value))


def lt(env: Environment, args: list[Value]) -> Value:
    return compare_numbers("<", args, lambda a, b: a < b)


def lte(env: Environment, args: list[Value]) -> Value:
    return compare_numbers("<=", args, lambda a, b: a <= b)


def gt(env: Environment, args: list[Value]) -> Value:
    return compare_numbers(">", args, lambda a, b: a > b)


def gte(env: Environment, args: list[Value]) -> Value:
    return compare_numbers(">=", args, lambda a, b: a >= b)


# -------------------------------
# Control flow, definitions and lambdas
# -------------------------------
def if_builtin(env: Environment, args: list[Value]) -> Value:
    """(if cond {then} {else}); only the chosen branch is evaluated."""
    err = (
        expect_arity("if", args, 3)
        or expect_type("if", args, 0, Number)
        or expect_type("if", args, 1, QExpr)
        or expect_type("if", args, 2, QExpr)
    )
    if err:
        return err
    branch = args[1] if args[0].value != 0 else args[2]
    return evaluate(SExpr(branch.cells), env)


def _define(func: str, args: list[Value], bind: Callable[[Symbol, Value], None]) -> Value:
    if not args:
        return arity_mismatch(func, "at least 1", 0)
    err = expect_type(func, args, 0, QExpr)
    if err:
        return err

    symbols = args[0].cells
    for i, sym in enumerate(symbols):
        if not isinstance(sym, Symbol):
            return type_mismatch(func, i, Symbol.type_name, sym)
    if len(symbols) != len(args) - 1:
        return arity_mismatch(func, len(symbols) + 1, len(args))

    for sym, value in zip(symbols, args[1:]):
        bind(sym, value)
    return unit()


def def_builtin(env: Environment, args: list[Value]) -> Value:
    """(def {a b} 1 2) binds in the global (root) environment."""
    return _define("def", args, env.define_global)


def put_builtin(env: Environment, args: list[Value]) -> Value:
    """(= {a b} 1 2) binds in the calling environment."""
    return _define("=", args, env.put)


def lambda_builtin(env: Environment, args: list[Value]) -> Value:
    """(\\ {formals} {body}) closes over the environment it is called in."""
    err = (
        expect_arity("\\", args, 2)
        or expect_type("\\", args, 0, QExpr)
        or expect_type("\\", args, 1, QExpr)
    )
    if err:
        return err
    formals = Formals.from_qexpr("\\", args[0])
    if isinstance(formals, Error):
        return formals
    return Lambda.construct(formals, args[1], env)


# -------------------------------
# I/O
# -------------------------------
def print_builtin(env: Environment, args: list[Value]) -> Value:
    """Print all arguments separated by spaces, followed by a newline."""
    print(" ".join(str(arg) for arg in args))
    return unit()


def error_builtin(env: Environment, args: list[Value]) -> Value:
    """(error "message") => an Error value carrying the message."""
    err = expect_arity("error", args, 1) or expect_type("error", args, 0, String)
    if err:
        return err
    return Error(args[0].text, ErrorKind.USER)


def make_load(parser: Parser) -> Callable[[Environment, list[Value]], Value]:
    """Build the `load` builtin around a shared parser."""

    def load(env: Environment, args: list[Value]) -> Value:
        """(load "file") evaluates each top-level form; errors are printed, not fatal."""
        err = expect_arity("load", args, 1) or expect_type("load", args, 0, String)
        if err:
            return err

        name = args[0].text
        path = resolve_source_path(name)
        try:
            tree = parser.parse_file(path)
        except OSError as ex:
            logger.warning("could not read %s: %s", path, ex)
            return load_failure(name, ex.strerror or str(ex))
        except UnicodeDecodeError as ex:
            logger.warning("could not decode %s: %s", path, ex)
            return load_failure(name, f"not valid UTF-8 text ({ex.reason} at byte {ex.start})")
        except JLispSyntaxError as ex:
            logger.warning("could not parse %s: %s", path, ex)
            return load_failure(name, str(ex))

        logger.debug("loading %s", path)
        for form in read_forms(tree):
            result = evaluate(form, env)
            if isinstance(result, Error):
                print(result)
        return unit()

    return load


# -------------------------------
# Registration
# -------------------------------
def builtin_table(parser: Parser) -> dict[str, Callable[[Environment, list[Value]], Value]]:
    return {
        "list": list_builtin,
        "head": head,
        "last": last,
        "tail": tail,
        "eval": eval_builtin,
        "join": join,
        "+": add,
        "-": sub,
        "*": mul,
        "/": div,
        "def": def_builtin,
        "\\": lambda_builtin,
        "=": put_builtin,
        "if": if_builtin,
        "==": equals,
        "!=": not_equals,
        ">": gt,
        ">=": gte,
        "<": lt,
        "<=": lte,
        "load": make_load(parser),
        "error": error_builtin,
        "print": print_builtin,
    }


def register(env: Environment, parser: Parser | None = None) -> None:
    """Bind the core builtins into `env` (normally the root environment)."""
    if parser is None:
        parser = Parser()
    env.update({Symbol(name): Builtin(name, fn) for name, fn in builtin_table(parser).items()})
