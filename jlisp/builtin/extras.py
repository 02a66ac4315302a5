"""Optional builtins beyond the core library.

None of these are bound unless asked for (`register_extras`), so the default
global environment stays exactly the core table.
"""
from __future__ import annotations

import re
from typing import Callable

from jlisp.builtin.env_builtin import (
    expect_all,
    expect_arity,
    expect_type,
    fold_numbers,
    truncating_div,
    truth,
)
from jlisp.config import resolve_source_path
from jlisp.errors import (
    arity_mismatch,
    division_by_zero,
    load_failure,
    out_of_range,
    overflow,
    parse_failure,
    type_mismatch,
)
from jlisp.types.environment import Environment
from jlisp.types.lambda_fn import Formals, Lambda
from jlisp.types.symbol import Symbol
from jlisp.types.value import INT64_MAX, INT64_MIN, Builtin, Error, Number, QExpr, String, Value, unit

# Largest list `range` will build
RANGE_LIMIT = 1_000_000

INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def mod(env: Environment, args: list[Value]) -> Value:
    """(% n d) => remainder with the sign of n."""
    err = expect_arity("%", args, 2) or expect_all("%", args, Number)
    if err:
        return err
    n, d = args[0].value, args[1].value
    if d == 0:
        return division_by_zero(n)
    return Number(n - d * truncating_div(n, d))


def power(env: Environment, args: list[Value]) -> Value:
    """(** b e) => b raised to the non-negative power e."""
    err = expect_arity("**", args, 2) or expect_all("**", args, Number)
    if err:
        return err
    base, exponent = args[0].value, args[1].value
    if exponent < 0:
        return out_of_range("**", f"negative exponent {exponent}")
    # |base| >= 2 leaves the 64-bit range well before this
    if abs(base) > 1 and exponent > 63:
        return overflow("**")
    result = base ** exponent
    if not INT64_MIN <= result <= INT64_MAX:
        return overflow("**")
    return Number(result)


# -------------------------------
# Bitwise operations, two's complement on 64-bit Numbers
# -------------------------------
def _bitwise(func: str, step: Callable[[int, int], int]) -> Callable[[Environment, list[Value]], Value]:
    def fold(env: Environment, args: list[Value]) -> Value:
        return fold_numbers(func, args, step)

    fold.__doc__ = f"({func} a b ...) folded left over Numbers."
    return fold


def _shift(func: str, step: Callable[[int, int], int]) -> Callable[[Environment, list[Value]], Value]:
    def shift(env: Environment, args: list[Value]) -> Value:
        err = expect_arity(func, args, 2) or expect_all(func, args, Number)
        if err:
            return err
        n, amount = args[0].value, args[1].value
        if not 0 <= amount <= 63:
            return out_of_range(func, f"shift amount {amount}, expected 0 to 63")
        result = step(n, amount)
        if not INT64_MIN <= result <= INT64_MAX:
            return overflow(func)
        return Number(result)

    shift.__doc__ = f"({func} n k) shifts n by k bits."
    return shift


def length(env: Environment, args: list[Value]) -> Value:
    """(len {a b c}) => 3, (len "abc") => 3"""
    err = expect_arity("len", args, 1)
    if err:
        return err
    arg = args[0]
    if isinstance(arg, QExpr):
        return Number(len(arg.cells))
    if isinstance(arg, String):
        return Number(len(arg.text))
    return type_mismatch("len", 0, "Q-Expression or String", arg)


def range_builtin(env: Environment, args: list[Value]) -> Value:
    """(range 3) => {0 1 2}"""
    err = expect_arity("range", args, 1) or expect_type("range", args, 0, Number)
    if err:
        return err
    n = args[0].value
    if n > RANGE_LIMIT:
        return out_of_range("range", f"{n}, expected at most {RANGE_LIMIT}")
    return QExpr(Number(i) for i in range(n))


def sort_builtin(env: Environment, args: list[Value]) -> Value:
    """(sort {3 1 2}) => {1 2 3}"""
    err = expect_arity("sort", args, 1) or expect_type("sort", args, 0, QExpr)
    if err:
        return err
    cells = args[0].cells
    err = expect_all("sort", cells, Number)
    if err:
        return err
    return QExpr(Number(v) for v in sorted(c.value for c in cells))


def _select(func: str, pick: Callable) -> Callable[[Environment, list[Value]], Value]:
    def select(env: Environment, args: list[Value]) -> Value:
        if not args:
            return arity_mismatch(func, "at least 1", 0)
        err = expect_all(func, args, Number)
        if err:
            return err
        return Number(pick(a.value for a in args))

    select.__doc__ = f"({func} a b ...) over Numbers."
    return select


def abs_builtin(env: Environment, args: list[Value]) -> Value:
    err = expect_arity("abs", args, 1) or expect_type("abs", args, 0, Number)
    if err:
        return err
    result = abs(args[0].value)
    return Number(result) if result <= INT64_MAX else overflow("abs")


# -------------------------------
# Boolean logic on Numbers (0 is false)
# -------------------------------
def logical_and(env: Environment, args: list[Value]) -> Value:
    err = expect_all("and", args, Number)
    if err:
        return err
    return truth(all(a.value != 0 for a in args))


def logical_or(env: Environment, args: list[Value]) -> Value:
    err = expect_all("or", args, Number)
    if err:
        return err
    return truth(any(a.value != 0 for a in args))


def logical_not(env: Environment, args: list[Value]) -> Value:
    err = expect_arity("not", args, 1) or expect_type("not", args, 0, Number)
    if err:
        return err
    return truth(args[0].value == 0)


def read_file(env: Environment, args: list[Value]) -> Value:
    """(read "file") => the file's contents as a String."""
    err = expect_arity("read", args, 1) or expect_type("read", args, 0, String)
    if err:
        return err
    name = args[0].text
    try:
        return String(resolve_source_path(name).read_text(encoding="utf-8"))
    except OSError as ex:
        return load_failure(name, ex.strerror or str(ex))
    except UnicodeDecodeError as ex:
        return load_failure(name, f"not valid UTF-8 text ({ex.reason} at byte {ex.start})")


# -------------------------------
# Strings
# -------------------------------
def chars(env: Environment, args: list[Value]) -> Value:
    """(chars "ab") => {"a" "b"}"""
    err = expect_arity("chars", args, 1) or expect_type("chars", args, 0, String)
    if err:
        return err
    return QExpr(String(ch) for ch in args[0].text)


def to_int(env: Environment, args: list[Value]) -> Value:
    """(int "-42") => -42"""
    err = expect_arity("int", args, 1) or expect_type("int", args, 0, String)
    if err:
        return err
    text = args[0].text
    if not INTEGER_RE.fullmatch(text):
        return parse_failure(f"invalid number: {text}")
    n = int(text)
    if not INT64_MIN <= n <= INT64_MAX:
        return parse_failure(f"invalid number: {text}")
    return Number(n)


def substring(env: Environment, args: list[Value]) -> Value:
    """(str-sub "hello" 1 3) => "el"; end is exclusive."""
    err = (
        expect_arity("str-sub", args, 3)
        or expect_type("str-sub", args, 0, String)
        or expect_type("str-sub", args, 1, Number)
        or expect_type("str-sub", args, 2, Number)
    )
    if err:
        return err
    text, start, end = args[0].text, args[1].value, args[2].value
    if start < 0 or end < 0:
        return out_of_range("str-sub", f"negative index {min(start, end)}")
    if start > end:
        return out_of_range("str-sub", f"start {start} after end {end}")
    if end > len(text):
        return out_of_range("str-sub", f"end {end} beyond length {len(text)}")
    return String(text[start:end])


def split(env: Environment, args: list[Value]) -> Value:
    """Split a String on a one-character String, or a Q-expression on a value.

    (split "," "a,b") => {"a" "b"}, (split 0 {1 0 2}) => {{1} {2}}
    """
    err = expect_arity("split", args, 2)
    if err:
        return err
    delimiter, subject = args
    if isinstance(subject, String):
        if not isinstance(delimiter, String) or len(delimiter.text) != 1:
            return type_mismatch("split", 0, "single-character String", delimiter)
        return QExpr(String(part) for part in subject.text.split(delimiter.text))
    if isinstance(subject, QExpr):
        chunks: list[Value] = []
        current: list[Value] = []
        for item in subject.cells:
            if item == delimiter:
                chunks.append(QExpr(current))
                current = []
            else:
                current.append(item)
        chunks.append(QExpr(current))
        return QExpr(chunks)
    return type_mismatch("split", 1, "String or Q-Expression", subject)


def fun(env: Environment, args: list[Value]) -> Value:
    """(fun {name x y} {body}) defines a named lambda in the global environment."""
    err = (
        expect_arity("fun", args, 2)
        or expect_type("fun", args, 0, QExpr)
        or expect_type("fun", args, 1, QExpr)
    )
    if err:
        return err
    signature = args[0].cells
    if not signature:
        return arity_mismatch("fun", "a name", 0)
    name = signature[0]
    if not isinstance(name, Symbol):
        return type_mismatch("fun", 0, Symbol.type_name, name)
    formals = Formals.from_qexpr("fun", QExpr(signature[1:]))
    if isinstance(formals, Error):
        return formals
    env.define_global(name, Lambda.construct(formals, args[1], env))
    return unit()


EXTRAS = {
    "%": mod,
    "**": power,
    "&": _bitwise("&", lambda a, b: a & b),
    "|": _bitwise("|", lambda a, b: a | b),
    "^": _bitwise("^", lambda a, b: a ^ b),
    "<<": _shift("<<", lambda n, k: n << k),
    ">>": _shift(">>", lambda n, k: n >> k),
    "len": length,
    "range": range_builtin,
    "sort": sort_builtin,
    "min": _select("min", min),
    "max": _select("max", max),
    "abs": abs_builtin,
    "and": logical_and,
    "or": logical_or,
    "not": logical_not,
    "read": read_file,
    "chars": chars,
    "int": to_int,
    "str-sub": substring,
    "split": split,
    "fun": fun,
}


def register_extras(env: Environment) -> None:
    env.update({Symbol(name): Builtin(name, fn) for name, fn in EXTRAS.items()})
