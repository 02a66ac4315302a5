import pytest
from hypothesis import given, strategies as st

from jlisp.builtin.env_builtin import add, div, mul, sub
from jlisp.interpreter import Interpreter
from jlisp.types.value import INT64_MAX, INT64_MIN, Error, ErrorKind, Number

# Shared by the property tests; arithmetic never changes the environment.
INTERP = Interpreter(extended=False)

small = st.integers(min_value=-(2**31), max_value=2**31)


@pytest.mark.parametrize(
    "source,expected",
    [
        ("(+ 1 2 3)", 6),
        ("(- 10 3 2)", 5),
        ("(* 2 3 4)", 24),
        ("(/ 12 3)", 4),
        ("(+ 5)", 5),
        ("(- 5)", -5),
        ("(- -5)", 5),
        ("(* 7)", 7),
        ("(/ 7)", 7),
        ("(/ 7 2)", 3),
        ("(/ -7 2)", -3),
        ("(/ 7 -2)", -3),
        ("(/ -7 -2)", 3),
        ("(/ 100 5 2)", 10),
        ("(+ -1 5 -3)", 1),
        ("(- -10 -5)", -5),
        ("(+ (* 2 3) (- 10 4))", 12),
        ("(/ (* (+ 8 2) 5) (- 20 10))", 5),
        ("(+ 1 (* 2 (+ 3 4) (- 10 6)))", 57),
        ("(- 9223372036854775807 9223372036854775807)", 0),
        ("(+ -9223372036854775808 9223372036854775807)", -1),
    ],
)
def test_arithmetic(run, source, expected):
    assert run(source) == Number(expected)


def test_division_by_zero_names_the_dividend(run):
    result = run("(/ 10 0)")
    assert result.kind is ErrorKind.DIVISION_BY_ZERO
    assert str(result) == "error: division by zero: 10 / 0"


def test_division_by_zero_later_in_chain(run):
    assert run("(/ 100 5 0)").message == "division by zero: 20 / 0"


@pytest.mark.parametrize(
    "source,kind",
    [
        ("(+ 1 {2})", ErrorKind.TYPE_MISMATCH),
        ('(* "2" 3)', ErrorKind.TYPE_MISMATCH),
        ("(- {1})", ErrorKind.TYPE_MISMATCH),
        ("(/ 1 +)", ErrorKind.TYPE_MISMATCH),
        ("(+ 9223372036854775807 1)", ErrorKind.OVERFLOW),
        ("(- -9223372036854775808 1)", ErrorKind.OVERFLOW),
        ("(* 4294967296 4294967296)", ErrorKind.OVERFLOW),
        ("(- -9223372036854775808)", ErrorKind.OVERFLOW),
        ("(/ -9223372036854775808 -1)", ErrorKind.OVERFLOW),
        ("(+ 9223372036854775808 1)", ErrorKind.PARSE_FAILURE),
    ],
)
def test_arithmetic_errors(run, source, kind):
    result = run(source)
    assert isinstance(result, Error)
    assert result.kind is kind


def test_type_mismatch_message(run):
    assert run("(+ 1 {2})").message == (
        "function '+' passed incorrect type for argument 1: got Q-Expression, expected Number"
    )


def _calc(op, *operands):
    return INTERP.eval(f"({op} {' '.join(str(n) for n in operands)})")


@given(small, small)
def test_add_sub_mul_match_integer_arithmetic(a, b):
    assert _calc("+", a, b) == Number(a + b)
    assert _calc("-", a, b) == Number(a - b)
    assert _calc("*", a, b) == Number(a * b)


@given(small, small.filter(lambda n: n != 0))
def test_division_truncates_toward_zero(a, b):
    q = _calc("/", a, b).value
    assert abs(q) == abs(a) // abs(b)
    if q != 0:
        assert (q < 0) == ((a < 0) != (b < 0))


@given(st.integers(min_value=INT64_MIN, max_value=INT64_MAX))
def test_division_by_zero_is_always_an_error(a):
    assert _calc("/", a, 0).kind is ErrorKind.DIVISION_BY_ZERO


@given(st.lists(small, min_size=1, max_size=6))
def test_addition_folds_left(ns):
    assert _calc("+", *ns) == Number(sum(ns))


@pytest.mark.parametrize("func", [add, sub, mul, div])
def test_zero_arguments_is_an_arity_error(env, func):
    # `(+)` reads as a lone function, so call the builtins directly
    assert func(env, []).kind is ErrorKind.ARITY_MISMATCH
