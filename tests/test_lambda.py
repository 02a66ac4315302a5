import pytest

from jlisp.types.lambda_fn import Formals, Lambda
from jlisp.types.symbol import Symbol
from jlisp.types.value import Error, ErrorKind, Number, QExpr, SExpr


def nums(*ns):
    return QExpr(Number(n) for n in ns)


@pytest.fixture
def prelude(run):
    run(r"(def {add} (\ {x y} {+ x y}))")
    run(r"(def {rest} (\ {x & xs} {xs}))")
    run(r"(def {fact} (\ {n} {if (== n 0) {1} {* n (fact (- n 1))}}))")
    return run


def test_lambda_is_a_value(run):
    fn = run(r"(\ {x} {+ x 1})")
    assert isinstance(fn, Lambda)
    assert str(fn) == r"(\ {x} {+ x 1})"
    assert fn.formals == Formals([Symbol("x")])


def test_application(run):
    assert run(r"((\ {x} {+ x 1}) 5)") == Number(6)
    assert run(r"((\ {x y} {- x y}) 10 4)") == Number(6)


def test_full_application_of_named_lambda(prelude):
    assert prelude("(add 1 2)") == Number(3)


def test_partial_application_returns_curried_lambda(prelude):
    partial = prelude("(add 1)")
    assert isinstance(partial, Lambda)
    assert str(partial) == r"(\ {y} {+ x y})"
    assert prelude("((add 1) 2)") == Number(3)


def test_partial_application_leaves_original_unchanged(prelude):
    prelude("(def {inc} (add 1))")
    assert prelude("(inc 5)") == Number(6)
    assert prelude("(inc 10)") == Number(11)
    assert prelude("(add 10 20)") == Number(30)
    assert str(prelude("add")) == r"(\ {x y} {+ x y})"


def test_curry_one_argument_at_a_time(run):
    run(r"(def {sum3} (\ {a b c} {+ a b c}))")
    assert run("(((sum3 1) 2) 3)") == Number(6)
    assert run("((sum3 1 2) 3)") == Number(6)
    assert run("((sum3 1) 2 3)") == Number(6)


def test_variadic_rest_collects_leftovers(prelude):
    assert prelude("(rest 1)") == nums()
    assert prelude("(rest 1 2 3)") == nums(2, 3)


def test_rest_only_formals(run):
    run(r"(def {all} (\ {& xs} {xs}))")
    assert run("(all 1 2)") == nums(1, 2)
    assert run("(all 7)") == nums(7)


def test_partial_application_keeps_rest_formal(run):
    run(r"(def {g} (\ {a b & r} {list a b r}))")
    partial = run("(g 1)")
    assert str(partial.formals) == "{b & r}"
    assert run("((g 1) 2)") == QExpr([Number(1), Number(2), nums()])
    assert run("((g 1) 2 3 4)") == QExpr([Number(1), Number(2), nums(3, 4)])


def test_too_many_arguments(prelude):
    result = prelude("(add 1 2 3)")
    assert result.kind is ErrorKind.TOO_MANY_ARGUMENTS
    assert result.message == "function passed too many arguments: got 3, expected 2"


@pytest.mark.parametrize("formals", ["{x &}", "{& a b}", "{&}", "{& &}", "{x & & y}"])
def test_invalid_variadic_signature(run, formals):
    result = run(rf"(\ {formals} {{x}})")
    assert result.kind is ErrorKind.INVALID_VARIADIC_SIGNATURE
    assert result.message == "function format invalid: symbol '&' not followed by single symbol"


@pytest.mark.parametrize(
    "source,message",
    [
        (r"(\ {x 1} {x})",
         "function '\\' passed incorrect type for argument 1: got Number, expected Symbol"),
        (r"(\ {x} 1)",
         "function '\\' passed incorrect type for argument 1: got Number, expected Q-Expression"),
        (r"(\ x {x})", "unbound symbol: x"),
        (r"(\ {x})",
         "function '\\' passed incorrect number of arguments: got 1, expected 2"),
    ],
)
def test_lambda_construction_errors(run, source, message):
    result = run(source)
    assert isinstance(result, Error)
    assert result.message == message


def test_closure_captures_outer_argument(run):
    assert run(r"(((\ {x} {\ {y} {+ x y}}) 3) 7)") == Number(10)


def test_closure_outlives_its_call(run):
    run(r"(def {adder} (\ {n} {\ {m} {+ n m}}))")
    run("(def {add5} (adder 5))")
    run("(def {n} 1000)")
    assert run("(add5 1)") == Number(6)


def test_free_variables_resolve_lexically(run):
    run("(def {x} 1)")
    run(r"(def {f} (\ {_} {x}))")
    # The caller's local x is invisible to f
    assert run(r"((\ {x} {f 0}) 100)") == Number(1)


def test_globals_defined_later_are_visible(run):
    run(r"(def {f} (\ {_} {later}))")
    run("(def {later} 42)")
    assert run("(f 0)") == Number(42)


def test_recursion(prelude):
    assert prelude("(fact 0)") == Number(1)
    assert prelude("(fact 10)") == Number(3628800)


def test_same_lambda_reentrant_in_one_expression(prelude):
    assert prelude("(+ (add 1 2) (add 3 4) (add (add 1 1) 1))") == Number(13)


def test_local_bindings_do_not_leak_between_calls(run):
    run(r"(def {h} (\ {a} {if (== a 0) {list (= {mark} 1)} {mark}}))")
    assert run("(h 0)") == QExpr([SExpr()])
    assert run("(h 1)").kind is ErrorKind.UNBOUND_SYMBOL


def test_lambda_equality(run):
    assert run(r"(== (\ {x} {x}) (\ {x} {x}))") == Number(1)
    assert run(r"(== (\ {x} {x}) (\ {y} {y}))") == Number(0)
    assert run(r"(== (\ {x} {x}) (\ {x} {+ x 0}))") == Number(0)


def test_lone_lambda_in_parens_is_not_called(run):
    assert isinstance(run(r"((\ {& xs} {xs}))"), Lambda)


def test_constructed_lambda_owns_its_body(env):
    body = QExpr([Symbol("x")])
    fn = Lambda.construct(Formals([Symbol("x")]), body, env)
    body.cells.append(Number(1))
    assert fn.body == QExpr([Symbol("x")])
