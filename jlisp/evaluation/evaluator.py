"""Core evaluator for the jlisp interpreter.

Symbols resolve through the environment chain, S-expressions are reduced
by evaluating every cell and applying the first to the rest, and everything
else evaluates to itself. Errors are values: the first Error produced while
reducing an S-expression becomes its result.
"""

from __future__ import annotations

from jlisp.errors import not_a_function
from jlisp.evaluation.apply import apply
from jlisp.types.environment import Environment
from jlisp.types.lambda_fn import Lambda
from jlisp.types.symbol import Symbol
from jlisp.types.value import Builtin, Error, Number, QExpr, SExpr, String, Value


def evaluate(expr: Value, env: Environment) -> Value:
    """Evaluate a single value in `env`."""
    match expr:
        case Symbol():
            return env.get(expr)
        case SExpr():
            return evaluate_sexpr(expr, env)
        case Number() | Error() | String() | QExpr() | Builtin() | Lambda():
            # --- Atoms, quoted data and functions return as-is ---
            return expr
        case _:
            raise TypeError(f"cannot evaluate non-jlisp object {expr!r}")


def evaluate_sexpr(expr: SExpr, env: Environment) -> Value:
    # Every cell is evaluated, left to right, before any error is reported
    cells = [evaluate(cell, env) for cell in expr.cells]

    for cell in cells:
        if isinstance(cell, Error):
            return cell

    if not cells:
        return SExpr()
    if len(cells) == 1:
        return cells[0]

    head, *args = cells
    if not isinstance(head, (Builtin, Lambda)):
        return not_a_function(head)
    return apply(head, args, env, evaluate)
