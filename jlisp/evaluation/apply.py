"""Application engine for jlisp.

This module centralizes function application semantics for the interpreter:
- Builtins receive the calling environment and the evaluated arguments.
- Lambdas bind positionally into a fresh copy of their own environment, so
  free variables resolve through the definition-time scope only.
- Supplying fewer arguments than required formals returns a curried Lambda.
- A rest formal (`&`) collects the leftover arguments into a Q-expression.

Keeping this logic in one place prevents duplication between the evaluator
and builtins that call functions.
"""

from __future__ import annotations

import logging

from jlisp import EvaluatorFn
from jlisp.errors import not_a_function, too_many_arguments
from jlisp.types.environment import Environment
from jlisp.types.lambda_fn import Lambda
from jlisp.types.value import Builtin, QExpr, SExpr, Value

logger = logging.getLogger(__name__)


def bind_arguments(fn: Lambda, args: list[Value]) -> tuple[Environment, int] | Value:
    """Bind `args` to the formals of `fn` in a new environment.

    Returns the populated environment with the number of required formals
    consumed, or an Error value if there are more arguments than formals.
    """
    required = fn.formals.required
    if len(args) > len(required) and fn.formals.rest is None:
        return too_many_arguments(len(args), len(required))

    local_env = fn.env.copy()
    bound = min(len(args), len(required))
    for name, value in zip(required, args):
        local_env.put(name, value)

    if bound == len(required) and fn.formals.rest is not None:
        local_env.put(fn.formals.rest, QExpr(args[bound:]))
    return local_env, bound


def apply_lambda(fn: Lambda, args: list[Value], evaluate_fn: EvaluatorFn) -> Value:
    """Apply a jlisp Lambda value.

    The stored lambda is never modified: partial application returns a new
    Lambda holding the bindings made so far, and a full application evaluates
    the body in an environment nobody else can see.
    """
    result = bind_arguments(fn, args)
    if isinstance(result, Value):
        return result
    local_env, bound = result

    if bound < len(fn.formals.required):
        remaining = fn.formals.drop(bound)
        logger.debug("partial application of %s, awaiting %s", fn, remaining)
        return Lambda(remaining, fn.body.copy(), local_env)

    return evaluate_fn(SExpr(fn.body.cells), local_env)


def apply(head: Value, args: list[Value], env: Environment, evaluate_fn: EvaluatorFn) -> Value:
    """Apply either a Lambda or a Builtin.

    - For Lambda, defer to apply_lambda (handling partials and &rest).
    - For Builtins, invoke with the calling env and list of args.
    - Otherwise, return a not-a-function Error.
    """
    match head:
        case Lambda():
            return apply_lambda(head, args, evaluate_fn)
        case Builtin():
            return head(env, args)
        case _:
            return not_a_function(head)
