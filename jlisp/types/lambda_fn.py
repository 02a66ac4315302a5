"""Lambda function representation and formal parameter lists for jlisp."""

from __future__ import annotations

import logging
from io import StringIO
from typing import Iterable

from jlisp.errors import invalid_variadic_signature, type_mismatch
from jlisp.types.environment import Environment
from jlisp.types.symbol import Symbol, VARIADIC_MARKER
from jlisp.types.value import Error, QExpr, Value

logger = logging.getLogger(__name__)


class Formals:
    """A lambda's parameter list: required positional symbols and an optional rest symbol.

    Written in source as a Q-expression, with `&` introducing the rest
    parameter: `{x y & more}`.
    """

    __slots__ = ("required", "rest")

    def __init__(self, required: Iterable[Symbol] = (), rest: Symbol | None = None):
        self.required: list[Symbol] = list(required)
        self.rest: Symbol | None = rest

    @classmethod
    def from_qexpr(cls, func: str, spec: QExpr) -> Formals | Error:
        """Parse a Q-expression of symbols, validating the `&` convention."""
        for i, cell in enumerate(spec.cells):
            if not isinstance(cell, Symbol):
                return type_mismatch(func, i, Symbol.type_name, cell)

        symbols = list(spec.cells)
        if VARIADIC_MARKER not in symbols:
            return cls(symbols)

        marker = symbols.index(VARIADIC_MARKER)
        tail = symbols[marker + 1:]
        if len(tail) != 1 or tail[0] == VARIADIC_MARKER:
            return invalid_variadic_signature()
        return cls(symbols[:marker], tail[0])

    def drop(self, n: int) -> Formals:
        """The formals left after binding the first `n` required parameters."""
        return Formals(self.required[n:], self.rest)

    def to_qexpr(self) -> QExpr:
        cells: list[Value] = list(self.required)
        if self.rest is not None:
            cells.extend((VARIADIC_MARKER, self.rest))
        return QExpr(cells)

    def copy(self) -> Formals:
        return Formals(self.required, self.rest)

    def __len__(self) -> int:
        return len(self.required) + (0 if self.rest is None else 1)

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, Formals)
            and self.required == other.required
            and self.rest == other.rest
        )

    __hash__ = None

    def __str__(self) -> str:
        return str(self.to_qexpr())

    def __repr__(self) -> str:
        return f"Formals({self.required!r}, rest={self.rest!r})"


class Lambda(Value):
    """A first-class lambda with formal parameters, body, and closure env.

    `env` is created empty when the lambda is constructed, with the defining
    environment as its parent. It only ever holds arguments bound by partial
    application; a call never writes into it.
    """

    __slots__ = ("formals", "body", "env")

    type_name = "Function"

    def __init__(self, formals: Formals, body: QExpr, env: Environment | None = None):
        self.formals: Formals = formals
        self.body: QExpr = body
        # Avoid shared default Environment across instances
        self.env: Environment = env if env is not None else Environment()

    @classmethod
    def construct(cls, formals: Formals, body: QExpr, defining_env: Environment) -> Lambda:
        logger.debug("lambda created: formals=%s body=%s", formals, body)
        return cls(formals, body.copy(), Environment(parent=defining_env))

    def copy(self) -> Lambda:
        return Lambda(self.formals.copy(), self.body.copy(), self.env.copy())

    def __eq__(self, other: object) -> bool:
        # The captured environment is not compared
        return (
            isinstance(other, Lambda)
            and self.formals == other.formals
            and self.body == other.body
        )

    __hash__ = None

    def __str__(self) -> str:
        with StringIO() as buffer:
            buffer.write("(\\ ")
            buffer.write(str(self.formals))
            buffer.write(" ")
            buffer.write(str(self.body))
            buffer.write(")")
            return buffer.getvalue()

    def __repr__(self) -> str:
        """Return the Lisp-style representation of the lambda."""
        return str(self)
