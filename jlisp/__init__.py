# Core type aliases for jlisp's data model.
# Every runtime value is an instance of one of the closed set of classes in
# jlisp.types (Number, Error, String, Symbol, SExpr, QExpr, Builtin, Lambda).
# Code and data share the same representation: the reader produces these
# values directly and the evaluator reduces them.
#
# Naming guidance:
# - LispValue: use in evaluator/runtime code to denote evaluated values.
# - BuiltinFn: the signature every native operation implements.

from typing import Any, Callable

__version__ = "0.2.0"

# Runtime value alias (kept loose to avoid an import cycle with jlisp.types)
LispValue = Any

# Native operation: (environment, evaluated arguments) -> value
BuiltinFn = Callable[[Any, list], LispValue]

# Evaluator function type: passed to the application engine and to builtins
# that need to evaluate code, to keep those modules free of import cycles
EvaluatorFn = Callable[..., LispValue]
