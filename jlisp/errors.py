"""Errors for jlisp.

Language-level failures are never raised: they are `Error` values built by
the constructors below and returned like any other value. The exception
classes are only used at the reader boundary, where malformed source text
cannot be turned into a value tree at all.
"""

from __future__ import annotations

from jlisp.types.value import Error, ErrorKind, Value


class JLispError(Exception):
    """ Base class for all jlisp host errors"""
    pass


class JLispSyntaxError(JLispError):
    """ Raised by the reader when source text is malformed"""

    def __init__(self, message: str, line: int = 0, column: int = 0, source_name: str = "<input>"):
        super().__init__(f"{source_name}:{line}:{column}: {message}")
        self.message = message
        self.line = line
        self.column = column
        self.source_name = source_name


# -------------------------------
# Error value constructors
# -------------------------------
def unbound_symbol(name: str) -> Error:
    return Error(f"unbound symbol: {name}", ErrorKind.UNBOUND_SYMBOL)


def arity_mismatch(func: str, expected: int | str, got: int) -> Error:
    return Error(
        f"function '{func}' passed incorrect number of arguments: got {got}, expected {expected}",
        ErrorKind.ARITY_MISMATCH,
    )


def type_mismatch(func: str, index: int, expected: str, got: Value) -> Error:
    return Error(
        f"function '{func}' passed incorrect type for argument {index}: "
        f"got {got.type_name}, expected {expected}",
        ErrorKind.TYPE_MISMATCH,
    )


def empty_list(func: str) -> Error:
    return Error(f"function '{func}' passed {{}}", ErrorKind.TYPE_MISMATCH)


def division_by_zero(dividend: int) -> Error:
    return Error(f"division by zero: {dividend} / 0", ErrorKind.DIVISION_BY_ZERO)


def overflow(func: str) -> Error:
    return Error(f"integer overflow in '{func}'", ErrorKind.OVERFLOW)


def not_a_function(got: Value) -> Error:
    return Error(
        f"S-expression does not start with a function: got {got.type_name}",
        ErrorKind.NOT_A_FUNCTION,
    )


def too_many_arguments(got: int, expected: int) -> Error:
    return Error(
        f"function passed too many arguments: got {got}, expected {expected}",
        ErrorKind.TOO_MANY_ARGUMENTS,
    )


def invalid_variadic_signature() -> Error:
    return Error(
        "function format invalid: symbol '&' not followed by single symbol",
        ErrorKind.INVALID_VARIADIC_SIGNATURE,
    )


def parse_failure(message: str) -> Error:
    return Error(message, ErrorKind.PARSE_FAILURE)


def load_failure(path: str, reason: str) -> Error:
    return Error(f"could not load library '{path}': {reason}", ErrorKind.LOAD_FAILURE)


def out_of_range(func: str, detail: str) -> Error:
    return Error(f"function '{func}' passed {detail}", ErrorKind.OUT_OF_RANGE)
