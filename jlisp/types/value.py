"""Runtime values for jlisp.

Every value the reader produces or the evaluator returns is an instance of
one of the classes below (plus Symbol and Lambda, which live in their own
modules). Values have plain value semantics: `copy()` returns an independent
deep copy, `==` is structural equality and `str()` is the canonical printed
form.
"""

from __future__ import annotations

from enum import Enum
from io import StringIO
from typing import Iterable

from jlisp import BuiltinFn

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# Printable escapes for string literals, in both directions.
_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    "\0": "\\0",
    "\\": "\\\\",
    '"': '\\"',
}
_UNESCAPES = {v[1]: k for k, v in _ESCAPES.items()}
_UNESCAPES["'"] = "'"


def escape_string(text: str) -> str:
    return "".join(_ESCAPES.get(ch, ch) for ch in text)


def unescape_string(text: str) -> str:
    """Undo backslash escapes. Unknown escape sequences are kept verbatim."""
    with StringIO() as buffer:
        i = 0
        while i < len(text):
            ch = text[i]
            if ch == "\\" and i + 1 < len(text):
                nxt = text[i + 1]
                if nxt in _UNESCAPES:
                    buffer.write(_UNESCAPES[nxt])
                else:
                    buffer.write(ch)
                    buffer.write(nxt)
                i += 2
                continue
            buffer.write(ch)
            i += 1
        return buffer.getvalue()


class ErrorKind(Enum):
    PARSE_FAILURE = "parse-failure"
    UNBOUND_SYMBOL = "unbound-symbol"
    ARITY_MISMATCH = "arity-mismatch"
    TYPE_MISMATCH = "type-mismatch"
    DIVISION_BY_ZERO = "division-by-zero"
    NOT_A_FUNCTION = "not-a-function"
    TOO_MANY_ARGUMENTS = "too-many-arguments"
    INVALID_VARIADIC_SIGNATURE = "invalid-variadic-signature"
    LOAD_FAILURE = "load-failure"
    OVERFLOW = "overflow"
    OUT_OF_RANGE = "out-of-range"
    USER = "user"


class Value:
    """Base class of the closed set of jlisp runtime values."""

    __slots__ = ()

    type_name = "Value"

    def copy(self) -> Value:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r})"


class Number(Value):
    __slots__ = ("value",)

    type_name = "Number"

    def __init__(self, value: int):
        self.value: int = value

    def copy(self) -> Number:
        return Number(self.value)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Number) and self.value == other.value

    def __hash__(self) -> int:
        return hash(("number", self.value))

    def __str__(self) -> str:
        return str(self.value)


class Error(Value):
    """An error as a first-class value.

    `kind` classifies the failure for callers that want to branch on it; it is
    not part of equality or of the printed form.
    """

    __slots__ = ("message", "kind")

    type_name = "Error"

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.USER):
        self.message: str = message
        self.kind: ErrorKind = kind

    def copy(self) -> Error:
        return Error(self.message, self.kind)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Error) and self.message == other.message

    def __hash__(self) -> int:
        return hash(("error", self.message))

    def __str__(self) -> str:
        return f"error: {self.message}"


class String(Value):
    __slots__ = ("text",)

    type_name = "String"

    def __init__(self, text: str):
        self.text: str = text

    def copy(self) -> String:
        return String(self.text)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, String) and self.text == other.text

    def __hash__(self) -> int:
        return hash(("string", self.text))

    def __str__(self) -> str:
        return f'"{escape_string(self.text)}"'


class Expression(Value):
    """Shared behaviour of S- and Q-expressions: an owned, ordered list of cells."""

    __slots__ = ("cells",)

    open_char = ""
    close_char = ""

    def __init__(self, cells: Iterable[Value] = ()):
        self.cells: list[Value] = list(cells)

    def copy(self):
        return type(self)(cell.copy() for cell in self.cells)

    def __len__(self) -> int:
        return len(self.cells)

    def __iter__(self):
        return iter(self.cells)

    def __eq__(self, other: object) -> bool:
        # Different variants never compare equal, even with the same cells
        return type(other) is type(self) and self.cells == other.cells

    __hash__ = None

    def __str__(self) -> str:
        with StringIO() as buffer:
            buffer.write(self.open_char)
            buffer.write(" ".join(str(cell) for cell in self.cells))
            buffer.write(self.close_char)
            return buffer.getvalue()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.cells!r})"


class SExpr(Expression):
    """An application form; the empty SExpr doubles as the unit value."""

    __slots__ = ()

    type_name = "S-Expression"
    open_char = "("
    close_char = ")"


class QExpr(Expression):
    """A quoted list: inert data until retagged as an SExpr by `eval` or `if`."""

    __slots__ = ()

    type_name = "Q-Expression"
    open_char = "{"
    close_char = "}"


class Builtin(Value):
    """A native operation, identified by the name it is registered under."""

    __slots__ = ("name", "fn")

    type_name = "Function"

    def __init__(self, name: str, fn: BuiltinFn):
        self.name: str = name
        self.fn: BuiltinFn = fn

    def __call__(self, env, args: list[Value]) -> Value:
        return self.fn(env, args)

    def copy(self) -> Builtin:
        return Builtin(self.name, self.fn)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Builtin) and self.name == other.name

    def __hash__(self) -> int:
        return hash(("builtin", self.name))

    def __str__(self) -> str:
        return "<builtin>"

    def __repr__(self) -> str:
        return f"<builtin {self.name}>"


def unit() -> SExpr:
    """The value returned by forms evaluated only for their effect."""
    return SExpr()


def duplicate(value: Value) -> Value:
    return value.copy()


def equals(a: Value, b: Value) -> bool:
    return a == b


def format_value(value: Value) -> str:
    """Canonical printed form of a value (what `print` and the CLI emit)."""
    if not isinstance(value, Value):
        raise TypeError(f"not a jlisp value: {value!r}")
    return str(value)
