"""Turns the reader's syntax tree into jlisp values.

This is the only place the evaluator's data model meets the parser. Comment
nodes are dropped here; a numeric literal outside the 64-bit range becomes an
Error value in the tree rather than failing the whole read.
"""

from __future__ import annotations

from jlisp.errors import parse_failure
from jlisp.reader.parser import SyntaxNode
from jlisp.types.symbol import Symbol
from jlisp.types.value import (
    INT64_MAX,
    INT64_MIN,
    Number,
    QExpr,
    SExpr,
    String,
    Value,
    unescape_string,
)


def read_number(node: SyntaxNode) -> Value:
    n = int(node.contents)
    if not INT64_MIN <= n <= INT64_MAX:
        return parse_failure(f"invalid number: {node.contents}")
    return Number(n)


def read_children(node: SyntaxNode) -> list[Value]:
    return [read(child) for child in node.children if child.tag != "comment"]


def read(node: SyntaxNode) -> Value:
    """Convert one syntax node (and its subtree) into a value.

    The root node reads as an S-expression of all top-level forms, which is
    how a single line of input is evaluated.
    """
    match node.tag:
        case "number":
            return read_number(node)
        case "symbol":
            return Symbol(node.contents)
        case "string":
            return String(unescape_string(node.contents[1:-1]))
        case "sexpr" | "root":
            return SExpr(read_children(node))
        case "qexpr":
            return QExpr(read_children(node))
        case _:
            raise ValueError(f"cannot read syntax node tagged {node.tag!r}")


def read_forms(root: SyntaxNode) -> list[Value]:
    """The top-level forms of a program, for evaluation one at a time."""
    return read_children(root)
