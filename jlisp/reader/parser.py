"""
  jlisp Reader: Lexer and Parser

- Streaming, lazy lexing
- Produces a homogeneous syntax tree of SyntaxNode objects, tagged:

    - number  -> optional leading '-', one or more digits
    - symbol  -> alphanumerics plus _+-*/\\=<>!&
    - string  -> double-quoted, backslash escapes kept verbatim in `contents`
    - comment -> ';' to end of line (kept in the tree, dropped by the adapter)
    - sexpr   -> ( expr* )
    - qexpr   -> { expr* }
    - root    -> the whole input, a sequence of expressions

  The tree is turned into runtime values by jlisp.reader.adapter.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, NamedTuple, Optional

from jlisp.errors import JLispSyntaxError

TOKEN_RE = re.compile(
    r"(?P<comment>;[^\r\n]*)"  # single-line comment
    r"|(?P<lparen>\()"  # (
    r"|(?P<rparen>\))"  # )
    r"|(?P<lbrace>\{)"  # {
    r"|(?P<rbrace>\})"  # }
    r'|(?P<string>"(?:\\.|[^\\"])*")'  # double-quoted strings
    r"|(?P<number>-?[0-9]+)"  # tried before symbols, so "-1" is a number
    r"|(?P<symbol>[A-Za-z0-9_+\-*/\\=<>!&%|^]+)",
    re.DOTALL,
)

WHITESPACE_RE = re.compile(r"\s+")

CLOSERS = {"lparen": "rparen", "lbrace": "rbrace"}
NODE_TAGS = {"lparen": "sexpr", "lbrace": "qexpr"}


class Token(NamedTuple):
    kind: str
    text: str
    line: int
    column: int


@dataclass
class SyntaxNode:
    tag: str
    contents: str = ""
    children: list[SyntaxNode] = field(default_factory=list)
    line: int = 1
    column: int = 1


def lex(source: str, source_name: str = "<input>", token_re: re.Pattern = TOKEN_RE) -> Iterator[Token]:
    """Token generator: yields Tokens with 1-based line/column positions."""
    pos = 0
    n = len(source)
    line = 1
    line_start = 0

    def advance_to(end: int):
        nonlocal pos, line, line_start
        newlines = source.count("\n", pos, end)
        if newlines:
            line += newlines
            line_start = source.rfind("\n", pos, end) + 1
        pos = end

    while pos < n:
        ws = WHITESPACE_RE.match(source, pos)
        if ws:
            advance_to(ws.end())
            if pos >= n:
                break

        column = pos - line_start + 1
        m = token_re.match(source, pos)
        if not m:
            if source[pos] == '"':
                raise JLispSyntaxError("unterminated string literal", line, column, source_name)
            raise JLispSyntaxError(f"unexpected character {source[pos]!r}", line, column, source_name)

        yield Token(m.lastgroup, m.group(m.lastgroup), line, column)
        advance_to(m.end())


class TokenStream:
    def __init__(self, token_iter: Iterator[Token], source_name: str = "<input>"):
        self.tokens = iter(token_iter)
        self.buffer: list[Token] = []
        self.source_name = source_name
        self.last: Optional[Token] = None

    def peek(self) -> Optional[Token]:
        if not self.buffer:
            try:
                self.buffer.append(next(self.tokens))
            except StopIteration:
                return None
        return self.buffer[0]

    def advance(self) -> Optional[Token]:
        if self.buffer:
            tok = self.buffer.pop(0)
        else:
            tok = next(self.tokens, None)
        if tok is not None:
            self.last = tok
        return tok

    def _error(self, message: str, tok: Optional[Token]) -> JLispSyntaxError:
        if tok is None:
            tok = self.last
        line, column = (tok.line, tok.column) if tok else (1, 1)
        return JLispSyntaxError(message, line, column, self.source_name)

    def parse_expr(self) -> Optional[SyntaxNode]:
        tok = self.peek()
        if tok is None:
            return None

        if tok.kind in ("number", "symbol", "string", "comment"):
            self.advance()
            return SyntaxNode(tok.kind, tok.text, line=tok.line, column=tok.column)

        # List forms
        if tok.kind in CLOSERS:
            self.advance()
            node = SyntaxNode(NODE_TAGS[tok.kind], tok.text, line=tok.line, column=tok.column)
            closer = CLOSERS[tok.kind]
            while True:
                nxt = self.peek()
                if nxt is None:
                    raise self._error(f"unmatched '{tok.text}'", tok)
                if nxt.kind == closer:
                    self.advance()
                    return node
                if nxt.kind in ("rparen", "rbrace"):
                    raise self._error(f"unexpected '{nxt.text}'", nxt)
                node.children.append(self.parse_expr())

        raise self._error(f"unexpected '{tok.text}'", tok)

    def parse_all(self) -> Iterator[SyntaxNode]:
        while self.peek() is not None:
            yield self.parse_expr()


class Parser:
    """The jlisp grammar.

    Holds no per-parse state, so one instance is built up front and shared by
    everything that reads source text (the interpreter and `load`).
    """

    def __init__(self, token_re: re.Pattern = TOKEN_RE):
        self.token_re = token_re

    def lex(self, source: str, source_name: str = "<input>") -> Iterator[Token]:
        return lex(source, source_name, self.token_re)

    def parse(self, source: str, source_name: str = "<input>") -> SyntaxNode:
        """Parse a whole input into a root node. Raises JLispSyntaxError."""
        stream = TokenStream(self.lex(source, source_name), source_name)
        return SyntaxNode("root", children=list(stream.parse_all()))

    def parse_file(self, path: str | Path) -> SyntaxNode:
        """Read and parse a source file.

        Raises OSError, UnicodeDecodeError (not UTF-8) or JLispSyntaxError.
        """
        path = Path(path)
        return self.parse(path.read_text(encoding="utf-8"), str(path))
