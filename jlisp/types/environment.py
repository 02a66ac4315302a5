"""Runtime environment for jlisp.

The Environment stores bindings of Symbols to values and supports nested
scopes via a `parent` link. Values are copied on the way in and on the way
out, so a binding can never be changed through a value handed out earlier.
"""

from __future__ import annotations

from io import StringIO
from typing import Iterator, Optional

from jlisp.errors import unbound_symbol
from jlisp.types.symbol import Symbol
from jlisp.types.value import Value


class Environment:
    """Hierarchical mapping from Symbols to jlisp values."""

    __slots__ = ("vars", "parent")

    def __init__(self, parent: Optional[Environment] = None):
        self.vars: dict[Symbol, Value] = {}
        self.parent: Environment | None = parent

    def root(self) -> Environment:
        """Walk the parent chain up to the environment with no parent."""
        *_, root = self.frames()
        return root

    def find(self, name: Symbol) -> Optional[Environment]:
        """The nearest frame that binds `name`, or None."""
        return next((frame for frame in self.frames() if name in frame.vars), None)

    def get(self, name: Symbol) -> Value:
        """Look up `name` through the chain.

        Returns a copy of the bound value, or an unbound-symbol Error value
        when no environment in the chain binds it.
        """
        env = self.find(name)
        if env is None:
            return unbound_symbol(name.id)
        return env.vars[name].copy()

    def put(self, name: Symbol, value: Value) -> None:
        """Bind `name` to a copy of `value` in this frame."""
        self.vars[name] = value.copy()

    def define_global(self, name: Symbol, value: Value) -> None:
        """Bind `name` in the root environment."""
        self.root().put(name, value)

    def update(self, mapping: dict[Symbol, Value]) -> None:
        """Bind every entry of `mapping` in this frame."""
        for name, value in mapping.items():
            self.put(name, value)

    def copy(self) -> Environment:
        """Copy the bindings of this frame; the parent is shared, not copied."""
        env = Environment(self.parent)
        env.vars = {name: value.copy() for name, value in self.vars.items()}
        return env

    def __contains__(self, name: Symbol) -> bool:
        return self.find(name) is not None

    def frames(self) -> Iterator[Environment]:
        """This frame, then each enclosing frame out to the root."""
        env: Optional[Environment] = self
        while env is not None:
            yield env
            env = env.parent

    def _format_frame(self) -> str:
        with StringIO() as buffer:
            buffer.write("{")
            buffer.write(", ".join(f"{name}: {value}" for name, value in self.vars.items()))
            buffer.write("}")
            return buffer.getvalue()

    def __str__(self) -> str:
        # Only the innermost frame; enclosing frames are elided
        if self.parent is None:
            return self._format_frame()
        return f"{self._format_frame()} -> ..."

    def __repr__(self) -> str:
        chain = " -> ".join(frame._format_frame() for frame in self.frames())
        return f"<Environment chain: {chain}>"
