import pytest

from jlisp.types.environment import Environment
from jlisp.types.symbol import Symbol
from jlisp.types.value import Error, ErrorKind, Number, QExpr


def test_get_unbound_symbol_returns_error_value():
    result = Environment().get(Symbol("nope"))
    assert isinstance(result, Error)
    assert result.kind is ErrorKind.UNBOUND_SYMBOL
    assert str(result) == "error: unbound symbol: nope"


def test_put_stores_a_copy():
    env = Environment()
    value = QExpr([Number(1)])
    env.put(Symbol("xs"), value)
    value.cells.append(Number(2))
    assert env.get(Symbol("xs")) == QExpr([Number(1)])


def test_get_returns_a_copy():
    env = Environment()
    env.put(Symbol("xs"), QExpr([Number(1)]))
    fetched = env.get(Symbol("xs"))
    fetched.cells.clear()
    assert env.get(Symbol("xs")) == QExpr([Number(1)])


def test_put_replaces_existing_binding():
    env = Environment()
    env.put(Symbol("x"), Number(1))
    env.put(Symbol("x"), Number(2))
    assert env.get(Symbol("x")) == Number(2)


def test_lookup_walks_parent_chain_and_child_shadows():
    root = Environment()
    child = Environment(parent=root)
    root.put(Symbol("x"), Number(1))
    root.put(Symbol("y"), Number(2))
    child.put(Symbol("x"), Number(10))

    assert child.get(Symbol("x")) == Number(10)
    assert child.get(Symbol("y")) == Number(2)
    assert root.get(Symbol("x")) == Number(1)
    assert Symbol("y") in child
    assert Symbol("z") not in child


def test_define_global_binds_in_root():
    root = Environment()
    leaf = Environment(parent=Environment(parent=root))
    leaf.define_global(Symbol("g"), Number(7))

    assert Symbol("g") in root.vars
    assert Symbol("g") not in leaf.vars
    assert leaf.root() is root


def test_copy_copies_bindings_and_shares_parent():
    root = Environment()
    env = Environment(parent=root)
    env.put(Symbol("a"), Number(1))

    copied = env.copy()
    copied.put(Symbol("a"), Number(2))
    copied.put(Symbol("b"), Number(3))

    assert copied.parent is root
    assert env.get(Symbol("a")) == Number(1)
    assert Symbol("b") not in env


def test_str_shows_frame_and_parent_marker():
    root = Environment()
    root.put(Symbol("x"), Number(1))
    assert str(root) == "{x: 1}"
    assert str(Environment(parent=root)) == "{} -> ..."
    assert repr(Environment(parent=root)) == "<Environment chain: {} -> {x: 1}>"


@pytest.mark.parametrize("name", ["+", "def", "\\", "my-var"])
def test_update_binds_every_entry(name):
    env = Environment()
    env.update({Symbol(name): Number(1)})
    assert env.get(Symbol(name)) == Number(1)
