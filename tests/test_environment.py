import pytest

from alice.environment import Environment
from alice.errors import AliceError, RUNTIME_ERROR
from alice.tokens import Token, TokenType


def name(text, line=1):
    return Token(TokenType.IDENTIFIER, text, text, line)


def test_define_and_get():
    env = Environment()
    env.define('a', 1)
    assert env.get(name('a')) == 1


def test_lookup_walks_outward():
    outer = Environment()
    outer.define('a', 1)
    inner = outer.child().child()
    assert inner.get(name('a')) == 1
    assert inner.depth() == 2
    assert inner.resolve(name('a')) is outer


def test_shadowing_does_not_touch_outer():
    outer = Environment()
    outer.define('a', 1)
    inner = outer.child()
    inner.define('a', 2)
    assert inner.get(name('a')) == 2
    assert outer.get(name('a')) == 1


def test_assign_updates_nearest_binding():
    outer = Environment()
    outer.define('a', 1)
    inner = outer.child()
    assert inner.assign(name('a'), 5) == 5
    assert outer.get(name('a')) == 5
    assert inner.names() == []


def test_undefined_lookup_reports_line():
    env = Environment().child()
    with pytest.raises(AliceError) as exc:
        env.get(name('missing', line=7))
    assert exc.value.kind == RUNTIME_ERROR
    assert str(exc.value) == "line[7] RuntimeError: undefined variable 'missing'"


def test_assign_never_declares():
    env = Environment()
    with pytest.raises(AliceError):
        env.assign(name('ghost', line=3), 1)
    assert env.names() == []
