import pytest

from zpy.environment import Environment
from zpy.errors import ZpyRuntimeError


def test_define_and_get():
    env = Environment()
    env.define('x', 1)
    assert env.get('x') == 1
    assert env.contains('x')
    assert not env.contains('y')


def test_lookup_walks_parents():
    root = Environment()
    root.define('x', 1)
    inner = root.child().child()
    assert inner.get('x') == 1
    assert inner.contains('x')


def test_define_shadows_outer_binding():
    root = Environment()
    root.define('x', 1)
    inner = root.child()
    inner.define('x', 2)
    assert inner.get('x') == 2
    assert root.get('x') == 1


def test_assign_updates_nearest_holder():
    root = Environment()
    root.define('x', 1)
    inner = root.child()
    inner.assign('x', 5)
    assert root.get('x') == 5
    assert 'x' not in inner.values


def test_assign_binds_innermost_when_unbound():
    root = Environment()
    inner = root.child()
    inner.assign('y', 3)
    assert inner.get('y') == 3
    assert not root.contains('y')


def test_undefined_name():
    with pytest.raises(ZpyRuntimeError) as info:
        Environment().child().get('missing')
    assert info.value.kind == 'NameError'
    assert 'missing' in info.value.message


def test_shared_parent_sees_assignments_from_siblings():
    root = Environment()
    root.define('count', 0)
    first, second = root.child(), root.child()
    first.assign('count', 1)
    assert second.get('count') == 1
