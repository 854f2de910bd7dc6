import math

import pytest

from zpy.environment import Environment
from zpy.errors import ZpyRuntimeError
from zpy.interpreter import run_program
from zpy.std import default_registry
from zpy.types import NONE, ListVal, MapVal


def value(expression, **host):
    env = Environment()
    for name, v in host.items():
        env.define(name, v)
    return run_program(f"r = {expression}\n", env).get('r')


def items(expression, **host):
    return value(expression, **host).items


def builtin_error(source):
    with pytest.raises(ZpyRuntimeError) as info:
        run_program(source)
    assert info.value.kind == 'BuiltinError'
    return info.value


def test_registry_contents():
    registry = default_registry()
    for name in ('print', 'len', 'range', 'str.upper', 'list.append', 'map.get',
                 'file_read', 'os_getcwd', 'math_sqrt', 'json_parse', 'csv_parse'):
        assert name in registry
    assert 'list.append' not in registry.global_names()
    assert 'append' in registry.global_names()


def test_print(capsys):
    run_program("print('a', 1, 2.5, true, none, [1, 'b'], {'k': 'v'})\nprint()\n")
    assert capsys.readouterr().out == 'a 1 2.5 true none [1, "b"] {"k": "v"}\n\n'


def test_input(monkeypatch):
    monkeypatch.setattr('builtins.input', lambda prompt='': 'typed')
    assert value("input('name? ')") == 'typed'


def test_len():
    assert value("len('abc')") == 3
    assert value("len([1, 2])") == 2
    assert value("len({'a': 1})") == 1
    builtin_error("len(1)\n")


def test_conversions():
    assert value("str(12)") == '12'
    assert value("str([1, 'x'])") == '[1, "x"]'
    assert value("int('  42 ')") == 42
    assert value("int(3.9)") == 3
    assert value("int(-3.9)") == -3
    assert value("int(true)") == 1
    assert value("float('2.5')") == 2.5
    assert value("float(2)") == 2.0
    assert value("bool(0)") is False
    assert value("bool('x')") is True
    assert value("bool([])") is False
    assert value("bool(none)") is False
    builtin_error("int('abc')\n")
    builtin_error("float([1])\n")


def test_type_names():
    assert items("[type(1), type(1.5), type(true), type('s'), type(none), type([]), type({}), type(len)]") == [
        'Integer', 'Float', 'Boolean', 'String', 'None', 'List', 'Mapping', 'NativeFunction',
    ]
    assert value("type(lambda: 1)") == 'Function'


def test_range():
    assert items("range(4)") == [0, 1, 2, 3]
    assert items("range(2, 5)") == [2, 3, 4]
    assert items("range(10, 0, -3)") == [10, 7, 4, 1]
    builtin_error("range(1, 2, 0)\n")
    builtin_error("range(1.5)\n")


def test_arity_is_checked():
    error = builtin_error("len(1, 2)\n")
    assert error.message == 'len: expected 1 arguments, got 2'
    error = builtin_error("range()\n")
    assert 'expected 1 to 3 arguments' in error.message


def test_list_builtins():
    assert items("list('ab')") == ['a', 'b']
    assert items("list({'x': 1})") == ['x']
    assert items("list()") == []
    env = run_program("xs = [3, 1]\nappend(xs, 2)\ninsert(xs, 0, 9)\nlast = pop(xs)\nfirst = pop(xs, 0)\n")
    assert env.get('xs').items == [3, 1]
    assert env.get('last') == 2
    assert env.get('first') == 9
    builtin_error("pop([])\n")
    builtin_error("pop([1], 3)\n")


def test_mapping_builtins():
    assert items("keys({'a': 1, 'b': 2})") == ['a', 'b']
    assert items("values({'a': 1, 'b': 2})") == [1, 2]
    builtin_error("keys([1])\n")


def test_numeric_builtins():
    assert value("abs(-3)") == 3
    assert value("abs(-2.5)") == 2.5
    assert value("min(3, 1, 2)") == 1
    assert value("max([3, 1, 2])") == 3
    assert value("max('a', 'c', 'b')") == 'c'
    assert value("sum([1, 2, 3.5])") == 6.5
    assert value("sum([])") == 0
    assert value("round(2.5)") == 3
    assert value("round(-2.5)") == -3
    assert value("round(3.14159, 2)") == 3.14
    builtin_error("min([])\n")
    builtin_error("min()\n")
    builtin_error("max(1, 'a')\n")
    builtin_error("sum(['a'])\n")


def test_sequence_builtins():
    assert items("sorted([3, 1, 2])") == [1, 2, 3]
    assert items("sorted(['b', 'a'])") == ['a', 'b']
    assert items("reversed([1, 2, 3])") == [3, 2, 1]
    assert value("reversed('abc')") == 'cba'
    pairs = items("enumerate(['a', 'b'])")
    assert [p.items for p in pairs] == [[0, 'a'], [1, 'b']]
    pairs = items("zip([1, 2, 3], ['x', 'y'])")
    assert [p.items for p in pairs] == [[1, 'x'], [2, 'y']]
    builtin_error("sorted([1, 'a'])\n")


def test_sorted_does_not_modify_argument():
    env = run_program("xs = [2, 1]\nys = sorted(xs)\n")
    assert env.get('xs').items == [2, 1]
    assert env.get('ys').items == [1, 2]


def test_character_builtins():
    assert value("chr(65)") == 'A'
    assert value("ord('a')") == 97
    assert value("hex(255)") == '0xff'
    builtin_error("ord('ab')\n")
    builtin_error("chr(-1)\n")


def test_string_methods():
    assert value("'Hi'.upper()") == 'HI'
    assert value("'Hi'.lower()") == 'hi'
    assert value("'  x '.strip()") == 'x'
    assert value("'  x '.lstrip()") == 'x '
    assert value("'  x '.rstrip()") == '  x'
    assert items("'a b  c'.split()") == ['a', 'b', 'c']
    assert items("'a,b,,c'.split(',')") == ['a', 'b', '', 'c']
    assert value("'-'.join(['a', 'b'])") == 'a-b'
    assert value("'hello'.find('l')") == 2
    assert value("'hello'.find('z')") == -1
    assert value("'aXa'.replace('a', 'b')") == 'bXb'
    assert value("'hello'.startswith('he')") is True
    assert value("'hello'.endswith('x')") is False
    assert value("'banana'.count('a')") == 3
    assert value("'banana'.contains('nan')") is True
    builtin_error("'-'.join([1, 2])\n")
    builtin_error("'abc'.split('')\n")


def test_list_methods():
    env = run_program(
        "xs = [3, 1, 2]\n"
        "xs.append(4)\n"
        "xs.insert(0, 0)\n"
        "xs.remove(1)\n"
        "popped = xs.pop()\n"
        "where = xs.index(2)\n"
        "twos = xs.count(2)\n"
        "ys = xs.copy()\n"
        "ys.extend([7, 8])\n"
        "xs.sort()\n"
        "zs = [1, 2, 3]\n"
        "zs.reverse()\n"
        "ws = [1]\n"
        "ws.clear()\n"
    )
    assert env.get('popped') == 4
    assert env.get('where') == 2
    assert env.get('twos') == 1
    assert env.get('xs').items == [0, 2, 3]
    assert env.get('ys').items == [0, 3, 2, 7, 8]
    assert env.get('zs').items == [3, 2, 1]
    assert env.get('ws').items == []
    builtin_error("[1].remove(5)\n")
    builtin_error("[1].index(5)\n")


def test_map_methods():
    env = run_program(
        "m = {'a': 1}\n"
        "g = m.get('a')\n"
        "missing = m.get('z')\n"
        "fallback = m.get('z', 0)\n"
        "m.update({'b': 2})\n"
        "ks = m.keys()\n"
        "vs = m.values()\n"
        "its = m.items()\n"
        "p = m.pop('a')\n"
        "q = m.pop('a', 'gone')\n"
        "n = {'x': 1}\n"
        "n.clear()\n"
    )
    assert env.get('g') == 1
    assert env.get('missing') is NONE
    assert env.get('fallback') == 0
    assert env.get('ks').items == ['a', 'b']
    assert env.get('vs').items == [1, 2]
    assert [pair.items for pair in env.get('its').items] == [['a', 1], ['b', 2]]
    assert env.get('p') == 1
    assert env.get('q') == 'gone'
    assert env.get('m').keys() == ['b']
    assert len(env.get('n')) == 0
    builtin_error("{}.pop('a')\n")


def test_method_arity_counts_arguments_after_receiver():
    error = builtin_error("'a'.upper(1)\n")
    assert error.builtin == 'str.upper'


def test_math():
    assert value("math_sqrt(16)") == 4.0
    assert value("math_floor(2.7)") == 2
    assert value("math_ceil(2.1)") == 3
    assert value("math_trunc(-2.7)") == -2
    assert value("math_round(0.5)") == 1
    assert value("math_pow(2, 10)") == 1024.0
    assert value("math_fmod(7, 3)") == 1.0
    assert value("math_hypot(3, 4)") == 5.0
    assert value("math_pi()") == math.pi
    assert math.isnan(value("math_nan()"))
    assert value("math_log(1)") == 0.0
    assert builtin_error("math_sqrt(-1)\n").message == 'math_sqrt: math domain error'
    builtin_error("math_sqrt('4')\n")
    builtin_error("math_exp(100000)\n")


def test_json_parse():
    record = value("json_parse('{\"a\": [1, 2.5, true, null], \"b\": {\"c\": \"d\"}}')")
    assert isinstance(record, MapVal)
    a = record.get('a')
    assert isinstance(a, ListVal)
    assert a.items == [1, 2.5, True, NONE]
    assert record.get('b').get('c') == 'd'
    builtin_error("json_parse('{bad')\n")


def test_json_stringify():
    assert value("json_stringify({'a': [1, none, true], 'b': 'x'})") == '{"a": [1, null, true], "b": "x"}'
    assert value("json_stringify([1, 2], 2)") == '[\n  1,\n  2\n]'
    builtin_error("json_stringify({1: 2})\n")
    builtin_error("json_stringify(len)\n")
    builtin_error("xs = []\nxs.append(xs)\njson_stringify(xs)\n")


def test_csv_parse():
    rows = items("csv_parse('name,age\\nada,36\\n\\nalan,41\\n')")
    assert [(row.get('name'), row.get('age')) for row in rows] == [('ada', '36'), ('alan', '41')]
    rows = items("csv_parse('1;2\\n3;4', ';', false)")
    assert [row.items for row in rows] == [['1', '2'], ['3', '4']]
    assert items("csv_parse('')") == []
    builtin_error("csv_parse('a', ';;')\n")


def test_csv_stringify():
    assert value("csv_stringify([['a', 'b'], [1, 'x,y']])") == 'a,b\n1,"x,y"\n'
    assert value("csv_stringify([{'n': 'ada', 'a': 36}, {'n': 'alan', 'a': 41}])") == 'n,a\nada,36\nalan,41\n'
    assert value("csv_stringify([[1, 2]], ';')") == '1;2\n'
    builtin_error("csv_stringify([1])\n")


def test_file_builtins(tmp_path):
    base = str(tmp_path)
    env = Environment()
    env.define('base', base)
    run_program(
        "path = os_path_join(base, 'notes.txt')\n"
        "file_write(path, 'one\\n')\n"
        "file_append(path, 'two\\n')\n"
        "text = file_read(path)\n"
        "copy = os_path_join(base, 'copy.txt')\n"
        "file_copy(path, copy)\n"
        "moved = os_path_join(base, 'moved.txt')\n"
        "file_rename(copy, moved)\n"
        "sub = os_path_join(base, 'sub', 'deeper')\n"
        "dir_create(sub)\n"
        "listing = dir_list(base)\n"
        "exists = [file_exists(path), file_exists(copy), dir_exists(sub), dir_exists(path)]\n"
        "deleted = [file_delete(moved), file_delete(moved)]\n",
        env,
    )
    assert env.get('text') == 'one\ntwo\n'
    assert env.get('listing').items == ['moved.txt', 'notes.txt', 'sub']
    assert env.get('exists').items == [True, False, True, False]
    assert env.get('deleted').items == [True, False]
    assert (tmp_path / 'sub' / 'deeper').is_dir()


def test_file_read_missing(tmp_path):
    missing = str(tmp_path / 'nope.txt')
    with pytest.raises(ZpyRuntimeError) as info:
        value("file_read(p)", p=missing)
    assert info.value.kind == 'BuiltinError'
    assert info.value.builtin == 'file_read'
    assert 'file not found' in info.value.message


def test_os_environment(monkeypatch):
    monkeypatch.setenv('ZPY_TEST_VAR', 'set')
    assert value("os_getenv('ZPY_TEST_VAR')") == 'set'
    monkeypatch.delenv('ZPY_TEST_VAR')
    assert value("os_getenv('ZPY_TEST_VAR')") is NONE
    assert value("os_getenv('ZPY_TEST_VAR', 'default')") == 'default'
    env = run_program(
        "os_setenv('ZPY_TEST_VAR', 'again')\n"
        "seen = os_environ()['ZPY_TEST_VAR']\n"
        "removed = os_unsetenv('ZPY_TEST_VAR')\n"
        "removed_twice = os_unsetenv('ZPY_TEST_VAR')\n"
    )
    assert env.get('seen') == 'again'
    assert env.get('removed') is True
    assert env.get('removed_twice') is False


def test_os_directories(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    env = run_program(
        "start = os_getcwd()\n"
        "os_mkdir('work')\n"
        "os_chdir('work')\n"
        "inside = os_path_basename(os_getcwd())\n"
        "file_write('f.txt', 'x')\n"
        "is_file = os_path_isfile('f.txt')\n"
        "os_remove('f.txt')\n"
        "os_chdir('..')\n"
        "is_dir = os_path_isdir('work')\n"
        "os_rmdir('work')\n"
        "gone = os_path_exists('work')\n"
    )
    assert env.get('inside') == 'work'
    assert env.get('is_file') is True
    assert env.get('is_dir') is True
    assert env.get('gone') is False
    builtin_error("os_rmdir('does-not-exist')\n")


def test_os_path_helpers():
    assert value("os_path_dirname('a/b/c.txt')") == 'a/b'
    assert items("os_path_splitext('c.tar.gz')") == ['c.tar', '.gz']
    assert value("os_path_normpath('a/./b/../c')") == 'a/c'
    assert value("os_path_abspath('x')").endswith('x')


def test_huge_integers_in_conversions():
    big = 10 ** 400
    assert value("int(s)", s='1' * 5000) == (10 ** 5000 - 1) // 9
    assert value("len(str(b))", b=10 ** 5000) == 5001
    with pytest.raises(ZpyRuntimeError) as info:
        value("float(b)", b=big)
    assert info.value.kind == 'BuiltinError'
    assert info.value.builtin == 'float'
    with pytest.raises(ZpyRuntimeError) as info:
        value("math_sqrt(b)", b=big)
    assert info.value.message == 'math_sqrt: math range error'


def test_huge_index_is_a_builtin_error():
    with pytest.raises(ZpyRuntimeError) as info:
        value("xs.insert(i, 2)", xs=ListVal([1]), i=10 ** 23)
    assert info.value.kind == 'BuiltinError'
    with pytest.raises(ZpyRuntimeError) as info:
        value("insert(xs, i, 2)", xs=ListVal([1]), i=10 ** 23)
    assert info.value.kind == 'BuiltinError'
    assert info.value.builtin == 'insert'


def test_json_huge_numbers():
    assert value("json_parse(t)", t='7' * 5000) == 7 * (10 ** 5000 - 1) // 9
    with pytest.raises(ZpyRuntimeError) as info:
        value("json_stringify(b)", b=10 ** 5000)
    assert info.value.kind == 'BuiltinError'
    assert info.value.builtin == 'json_stringify'


def test_file_read_undecodable(tmp_path):
    path = tmp_path / 'binary.dat'
    path.write_bytes(b'\xff\xfe\x00\x80')
    with pytest.raises(ZpyRuntimeError) as info:
        value("file_read(p)", p=str(path))
    assert info.value.kind == 'BuiltinError'
    assert info.value.builtin == 'file_read'
    assert 'cannot decode' in info.value.message
