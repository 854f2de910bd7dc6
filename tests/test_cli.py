import json

import pytest

from zpy.__main__ import is_complete, main


def write_program(tmp_path, source, name='prog.zpy'):
    path = tmp_path / name
    path.write_text(source, encoding='utf-8')
    return str(path)


def test_run_file(tmp_path, capsys):
    main([write_program(tmp_path, "print('hi', 1 + 1)\n")])
    assert capsys.readouterr().out == 'hi 2\n'


def test_run_code_string(capsys):
    main(['-c', "xs = [1, 2]\nprint(len(xs))"])
    assert capsys.readouterr().out == '2\n'


def test_missing_file(tmp_path, capsys):
    with pytest.raises(SystemExit) as info:
        main([str(tmp_path / 'absent.zpy')])
    assert info.value.code == 1
    assert 'not found' in capsys.readouterr().err


def test_lex_error(capsys):
    with pytest.raises(SystemExit) as info:
        main(['-c', "x = 1 ? 2\n"])
    assert info.value.code == 1
    assert capsys.readouterr().err.startswith('Lex error: 1:7: UnknownCharacter')


def test_every_parse_error_is_printed(capsys):
    with pytest.raises(SystemExit) as info:
        main(['-c', "x = )\ny = 1\nz = (\n"])
    assert info.value.code == 1
    err = capsys.readouterr().err.splitlines()
    assert len(err) == 2
    assert err[0].startswith('Parse error: 1:5: UnexpectedToken')


def test_runtime_error(capsys):
    with pytest.raises(SystemExit) as info:
        main(['-c', "print('start')\nx = 1 / 0\n"])
    assert info.value.code == 1
    captured = capsys.readouterr()
    assert captured.out == 'start\n'
    assert captured.err.strip() == 'Runtime error: 2:7: ZeroDivisionError: division by zero'


def test_tokens(capsys):
    main(['--tokens', '-c', "x = 1"])
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "1:1\tIDENTIFIER\t'x'"
    assert lines[-1].split('\t')[1] == 'END'


def test_emit_and_run_ast(tmp_path, capsys):
    path = write_program(tmp_path, "def sq(n):\n    return n * n\nprint(sq(7))\n")
    main(['--emit-ast', path])
    out_path = capsys.readouterr().out.strip()
    assert out_path.endswith('prog.zpy.ast.json')
    with open(out_path, encoding='utf-8') as f:
        assert json.load(f)['__node__'] == 'Program'
    main(['--ast', out_path])
    assert capsys.readouterr().out == '49\n'


def test_check(tmp_path, capsys):
    main(['--check', write_program(tmp_path, "x = 1\nif x > 0:\n    print(x)\n")])
    assert capsys.readouterr().out.strip() == 'OK: 2 statements'


def test_debug_file_is_written(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    main(['-vv', '-c', "def f():\n    return 1\nx = f()\n"])
    trace = (tmp_path / 'debug.txt').read_text(encoding='utf-8')
    assert 'call f() depth=1' in trace
    assert 'assign x = 1' in trace


def test_version(capsys):
    with pytest.raises(SystemExit) as info:
        main(['--version'])
    assert info.value.code == 0
    assert capsys.readouterr().out.strip() == 'ZPy 0.1.0'


def test_missing_program_argument(capsys):
    with pytest.raises(SystemExit) as info:
        main([])
    assert info.value.code == 2


def test_is_complete():
    assert is_complete(['x = 1'])
    assert not is_complete(['if x:'])
    assert not is_complete(['if x:', '    y = 1'])
    assert is_complete(['if x:', '    y = 1', ''])
    assert not is_complete(['xs = [1,'])
    assert is_complete(['xs = [1,', '2]', ''])


def test_interactive_session(monkeypatch, capsys):
    lines = iter([
        "x = 2",
        "x * 21",
        "def f(a):",
        "    return a + 1",
        "",
        "f(x)",
        "y = undefined",
        "print('after error')",
    ])

    def fake_input(prompt=''):
        try:
            return next(lines)
        except StopIteration:
            raise EOFError from None

    monkeypatch.setattr('builtins.input', fake_input)
    main(['-i'])
    captured = capsys.readouterr()
    out = captured.out.splitlines()
    assert out[0].startswith('ZPy 0.1.0 interactive mode')
    assert out[1:4] == ['42', '3', 'after error']
    assert 'Runtime error: 1:5: NameError' in captured.err
