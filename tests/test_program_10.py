from pathlib import Path

from zpy.interpreter import parse_program, Interpreter

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_10(capsys):
    with open(EXAMPLES / 'program_10.zpy', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    env = interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out.splitlines() == [
        '[1, 2, 3, 4]',
        'true',
        '{"x": 1, "y": 2}',
        '{"y": 2}',
        '[1, 2, 3, 4]',
        '[1, 2, 3, 4, 5]',
    ]
    assert env.get('a') is env.get('b')
