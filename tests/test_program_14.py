from pathlib import Path

from zpy.interpreter import parse_program, Interpreter

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_14(capsys):
    with open(EXAMPLES / 'program_14.zpy', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    env = interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out.splitlines() == [
        'zpy 2',
        '{"name": "zpy", "tags": ["small", "fast"], "version": 1}',
        'ada is 36',
        'alan is 41',
    ]
