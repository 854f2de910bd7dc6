from pathlib import Path

from zpy.interpreter import parse_program, Interpreter

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_13(capsys):
    with open(EXAMPLES / 'program_13.zpy', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    env = interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out.splitlines() == ['[1, 4, 9, 16]', '12']
