from pathlib import Path

from zpy.interpreter import parse_program, Interpreter

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_2(capsys):
    with open(EXAMPLES / 'program_2.zpy', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    env = interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out.splitlines() == ['55', '[0, 1, 1, 2, 3, 5, 8, 13, 21, 34]']
    assert env.get('result') == 55
