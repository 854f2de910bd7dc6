from pathlib import Path

from zpy.interpreter import parse_program, Interpreter

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_4(capsys):
    with open(EXAMPLES / 'program_4.zpy', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    env = interp.run(ast)
    out = capsys.readouterr().out.strip()
    expected = ['1', '2', 'fizz', '4', 'buzz', 'fizz', '7', '8', 'fizz', 'buzz',
                '11', 'fizz', '13', '14', 'fizzbuzz']
    assert out.splitlines() == expected
    assert env.get('result') == 'fizzbuzz'
