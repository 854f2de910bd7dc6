from pathlib import Path

import pytest

from zpy.errors import ParseErrors
from zpy.grammar import parse_with_grammar
from zpy.parser import parse_program

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


@pytest.mark.parametrize('path', sorted(EXAMPLES.glob('*.zpy')), ids=lambda p: p.name)
def test_grammar_agrees_with_parser_on_examples(path):
    source = path.read_text(encoding='utf-8')
    assert parse_with_grammar(source) == parse_program(source)


@pytest.mark.parametrize('source', [
    "x = 1 + 2 * 3 - 4 % 5 / 6\n",
    "y = a < b or not c and d\n",
    "z = -x * -(y + 1)\n",
    "ok = k in m and k not in xs\n",
    "f = lambda a, b: a + b\ng = lambda: none\n",
    "v = obj.items[0](1, 'two', 3.5,)\n",
    "m = {\"a\": [1, 2], 'b': {},}\n",
    "xs[i] -= 1\ncount *= 2\n",
    "def f(n):\n    while n > 0:\n        n -= 1\n        if n == 3:\n            break\n    return n\n",
    "for c in \"abc\":\n    if c == 'a':\n        continue\n    elif c == 'b':\n        pass\n    else:\n        del d[c]\n",
    "xs = [\n    1,\n    2,\n]\n",
    "x = 1  # trailing comment\n\n# comment line\ny = 2",
])
def test_grammar_agrees_with_parser(source):
    assert parse_with_grammar(source) == parse_program(source)


def test_grammar_reads_long_integer_literals():
    source = "x = " + "3" * 5000 + "\n"
    assert parse_with_grammar(source) == parse_program(source)


def grammar_errors(source):
    with pytest.raises(ParseErrors) as info:
        parse_with_grammar(source)
    return info.value.errors


def test_unexpected_token():
    errors = grammar_errors("x = = 1\n")
    assert len(errors) == 1
    assert errors[0].kind == 'UnexpectedToken'
    assert errors[0].line == 1


def test_unexpected_end_of_input():
    errors = grammar_errors("x = (1 + 2")
    assert errors[0].kind == 'UnexpectedEndOfInput'


def test_context_errors():
    errors = grammar_errors("break\ndef f():\n    continue\nreturn 1\n")
    assert [e.message for e in errors] == [
        "'break' outside loop",
        "'continue' outside loop",
        "'return' outside function",
    ]


def test_invalid_assignment_target():
    errors = grammar_errors("f() = 1\n")
    assert errors[0].message == 'cannot assign to this expression'


def test_duplicate_parameters():
    errors = grammar_errors("def f(a, a):\n    pass\n")
    assert errors[0].message == "duplicate parameter 'a'"


def test_unknown_character():
    errors = grammar_errors("x = 1 $ 2\n")
    assert errors[0].kind == 'UnexpectedToken'
    assert (errors[0].line, errors[0].column) == (1, 7)
