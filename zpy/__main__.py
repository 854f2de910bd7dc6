"""CLI entry point for the ZPy interpreter.

Usage:
    python -m zpy [-v|-vv|-vvv|-vvvv] <program_file>
    python -m zpy [-v...] -c <code>
    python -m zpy --tokens <program_file>
    python -m zpy --emit-ast <program_file>
    python -m zpy [-v...] --ast <ast_json_file>
    python -m zpy --check <program_file>
    python -m zpy -i [program_file]

Options:
  -v            Increase debug verbosity (can be repeated)
  -c            Run the given source text instead of a file
  --tokens      Print the token stream instead of running the program
  --emit-ast    Parse the given .zpy file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file
  --check       Parse with both the parser and the reference grammar and
                report whether they agree
  -i            Start an interactive session (after running the program,
                if one is given)

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero. Lex, parse and runtime errors are printed
to stderr and the process exits with status 1.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .ast import ExprStmt
from .ast_json import ast_to_obj, ast_from_obj
from .environment import Environment
from .errors import LexError, ParseErrors, ZpyRuntimeError
from .grammar import parse_with_grammar
from .interpreter import Interpreter
from .lexer import tokenize
from .parser import parse
from .types import NoneVal, to_repr

PROMPT = '>>> '
CONTINUATION = '... '


def read_source(path: str) -> str:
    program_file = Path(path)
    if not program_file.exists():
        print(f"Error: file {program_file} not found", file=sys.stderr)
        sys.exit(1)
    with open(program_file, 'r', encoding='utf-8') as f:
        return f.read()


def parse_source(source: str):
    """Tokenize and parse, printing diagnostics; returns None on failure."""
    try:
        return parse(tokenize(source))
    except LexError as e:
        print(f"Lex error: {e}", file=sys.stderr)
    except ParseErrors as e:
        for error in e.errors:
            print(f"Parse error: {error}", file=sys.stderr)
    return None


def run_source(source: str, interpreter: Interpreter, env: Optional[Environment] = None) -> bool:
    program = parse_source(source)
    if program is None:
        return False
    return run_ast(program, interpreter, env)


def run_ast(program, interpreter: Interpreter, env: Optional[Environment] = None) -> bool:
    try:
        interpreter.run(program, env)
    except ZpyRuntimeError as e:
        print(f"Runtime error: {e}", file=sys.stderr)
        return False
    return True


def print_tokens(source: str) -> bool:
    try:
        tokens = tokenize(source)
    except LexError as e:
        print(f"Lex error: {e}", file=sys.stderr)
        return False
    for token in tokens:
        print(f"{token.line}:{token.column}\t{token.kind.name}\t{token.lexeme!r}")
    return True


def check_source(source: str) -> bool:
    program = parse_source(source)
    if program is None:
        return False
    try:
        reference = parse_with_grammar(source)
    except ParseErrors as e:
        for error in e.errors:
            print(f"Parse error (grammar): {error}", file=sys.stderr)
        return False
    if reference != program:
        print('Error: parser and reference grammar disagree', file=sys.stderr)
        return False
    print(f"OK: {len(program.body)} statements")
    return True


def emit_ast(path: str) -> bool:
    program_file = Path(path)
    program = parse_source(read_source(path))
    if program is None:
        return False
    obj = ast_to_obj(program)
    out_path = program_file.with_name(program_file.name + '.ast.json')
    with open(out_path, 'w', encoding='utf-8') as out:
        json.dump(obj, out, ensure_ascii=False, indent=2)
    print(str(out_path))
    return True


def is_complete(lines) -> bool:
    """A REPL entry is complete unless it opens a block or a bracket."""
    if not lines:
        return True
    if lines[-1].rstrip().endswith(':'):
        return False
    if len(lines) > 1 and lines[-1].strip() != '':
        return False
    source = '\n'.join(lines)
    depth = 0
    for ch in source:
        if ch in '([{':
            depth += 1
        elif ch in ')]}':
            depth -= 1
    return depth <= 0


def repl(interpreter: Interpreter, env: Environment):
    print(f"ZPy {__version__} interactive mode. Press Ctrl-D to exit.")
    while True:
        lines = []
        try:
            lines.append(input(PROMPT))
            while not is_complete(lines):
                lines.append(input(CONTINUATION))
        except EOFError:
            print()
            return
        except KeyboardInterrupt:
            print('\nKeyboardInterrupt')
            continue
        source = '\n'.join(lines)
        if not source.strip():
            continue
        program = parse_source(source)
        if program is None:
            continue
        if len(program.body) == 1 and isinstance(program.body[0], ExprStmt):
            try:
                value = interpreter.evaluate(program.body[0].expr, env)
            except ZpyRuntimeError as e:
                print(f"Runtime error: {e}", file=sys.stderr)
                continue
            if not isinstance(value, NoneVal):
                print(to_repr(value))
            continue
        run_ast(program, interpreter, env)


def main(argv: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser(prog='zpy', description="ZPy language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--version', action='version', version=f"ZPy {__version__}")
    parser.add_argument('-i', dest='interactive', action='store_true', help='start an interactive session')
    parser.add_argument('--tokens', action='store_true', help='print tokens instead of running')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('-c', dest='code', metavar='CODE', help='program passed in as a string')
    group.add_argument('--emit-ast', metavar='ZPY_FILE', help='emit AST JSON for the given .zpy file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    group.add_argument('--check', metavar='ZPY_FILE', help='cross-check the parser against the reference grammar')
    parser.add_argument('program', nargs='?', help='ZPy program file (.zpy) to execute')
    args = parser.parse_args(argv)

    if args.emit_ast:
        if not emit_ast(args.emit_ast):
            sys.exit(1)
        return

    if args.check:
        if not check_source(read_source(args.check)):
            sys.exit(1)
        return

    interpreter = Interpreter(debug_level=args.v)
    env = interpreter.global_env

    if args.ast:
        ast_path = Path(args.ast)
        if not ast_path.exists():
            print(f"Error: file {ast_path} not found", file=sys.stderr)
            sys.exit(1)
        with open(ast_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not run_ast(ast_from_obj(data), interpreter, env):
            sys.exit(1)
        return

    if args.code is not None:
        source = args.code
    elif args.program:
        source = read_source(args.program)
    elif args.interactive:
        source = None
    else:
        parser.error('missing program file; or use -c, -i, --emit-ast, --ast or --check')

    if source is not None:
        if args.tokens:
            if not print_tokens(source):
                sys.exit(1)
            return
        if not run_source(source, interpreter, env) and not args.interactive:
            sys.exit(1)

    if args.interactive:
        repl(interpreter, env)


if __name__ == '__main__':
    main()
