"""Reference grammar for the ZPy language.

This module describes ZPy declaratively with a Lark grammar, parsed with
LALR(1). Block structure comes from Lark's `Indenter` post-lexer, which
turns the indentation carried by `_NEWLINE` tokens into `_INDENT` and
`_DEDENT` tokens and ignores line breaks inside brackets.

The `ASTTransformer` builds the same `zpy.ast` nodes as the hand-written
parser, so for every valid program

    parse_with_grammar(source) == parse_program(source)

(positions are excluded from node equality). The CLI's `--check` mode and
the test-suite use it to cross-check `zpy.parser`. Errors are reported as
`ParseErrors` holding a single `ParseError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from lark import Lark, Transformer, v_args
from lark.exceptions import UnexpectedCharacters, UnexpectedInput, UnexpectedToken, VisitError
from lark.indenter import DedentError, Indenter

from .ast import (
    Program, Literal, Identifier, UnaryOp, BinaryOp, Call, Index, Attribute,
    ListLiteral, MapLiteral, Lambda, ExprStmt, Assign, AugAssign, If, While, For,
    FunctionDef, Return, Break, Continue, Pass, Delete, Node,
)
from .errors import LexError, ParseError, ParseErrors
from .lexer import TAB_WIDTH, string_value, tokenize
from .types import parse_integer


ZPY_GRAMMAR = r"""
    file_input: (_NEWLINE | stmt)*

    ?stmt: simple_stmt | compound_stmt
    ?simple_stmt: (expr_stmt | assign_stmt | aug_assign_stmt | return_stmt
                  | break_stmt | continue_stmt | pass_stmt | del_stmt) _NEWLINE

    expr_stmt: test
    assign_stmt: test "=" test
    aug_assign_stmt: test AUGOP test
    return_stmt: "return" test?
    break_stmt: "break"
    continue_stmt: "continue"
    pass_stmt: "pass"
    del_stmt: "del" test

    ?compound_stmt: if_stmt | while_stmt | for_stmt | funcdef
    if_stmt: "if" test suite elif_clause* else_clause?
    elif_clause: "elif" test suite
    else_clause: "else" suite
    while_stmt: "while" test suite
    for_stmt: "for" NAME "in" test suite
    funcdef: "def" NAME "(" params? ")" suite
    params: NAME ("," NAME)*

    suite: ":" _NEWLINE _INDENT stmt+ _DEDENT

    // Expressions, loosest binding first
    ?test: or_test | lambdef
    lambdef: "lambda" params? ":" test
    ?or_test: and_test | or_test "or" and_test -> or_op
    ?and_test: not_test | and_test "and" not_test -> and_op
    ?not_test: comparison | "not" not_test -> not_op
    ?comparison: arith
        | comparison COMP_OP arith -> binop
        | comparison "in" arith -> in_op
        | comparison "not" "in" arith -> not_in_op
    ?arith: term
        | arith PLUS term -> binop
        | arith MINUS term -> binop
    ?term: factor
        | term STAR factor -> binop
        | term SLASH factor -> binop
        | term PERCENT factor -> binop
    ?factor: postfix
        | MINUS factor -> neg
    ?postfix: atom
        | postfix "(" arguments? ")" -> call
        | postfix "[" test "]" -> index
        | postfix "." NAME -> attribute
    arguments: test ("," test)* ","?

    ?atom: NAME -> var
        | INT -> integer
        | FLOAT -> float_lit
        | STRING -> string
        | "true" -> const_true
        | "false" -> const_false
        | "none" -> const_none
        | "(" test ")"
        | "[" (test ("," test)* ","?)? "]" -> list_lit
        | "{" (pair ("," pair)* ","?)? "}" -> map_lit
    pair: test ":" test

    AUGOP: "+=" | "-=" | "*=" | "/=" | "%="
    COMP_OP: "==" | "!=" | "<=" | ">=" | "<" | ">"
    PLUS: "+"
    MINUS: "-"
    STAR: "*"
    SLASH: "/"
    PERCENT: "%"

    NAME: /[^\W\d]\w*/
    FLOAT.2: /\d+\.\d+/
    INT: /\d+/
    STRING: /"(?:[^"\\\n]|\\.)*"/ | /'(?:[^'\\\n]|\\.)*'/

    COMMENT: /#[^\n]*/
    _NEWLINE: ( /\r?\n[\t ]*/ | COMMENT )+

    %ignore /[\t \f\r]+/
    %ignore COMMENT
    %declare _INDENT _DEDENT
"""


class ZpyIndenter(Indenter):
    NL_type = '_NEWLINE'
    OPEN_PAREN_types = ['LPAR', 'LSQB', 'LBRACE']
    CLOSE_PAREN_types = ['RPAR', 'RSQB', 'RBRACE']
    INDENT_type = '_INDENT'
    DEDENT_type = '_DEDENT'
    tab_len = TAB_WIDTH


ZPY_PARSER = Lark(
    ZPY_GRAMMAR,
    start='file_input',
    parser='lalr',
    postlex=ZpyIndenter(),
    propagate_positions=True,
    maybe_placeholders=False,
)


def pos(meta) -> Dict[str, int]:
    if getattr(meta, 'empty', True):
        return {}
    return {'line': meta.line, 'column': meta.column}


def invalid(message: str, line: int, column: int) -> ParseErrors:
    return ParseErrors([ParseError('UnexpectedToken', message, line, column)])


@dataclass
class ElseClause:
    body: List[Node]


@v_args(meta=True)
class ASTTransformer(Transformer):
    """Transforms the raw parse tree into an AST."""

    def file_input(self, meta, items):
        return Program(list(items), line=1, column=1)

    # Statements
    def expr_stmt(self, meta, items):
        return ExprStmt(items[0], **pos(meta))

    def assign_stmt(self, meta, items):
        target, value = items
        if not isinstance(target, (Identifier, Index)):
            raise invalid('cannot assign to this expression', target.line, target.column)
        return Assign(target, value, **pos(meta))

    def aug_assign_stmt(self, meta, items):
        target, op, value = items
        if not isinstance(target, (Identifier, Index)):
            raise invalid('cannot assign to this expression', target.line, target.column)
        return AugAssign(target, str(op)[0], value, **pos(meta))

    def return_stmt(self, meta, items):
        return Return(items[0] if items else None, **pos(meta))

    def break_stmt(self, meta, items):
        return Break(**pos(meta))

    def continue_stmt(self, meta, items):
        return Continue(**pos(meta))

    def pass_stmt(self, meta, items):
        return Pass(**pos(meta))

    def del_stmt(self, meta, items):
        target = items[0]
        if not isinstance(target, Index):
            raise invalid("'del' needs an index expression such as xs[0]", target.line, target.column)
        return Delete(target, **pos(meta))

    def if_stmt(self, meta, items):
        branches: List[Tuple[Node, List[Node]]] = [(items[0], items[1])]
        else_body = None
        for clause in items[2:]:
            if isinstance(clause, ElseClause):
                else_body = clause.body
            else:
                branches.append(clause)
        return If(branches, else_body, **pos(meta))

    def elif_clause(self, meta, items):
        return (items[0], items[1])

    def else_clause(self, meta, items):
        return ElseClause(items[0])

    def while_stmt(self, meta, items):
        return While(items[0], items[1], **pos(meta))

    def for_stmt(self, meta, items):
        name, iterable, body = items
        return For(str(name), iterable, body, **pos(meta))

    def funcdef(self, meta, items):
        name = str(items[0])
        params = items[1] if len(items) == 3 else []
        return FunctionDef(name, params, items[-1], **pos(meta))

    def params(self, meta, items):
        names: List[str] = []
        for token in items:
            if str(token) in names:
                raise invalid(f"duplicate parameter {str(token)!r}", token.line, token.column)
            names.append(str(token))
        return names

    def suite(self, meta, items):
        return list(items)

    # Expressions
    def lambdef(self, meta, items):
        params = items[0] if len(items) == 2 else []
        return Lambda(params, items[-1], **pos(meta))

    def or_op(self, meta, items):
        return BinaryOp('or', items[0], items[1], **pos(meta))

    def and_op(self, meta, items):
        return BinaryOp('and', items[0], items[1], **pos(meta))

    def not_op(self, meta, items):
        return UnaryOp('not', items[0], **pos(meta))

    def binop(self, meta, items):
        left, op, right = items
        return BinaryOp(str(op), left, right, line=op.line, column=op.column)

    def in_op(self, meta, items):
        return BinaryOp('in', items[0], items[1], **pos(meta))

    def not_in_op(self, meta, items):
        return BinaryOp('not in', items[0], items[1], **pos(meta))

    def neg(self, meta, items):
        return UnaryOp('-', items[1], **pos(meta))

    def call(self, meta, items):
        func = items[0]
        args = items[1] if len(items) > 1 else []
        return Call(func, args, **pos(meta))

    def index(self, meta, items):
        return Index(items[0], items[1], **pos(meta))

    def attribute(self, meta, items):
        return Attribute(items[0], str(items[1]), **pos(meta))

    def arguments(self, meta, items):
        return list(items)

    def var(self, meta, items):
        return Identifier(str(items[0]), **pos(meta))

    def integer(self, meta, items):
        return Literal(parse_integer(str(items[0])), 'Integer', **pos(meta))

    def float_lit(self, meta, items):
        return Literal(float(items[0]), 'Float', **pos(meta))

    def string(self, meta, items):
        return Literal(string_value(str(items[0])), 'String', **pos(meta))

    def const_true(self, meta, items):
        return Literal(True, 'Boolean', **pos(meta))

    def const_false(self, meta, items):
        return Literal(False, 'Boolean', **pos(meta))

    def const_none(self, meta, items):
        return Literal(None, 'None', **pos(meta))

    def list_lit(self, meta, items):
        return ListLiteral(list(items), **pos(meta))

    def map_lit(self, meta, items):
        return MapLiteral(list(items), **pos(meta))

    def pair(self, meta, items):
        return (items[0], items[1])


def check_context(statements: List[Node], in_loop: bool, in_function: bool, errors: List[ParseError]):
    """Report `break`/`continue` outside loops and `return` outside functions."""
    for stmt in statements:
        if isinstance(stmt, (Break, Continue)) and not in_loop:
            keyword = 'break' if isinstance(stmt, Break) else 'continue'
            errors.append(ParseError('UnexpectedToken', f"'{keyword}' outside loop", stmt.line, stmt.column))
        elif isinstance(stmt, Return) and not in_function:
            errors.append(ParseError('UnexpectedToken', "'return' outside function", stmt.line, stmt.column))
        elif isinstance(stmt, If):
            for _, body in stmt.branches:
                check_context(body, in_loop, in_function, errors)
            if stmt.else_body is not None:
                check_context(stmt.else_body, in_loop, in_function, errors)
        elif isinstance(stmt, (While, For)):
            check_context(stmt.body, True, in_function, errors)
        elif isinstance(stmt, FunctionDef):
            check_context(stmt.body, False, True, errors)


def dedent_position(source: str) -> Tuple[int, int]:
    # Lark's DedentError has no position; the lexer reports the same fault with one.
    try:
        tokenize(source)
    except LexError as e:
        return e.line or 0, e.column or 0
    return 0, 0


def parse_with_grammar(source: str) -> Program:
    """Parse ZPy source with the reference grammar, raising ParseErrors on failure."""
    try:
        tree = ZPY_PARSER.parse(source + '\n')
    except DedentError as e:
        line, column = dedent_position(source)
        raise ParseErrors([ParseError('UnexpectedToken', str(e), line, column)]) from None
    except UnexpectedToken as e:
        kind = 'UnexpectedEndOfInput' if e.token.type == '$END' else 'UnexpectedToken'
        expected = ', '.join(sorted(e.expected)) if e.expected else 'nothing'
        error = ParseError(kind, f"unexpected {e.token.type} {str(e.token)!r}, expected one of: {expected}",
                           e.line if e.line != -1 else 0, e.column if e.column != -1 else 0)
        raise ParseErrors([error]) from None
    except UnexpectedCharacters as e:
        raise ParseErrors([ParseError('UnexpectedToken', f"unexpected character {e.char!r}",
                                      e.line, e.column)]) from None
    except UnexpectedInput as e:
        raise ParseErrors([ParseError('UnexpectedEndOfInput', 'unexpected end of input',
                                      getattr(e, 'line', 0), getattr(e, 'column', 0))]) from None
    try:
        program = ASTTransformer().transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, ParseErrors):
            raise e.orig_exc from None
        raise
    errors: List[ParseError] = []
    check_context(program.body, False, False, errors)
    if errors:
        raise ParseErrors(errors)
    return program
