"""Parser for the ZPy language.

Statements are parsed by recursive descent: each statement keyword
dispatches to a dedicated rule and a block is
`COLON NEWLINE INDENT statement+ DEDENT`. Expressions are parsed by
precedence climbing over `BINARY_PRECEDENCE`, with the prefix operators
`not` and unary minus sitting at their own levels and postfix call, index
and attribute access binding tightest.

The parser does not stop at the first mistake. When a statement fails it
records a `ParseError`, discards the rest of the offending line (and any
indented block hanging off it) and carries on with the next statement, so
one parse reports every independent error. `parse` only returns a
`Program` when no error was recorded.

All state lives on the `Parser` and its `TokenCursor`; there is no module
level state, so independent parses never interfere.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from .ast import (
    Program, Literal, Identifier, UnaryOp, BinaryOp, Call, Index, Attribute,
    ListLiteral, MapLiteral, Lambda, ExprStmt, Assign, AugAssign, If, While, For,
    FunctionDef, Return, Break, Continue, Pass, Delete, Node,
)
from .errors import ParseError, ParseErrors
from .lexer import tokenize, string_value
from .tokens import Token, TokenKind
from .types import parse_integer

# Binary operators from loosest to tightest binding. All are left-associative.
BINARY_PRECEDENCE = {
    'or': 1,
    'and': 2,
    '==': 4, '!=': 4, '<': 4, '>': 4, '<=': 4, '>=': 4, 'in': 4, 'not in': 4,
    '+': 5, '-': 5,
    '*': 6, '/': 6, '%': 6,
}
LOWEST_PRECEDENCE = 1
NOT_PRECEDENCE = 3
UNARY_PRECEDENCE = 7

AUGMENTED_OPERATORS = {'+=': '+', '-=': '-', '*=': '*', '/=': '/', '%=': '%'}


class _SyntaxProblem(Exception):
    """Unwinds a statement rule back to the recovery point."""
    def __init__(self, error: ParseError):
        super().__init__(str(error))
        self.error = error


class TokenCursor:
    """Position within a token buffer.

    Reading past the end keeps returning the final END token.
    """
    def __init__(self, tokens: List[Token]):
        if not tokens or tokens[-1].kind is not TokenKind.END:
            last = tokens[-1] if tokens else None
            end = Token(TokenKind.END, '', last.line if last else 1, last.column if last else 1)
            tokens = list(tokens) + [end]
        self.tokens = tokens
        self.pos = 0

    def peek(self, offset: int = 0) -> Token:
        index = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def advance(self) -> Token:
        token = self.peek()
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return token

    def check(self, kind: TokenKind, lexeme: Optional[str] = None) -> bool:
        return self.peek().is_a(kind, lexeme)

    def match(self, kind: TokenKind, lexeme: Optional[str] = None) -> Optional[Token]:
        if self.check(kind, lexeme):
            return self.advance()
        return None

    def at_end(self) -> bool:
        return self.peek().kind is TokenKind.END


class Parser:
    def __init__(self, tokens: List[Token]):
        self.cursor = TokenCursor(tokens)
        self.errors: List[ParseError] = []
        self.loop_depth = 0
        self.function_depth = 0

    # Diagnostics and recovery

    def problem(self, token: Token, expectation: str) -> _SyntaxProblem:
        kind = 'UnexpectedEndOfInput' if token.kind is TokenKind.END else 'UnexpectedToken'
        message = f"expected {expectation}, got {token.describe()}"
        return _SyntaxProblem(ParseError(kind, message, token.line, token.column))

    def invalid(self, token_or_node, message: str) -> _SyntaxProblem:
        return _SyntaxProblem(ParseError('UnexpectedToken', message, token_or_node.line, token_or_node.column))

    def expect(self, kind: TokenKind, lexeme: Optional[str], expectation: str) -> Token:
        token = self.cursor.match(kind, lexeme)
        if token is None:
            raise self.problem(self.cursor.peek(), expectation)
        return token

    def expect_line_end(self):
        self.expect(TokenKind.NEWLINE, None, 'end of line')

    def synchronize(self):
        """Discard the rest of the failed statement.

        Tokens are dropped up to and including the next NEWLINE; an indented
        block that follows it belonged to the failed statement and is dropped
        too. A DEDENT closes the enclosing block, so it is left in place.
        """
        cursor = self.cursor
        if cursor.check(TokenKind.INDENT):
            self._skip_block()
            return
        while True:
            token = cursor.peek()
            if token.kind in (TokenKind.END, TokenKind.DEDENT):
                return
            cursor.advance()
            if token.kind is TokenKind.NEWLINE:
                if cursor.check(TokenKind.INDENT):
                    self._skip_block()
                return

    def _skip_block(self):
        depth = 0
        while not self.cursor.at_end():
            token = self.cursor.advance()
            if token.kind is TokenKind.INDENT:
                depth += 1
            elif token.kind is TokenKind.DEDENT:
                depth -= 1
                if depth <= 0:
                    return

    # Statements

    def parse_program(self) -> Program:
        body = self.parse_statements(top_level=True)
        if self.errors:
            raise ParseErrors(self.errors)
        return Program(body, line=1, column=1)

    def parse_statements(self, top_level: bool) -> List[Node]:
        statements: List[Node] = []
        cursor = self.cursor
        while True:
            while cursor.match(TokenKind.NEWLINE):
                pass
            token = cursor.peek()
            if token.kind is TokenKind.END:
                break
            if token.kind is TokenKind.DEDENT:
                if not top_level:
                    break
                self.errors.append(ParseError('UnexpectedToken', 'unexpected DEDENT', token.line, token.column))
                cursor.advance()
                continue
            try:
                statements.append(self.parse_statement())
            except _SyntaxProblem as problem:
                self.errors.append(problem.error)
                self.synchronize()
        return statements

    def parse_statement(self) -> Node:
        token = self.cursor.peek()
        if token.kind is TokenKind.KEYWORD:
            rule = {
                'if': self.parse_if_stmt,
                'while': self.parse_while_stmt,
                'for': self.parse_for_stmt,
                'def': self.parse_func_def,
                'return': self.parse_return_stmt,
                'break': self.parse_break_stmt,
                'continue': self.parse_continue_stmt,
                'pass': self.parse_pass_stmt,
                'del': self.parse_del_stmt,
            }.get(token.lexeme)
            if rule is not None:
                return rule()
        if token.kind is TokenKind.INDENT:
            raise self.invalid(token, 'unexpected indent')
        return self.parse_simple_stmt()

    def parse_block(self, header: str) -> List[Node]:
        self.expect(TokenKind.DELIMITER, ':', f"':' after {header}")
        self.expect(TokenKind.NEWLINE, None, f"end of line after {header}:")
        self.expect(TokenKind.INDENT, None, f"an indented block after {header}")
        body = self.parse_statements(top_level=False)
        self.expect(TokenKind.DEDENT, None, 'end of block')
        return body

    def parse_if_stmt(self) -> If:
        keyword = self.cursor.advance()
        branches: List[Tuple[Node, List[Node]]] = []
        condition = self.parse_expression()
        branches.append((condition, self.parse_block("'if' condition")))
        while self.cursor.match(TokenKind.KEYWORD, 'elif'):
            condition = self.parse_expression()
            branches.append((condition, self.parse_block("'elif' condition")))
        else_body = None
        if self.cursor.match(TokenKind.KEYWORD, 'else'):
            else_body = self.parse_block("'else'")
        return If(branches, else_body, line=keyword.line, column=keyword.column)

    def parse_loop_body(self, header: str) -> List[Node]:
        self.loop_depth += 1
        try:
            return self.parse_block(header)
        finally:
            self.loop_depth -= 1

    def parse_while_stmt(self) -> While:
        keyword = self.cursor.advance()
        condition = self.parse_expression()
        body = self.parse_loop_body("'while' condition")
        return While(condition, body, line=keyword.line, column=keyword.column)

    def parse_for_stmt(self) -> For:
        keyword = self.cursor.advance()
        name = self.expect(TokenKind.IDENTIFIER, None, "a loop variable name after 'for'")
        self.expect(TokenKind.KEYWORD, 'in', "'in' after the loop variable")
        iterable = self.parse_expression()
        body = self.parse_loop_body("'for' clause")
        return For(name.lexeme, iterable, body, line=keyword.line, column=keyword.column)

    def parse_params(self) -> List[str]:
        params: List[str] = []
        while not self.cursor.check(TokenKind.DELIMITER, ')'):
            name = self.expect(TokenKind.IDENTIFIER, None, 'a parameter name')
            if name.lexeme in params:
                raise self.invalid(name, f"duplicate parameter {name.lexeme!r}")
            params.append(name.lexeme)
            if not self.cursor.match(TokenKind.DELIMITER, ','):
                break
        self.expect(TokenKind.DELIMITER, ')', "')' after parameters")
        return params

    def parse_func_def(self) -> FunctionDef:
        keyword = self.cursor.advance()
        name = self.expect(TokenKind.IDENTIFIER, None, "a function name after 'def'")
        self.expect(TokenKind.DELIMITER, '(', "'(' after the function name")
        params = self.parse_params()
        saved_loops = self.loop_depth
        self.loop_depth = 0
        self.function_depth += 1
        try:
            body = self.parse_block('function signature')
        finally:
            self.loop_depth = saved_loops
            self.function_depth -= 1
        return FunctionDef(name.lexeme, params, body, line=keyword.line, column=keyword.column)

    def parse_return_stmt(self) -> Return:
        keyword = self.cursor.peek()
        if self.function_depth == 0:
            raise self.invalid(keyword, "'return' outside function")
        self.cursor.advance()
        value = None
        if not self.cursor.check(TokenKind.NEWLINE):
            value = self.parse_expression()
        self.expect_line_end()
        return Return(value, line=keyword.line, column=keyword.column)

    def parse_break_stmt(self) -> Break:
        keyword = self.cursor.peek()
        if self.loop_depth == 0:
            raise self.invalid(keyword, "'break' outside loop")
        self.cursor.advance()
        self.expect_line_end()
        return Break(line=keyword.line, column=keyword.column)

    def parse_continue_stmt(self) -> Continue:
        keyword = self.cursor.peek()
        if self.loop_depth == 0:
            raise self.invalid(keyword, "'continue' outside loop")
        self.cursor.advance()
        self.expect_line_end()
        return Continue(line=keyword.line, column=keyword.column)

    def parse_pass_stmt(self) -> Pass:
        keyword = self.cursor.advance()
        self.expect_line_end()
        return Pass(line=keyword.line, column=keyword.column)

    def parse_del_stmt(self) -> Delete:
        keyword = self.cursor.advance()
        target = self.parse_expression()
        if not isinstance(target, Index):
            raise self.invalid(target, "'del' needs an index expression such as xs[0]")
        self.expect_line_end()
        return Delete(target, line=keyword.line, column=keyword.column)

    def parse_simple_stmt(self) -> Node:
        start = self.cursor.peek()
        expr = self.parse_expression()
        token = self.cursor.peek()
        if token.is_a(TokenKind.OPERATOR, '=') or (token.kind is TokenKind.OPERATOR and token.lexeme in AUGMENTED_OPERATORS):
            if not isinstance(expr, (Identifier, Index)):
                raise self.invalid(expr, 'cannot assign to this expression')
            self.cursor.advance()
            value = self.parse_expression()
            self.expect_line_end()
            if token.lexeme == '=':
                return Assign(expr, value, line=start.line, column=start.column)
            return AugAssign(expr, AUGMENTED_OPERATORS[token.lexeme], value, line=start.line, column=start.column)
        self.expect_line_end()
        return ExprStmt(expr, line=start.line, column=start.column)

    # Expressions

    def parse_expression(self, min_precedence: int = LOWEST_PRECEDENCE) -> Node:
        left = self.parse_prefix(min_precedence)
        while True:
            op, width = self.binary_operator()
            if op is None or BINARY_PRECEDENCE[op] < min_precedence:
                return left
            token = self.cursor.peek()
            for _ in range(width):
                self.cursor.advance()
            right = self.parse_expression(BINARY_PRECEDENCE[op] + 1)
            left = BinaryOp(op, left, right, line=token.line, column=token.column)

    def binary_operator(self) -> Tuple[Optional[str], int]:
        token = self.cursor.peek()
        if token.kind is TokenKind.OPERATOR and token.lexeme in BINARY_PRECEDENCE:
            return token.lexeme, 1
        if token.kind is TokenKind.KEYWORD:
            if token.lexeme in ('and', 'or', 'in'):
                return token.lexeme, 1
            if token.lexeme == 'not' and self.cursor.peek(1).is_a(TokenKind.KEYWORD, 'in'):
                return 'not in', 2
        return None, 0

    def parse_prefix(self, min_precedence: int) -> Node:
        token = self.cursor.peek()
        if token.is_a(TokenKind.KEYWORD, 'not'):
            if min_precedence > NOT_PRECEDENCE:
                raise self.invalid(token, "'not' must be parenthesized here")
            self.cursor.advance()
            operand = self.parse_expression(NOT_PRECEDENCE)
            return UnaryOp('not', operand, line=token.line, column=token.column)
        if token.is_a(TokenKind.OPERATOR, '-'):
            self.cursor.advance()
            operand = self.parse_expression(UNARY_PRECEDENCE)
            return UnaryOp('-', operand, line=token.line, column=token.column)
        if token.is_a(TokenKind.KEYWORD, 'lambda'):
            if min_precedence > LOWEST_PRECEDENCE:
                raise self.invalid(token, "'lambda' must be parenthesized here")
            return self.parse_lambda()
        return self.parse_postfix()

    def parse_lambda(self) -> Lambda:
        keyword = self.cursor.advance()
        params: List[str] = []
        while not self.cursor.check(TokenKind.DELIMITER, ':'):
            name = self.expect(TokenKind.IDENTIFIER, None, "a parameter name or ':'")
            if name.lexeme in params:
                raise self.invalid(name, f"duplicate parameter {name.lexeme!r}")
            params.append(name.lexeme)
            if not self.cursor.match(TokenKind.DELIMITER, ','):
                break
        self.expect(TokenKind.DELIMITER, ':', "':' after lambda parameters")
        saved_loops = self.loop_depth
        self.loop_depth = 0
        try:
            body = self.parse_expression()
        finally:
            self.loop_depth = saved_loops
        return Lambda(params, body, line=keyword.line, column=keyword.column)

    def parse_postfix(self) -> Node:
        node = self.parse_primary()
        while True:
            if self.cursor.match(TokenKind.DELIMITER, '('):
                args = self.parse_sequence(')', 'an argument')
                node = Call(node, args, line=node.line, column=node.column)
                continue
            if self.cursor.match(TokenKind.DELIMITER, '['):
                index = self.parse_expression()
                self.expect(TokenKind.DELIMITER, ']', "']' after index")
                node = Index(node, index, line=node.line, column=node.column)
                continue
            if self.cursor.match(TokenKind.DELIMITER, '.'):
                name = self.expect(TokenKind.IDENTIFIER, None, "an attribute name after '.'")
                node = Attribute(node, name.lexeme, line=node.line, column=node.column)
                continue
            return node

    def parse_sequence(self, close: str, what: str) -> List[Node]:
        """Parse comma separated expressions up to `close`; a trailing comma is allowed."""
        items: List[Node] = []
        while not self.cursor.check(TokenKind.DELIMITER, close):
            items.append(self.parse_expression())
            if not self.cursor.match(TokenKind.DELIMITER, ','):
                break
        self.expect(TokenKind.DELIMITER, close, f"',' or {close!r} after {what}")
        return items

    def parse_primary(self) -> Node:
        token = self.cursor.peek()
        pos = {'line': token.line, 'column': token.column}
        if token.kind is TokenKind.INTEGER:
            self.cursor.advance()
            return Literal(parse_integer(token.lexeme), 'Integer', **pos)
        if token.kind is TokenKind.FLOAT:
            self.cursor.advance()
            return Literal(float(token.lexeme), 'Float', **pos)
        if token.kind is TokenKind.STRING:
            self.cursor.advance()
            return Literal(string_value(token.lexeme), 'String', **pos)
        if token.kind is TokenKind.IDENTIFIER:
            self.cursor.advance()
            return Identifier(token.lexeme, **pos)
        if token.kind is TokenKind.KEYWORD:
            if token.lexeme in ('true', 'false'):
                self.cursor.advance()
                return Literal(token.lexeme == 'true', 'Boolean', **pos)
            if token.lexeme == 'none':
                self.cursor.advance()
                return Literal(None, 'None', **pos)
        if token.is_a(TokenKind.DELIMITER, '('):
            self.cursor.advance()
            expr = self.parse_expression()
            self.expect(TokenKind.DELIMITER, ')', "')' to close '('")
            return expr
        if token.is_a(TokenKind.DELIMITER, '['):
            self.cursor.advance()
            elements = self.parse_sequence(']', 'a list element')
            return ListLiteral(elements, **pos)
        if token.is_a(TokenKind.DELIMITER, '{'):
            self.cursor.advance()
            return MapLiteral(self.parse_map_entries(), **pos)
        raise self.problem(token, 'an expression')

    def parse_map_entries(self) -> List[Tuple[Node, Node]]:
        entries: List[Tuple[Node, Node]] = []
        while not self.cursor.check(TokenKind.DELIMITER, '}'):
            key = self.parse_expression()
            self.expect(TokenKind.DELIMITER, ':', "':' after a mapping key")
            entries.append((key, self.parse_expression()))
            if not self.cursor.match(TokenKind.DELIMITER, ','):
                break
        self.expect(TokenKind.DELIMITER, '}', "',' or '}' after a mapping entry")
        return entries


def parse(tokens: List[Token]) -> Program:
    """Parse a token list into a Program, raising ParseErrors on failure."""
    return Parser(tokens).parse_program()


def parse_program(source: str) -> Program:
    """Tokenize and parse ZPy source code into a Program AST."""
    return parse(tokenize(source))
