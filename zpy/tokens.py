from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TokenKind(Enum):
    KEYWORD = 'keyword'
    IDENTIFIER = 'identifier'
    INTEGER = 'integer'
    FLOAT = 'float'
    STRING = 'string'
    OPERATOR = 'operator'
    DELIMITER = 'delimiter'
    NEWLINE = 'newline'
    INDENT = 'indent'
    DEDENT = 'dedent'
    END = 'end'


LITERAL_KINDS = frozenset({TokenKind.INTEGER, TokenKind.FLOAT, TokenKind.STRING})

KEYWORDS = frozenset({
    'true', 'false', 'none',
    'if', 'elif', 'else', 'while', 'for', 'in',
    'break', 'continue', 'pass', 'def', 'return', 'del', 'lambda',
    'and', 'or', 'not',
})

# Longest lexemes first so that '==' wins over '='.
OPERATORS = (
    '==', '!=', '<=', '>=', '+=', '-=', '*=', '/=', '%=',
    '+', '-', '*', '/', '%', '<', '>', '=',
)

DELIMITERS = frozenset('()[]{},:.')

OPEN_BRACKETS = {'(': ')', '[': ']', '{': '}'}
CLOSE_BRACKETS = frozenset(OPEN_BRACKETS.values())


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    lexeme: str
    line: int
    column: int

    def is_a(self, kind: TokenKind, lexeme: str | None = None) -> bool:
        return self.kind is kind and (lexeme is None or self.lexeme == lexeme)

    def describe(self) -> str:
        """Human-readable description used in parser diagnostics."""
        if self.kind in (TokenKind.NEWLINE, TokenKind.INDENT, TokenKind.DEDENT):
            return self.kind.value.upper()
        if self.kind is TokenKind.END:
            return 'end of input'
        return f"{self.kind.value} {self.lexeme!r}"

    def __repr__(self) -> str:
        return f"Token({self.kind.name}, {self.lexeme!r}, {self.line}:{self.column})"
