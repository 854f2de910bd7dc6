"""Tokenizer for the ZPy language.

The lexer turns source text into a flat list of tokens. Block structure is
recovered from leading whitespace: an indentation stack (starting at the
sentinel level 0) is compared with the width of every logical line, and
INDENT / DEDENT tokens are emitted where the width changes. Newlines inside
open brackets do not end a logical line, so multi-line list literals and
call arguments lex as a single line.

Tokenization stops at the first malformed input and raises `LexError`.
"""

from __future__ import annotations

from typing import List

from .errors import LexError
from .tokens import Token, TokenKind, KEYWORDS, OPERATORS, DELIMITERS, OPEN_BRACKETS, CLOSE_BRACKETS

TAB_WIDTH = 4

ESCAPES = {
    'n': '\n',
    't': '\t',
    'r': '\r',
    '\\': '\\',
    '"': '"',
    '\'': '\'',
    '0': '\0',
}


def unescape(body: str) -> str:
    """Resolve backslash escapes in the body of a string literal.

    Unknown escapes keep the escaped character, so `"\\q"` becomes `"q"`.
    """
    if '\\' not in body:
        return body
    out: List[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == '\\' and i + 1 < len(body):
            nxt = body[i + 1]
            out.append(ESCAPES.get(nxt, nxt))
            i += 2
            continue
        out.append(ch)
        i += 1
    return ''.join(out)


def string_value(lexeme: str) -> str:
    """Return the runtime value of a quoted string lexeme."""
    return unescape(lexeme[1:-1])


def tokenize(source: str) -> List[Token]:
    """Convert source code into a list of tokens ending with END.

    Blank lines and comment-only lines produce no tokens. A NEWLINE is
    emitted at the end of every logical line that had content; at end of
    input a missing final NEWLINE is supplied and every open indentation
    level is closed with a DEDENT.
    """
    tokens: List[Token] = []
    indents: List[int] = [0]
    depth = 0  # nesting depth for (), [], {}
    i = 0
    line = 1
    col = 1
    length = len(source)
    at_line_start = True

    def advance(n: int = 1):
        nonlocal i, col, line
        for _ in range(n):
            if i < length and source[i] == '\n':
                line += 1
                col = 1
            else:
                col += 1
            i += 1

    def skip_comment():
        while i < length and source[i] != '\n':
            advance()

    while i < length:
        # Measure indentation at the start of each logical line
        if at_line_start:
            width = 0
            j = i
            while j < length and source[j] in ' \t':
                width += TAB_WIDTH if source[j] == '\t' else 1
                j += 1
            advance(j - i)
            if i >= length:
                break
            c = source[i]
            if c in '\r\n' or c == '#':
                # blank or comment-only line: no tokens, no indentation change
                skip_comment()
                if i < length:
                    advance()
                continue
            at_line_start = False
            top = indents[-1]
            if width > top:
                indents.append(width)
                tokens.append(Token(TokenKind.INDENT, '', line, col))
            elif width < top:
                while indents[-1] > width:
                    indents.pop()
                    tokens.append(Token(TokenKind.DEDENT, '', line, col))
                if indents[-1] != width:
                    raise LexError('InconsistentDedent',
                                   f"unindent to width {width} does not match any outer indentation level",
                                   line, col)
            continue

        c = source[i]
        if c == '\n':
            if depth == 0:
                tokens.append(Token(TokenKind.NEWLINE, '\n', line, col))
                at_line_start = True
            advance()
            continue
        if c in ' \t\r\f':
            advance()
            continue
        if c == '#':
            skip_comment()
            continue
        # Identifiers and keywords
        if c.isalpha() or c == '_':
            start_col = col
            start_i = i
            while i < length and (source[i].isalnum() or source[i] == '_'):
                advance()
            value = source[start_i:i]
            kind = TokenKind.KEYWORD if value in KEYWORDS else TokenKind.IDENTIFIER
            tokens.append(Token(kind, value, line, start_col))
            continue
        # Numbers: digits, optionally followed by '.' and more digits
        if c.isdigit():
            start_col = col
            start_i = i
            kind = TokenKind.INTEGER
            while i < length and source[i].isdigit():
                advance()
            if i + 1 < length and source[i] == '.' and source[i + 1].isdigit():
                kind = TokenKind.FLOAT
                advance()
                while i < length and source[i].isdigit():
                    advance()
            tokens.append(Token(kind, source[start_i:i], line, start_col))
            continue
        # String literal, single or double quoted
        if c == '"' or c == '\'':
            start_col = col
            start_line = line
            start_i = i
            advance()
            while True:
                if i >= length or source[i] == '\n':
                    raise LexError('UnterminatedString', 'unterminated string literal', start_line, start_col)
                ch = source[i]
                if ch == '\\':
                    if i + 1 >= length or source[i + 1] == '\n':
                        raise LexError('UnterminatedString', 'unterminated string literal', start_line, start_col)
                    advance(2)
                    continue
                advance()
                if ch == c:
                    break
            tokens.append(Token(TokenKind.STRING, source[start_i:i], start_line, start_col))
            continue
        # Operators, longest match first
        op = next((o for o in OPERATORS if source.startswith(o, i)), None)
        if op is not None:
            tokens.append(Token(TokenKind.OPERATOR, op, line, col))
            advance(len(op))
            continue
        if c in DELIMITERS:
            if c in OPEN_BRACKETS:
                depth += 1
            elif c in CLOSE_BRACKETS and depth > 0:
                depth -= 1
            tokens.append(Token(TokenKind.DELIMITER, c, line, col))
            advance()
            continue
        raise LexError('UnknownCharacter', f"unexpected character {c!r}", line, col)

    # An unclosed bracket leaves the line open; the parser reports it at END.
    if tokens and depth == 0 and tokens[-1].kind is not TokenKind.NEWLINE:
        tokens.append(Token(TokenKind.NEWLINE, '', line, col))
    while len(indents) > 1:
        indents.pop()
        tokens.append(Token(TokenKind.DEDENT, '', line, col))
    tokens.append(Token(TokenKind.END, '', line, col))
    return tokens
