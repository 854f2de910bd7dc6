"""Error types for the three ZPy pipeline stages.

Lexing, parsing and execution each have their own error family. All of
them derive from `ZpyError` and carry the source position they are
attributed to, so a host can report `line:column` without knowing which
stage failed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional


class ZpyError(Exception):
    """Base class of every error raised by the ZPy pipeline."""
    def __init__(self, kind: str, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.kind = kind
        self.message = message
        self.line = line
        self.column = column
        super().__init__(self._render())

    def _render(self) -> str:
        if self.line is None:
            return f"{self.kind}: {self.message}"
        return f"{self.line}:{self.column}: {self.kind}: {self.message}"

    def __str__(self) -> str:
        return self._render()


class LexError(ZpyError):
    """Raised by the lexer on the first malformed input.

    Kinds: UnknownCharacter, UnterminatedString, InconsistentDedent.
    """


@dataclass
class ParseError:
    """A single syntax problem recorded by the parser."""
    kind: str  # UnexpectedToken or UnexpectedEndOfInput
    message: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}: {self.kind}: {self.message}"


class ParseErrors(ZpyError):
    """Raised by `parse` with every error collected during recovery."""
    def __init__(self, errors: List[ParseError]):
        self.errors = list(errors)
        first = self.errors[0] if self.errors else None
        super().__init__(
            first.kind if first else 'ParseError',
            '; '.join(str(e) for e in self.errors),
            first.line if first else None,
            first.column if first else None,
        )

    def _render(self) -> str:
        return self.message


class ZpyRuntimeError(ZpyError):
    """Raised when executing a program fails.

    Kinds: TypeError, NameError, ZeroDivisionError, OverflowError, IndexError,
    KeyError, ArityMismatch, BuiltinError and RecursionLimitExceeded. The position is
    filled in by the interpreter from the innermost failing node when the
    raising code did not know it.
    """
    def __init__(self, kind: str, message: str, line: Optional[int] = None,
                 column: Optional[int] = None, builtin: Optional[str] = None):
        self.builtin = builtin
        super().__init__(kind, message, line, column)

    def locate(self, line: int, column: int) -> 'ZpyRuntimeError':
        if self.line is None:
            self.line = line
            self.column = column
            self.args = (self._render(),)
        return self


class BuiltinFailure(Exception):
    """Raised by a builtin to report a failure to the interpreter."""
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
