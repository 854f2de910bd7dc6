# ZPy language package
# This package provides a tokenizer, parser and tree-walking interpreter for
# the ZPy scripting language.
__version__ = '0.1.0'

from .lexer import tokenize
from .parser import parse, parse_program
from .environment import Environment
from .errors import ZpyError, LexError, ParseError, ParseErrors, ZpyRuntimeError, BuiltinFailure
from .builtin_function import BuiltinRegistry
from .std import default_registry
from .interpreter import Interpreter, execute, run_program, global_environment

__all__ = [
    'tokenize',
    'parse',
    'parse_program',
    'execute',
    'run_program',
    'Interpreter',
    'Environment',
    'BuiltinRegistry',
    'default_registry',
    'global_environment',
    'ZpyError',
    'LexError',
    'ParseError',
    'ParseErrors',
    'ZpyRuntimeError',
    'BuiltinFailure',
]
