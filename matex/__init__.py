# matex package
# This package provides a symbolic evaluator that reduces algebraic
# expressions to canonical simplified forms.
from .errors import MatexError, ParseError, MatexRuntimeError
from .format import NormalFormatter, DebugFormatter
from .interpreter import Runtime, run_program, run_file
from .parser import parse_program, parse_statement
from .simplify import simplify, rearrange

__all__ = [
    'MatexError',
    'ParseError',
    'MatexRuntimeError',
    'NormalFormatter',
    'DebugFormatter',
    'Runtime',
    'run_program',
    'run_file',
    'parse_program',
    'parse_statement',
    'simplify',
    'rearrange',
]
