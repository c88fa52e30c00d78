# Alice language package
# This package provides a scanner, two parsers and a tree-walking interpreter for the Alice language.
from .errors import AliceError, ScanError
from .interpreter import run_program, run_file, Interpreter
from .parser import parse_program

__all__ = [
    'run_program',
    'run_file',
    'parse_program',
    'Interpreter',
    'AliceError',
    'ScanError',
]
