from dataclasses import dataclass
from typing import Any, List

SYNTAX_ERROR = 'SyntaxError'
PARSE_ERROR = 'ParseError'
RUNTIME_ERROR = 'RuntimeError'


@dataclass(frozen=True)
class ErrorVal:
    """A single diagnostic: which stage raised it, what went wrong, and where."""
    kind: str
    message: str
    line: int

    def __str__(self) -> str:
        return f"line[{self.line}] {self.kind}: {self.message}"


class AliceError(Exception):
    """Exception type used to propagate Alice errors from any stage."""
    def __init__(self, err: ErrorVal):
        super().__init__(str(err))
        self.err = err

    @property
    def kind(self) -> str:
        return self.err.kind

    @property
    def line(self) -> int:
        return self.err.line


class ScanError(AliceError):
    """Raised by the scanner once the whole input has been read.

    Carries every lexical error found, in source order; `err` is the first.
    """
    def __init__(self, errors: List[ErrorVal]):
        super().__init__(errors[0])
        self.errors = errors
        self.args = ('\n'.join(str(e) for e in errors),)


class ReturnSignal(Exception):
    """Internal exception to handle return statements in functions."""
    def __init__(self, value: Any):
        super().__init__('return')
        self.value = value


def syntax_error(message: str, line: int) -> ErrorVal:
    return ErrorVal(SYNTAX_ERROR, message, line)


def parse_error(message: str, line: int) -> AliceError:
    return AliceError(ErrorVal(PARSE_ERROR, message, line))


def runtime_error(message: str, line: int) -> AliceError:
    return AliceError(ErrorVal(RUNTIME_ERROR, message, line))
