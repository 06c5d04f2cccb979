from typing import Optional


class MatexError(Exception):
    """Base exception for every error raised by matex."""
    def __init__(self, message: str, name: Optional[str] = None):
        self.name = name or type(self).__name__
        self.message = message
        super().__init__(f"{self.name}: {message}")


class ParseError(MatexError):
    """Raised when source text cannot be turned into an AST."""
    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        if line is not None:
            message = f"{message} (line {line}, column {column})"
        super().__init__(message)
        self.line = line
        self.column = column


class WrongToken(ParseError):
    pass


class WrongKeyword(ParseError):
    pass


class NotIdentifier(ParseError):
    pass


class NotComparison(ParseError):
    pass


class EndOfStream(ParseError):
    pass


class UnexpectedEndOfStream(ParseError):
    pass


class NestingTooDeep(ParseError):
    pass


class MatexRuntimeError(MatexError):
    """Base class for errors raised while evaluating a program."""


class TypeMismatch(MatexRuntimeError):
    pass


class UnsupportedComparison(MatexRuntimeError):
    pass


class InvalidAssignmentTarget(MatexRuntimeError):
    pass


class UnboundScope(MatexRuntimeError):
    pass


class UnsupportedOperation(MatexRuntimeError):
    pass


class RecursionLimitExceeded(MatexRuntimeError):
    pass
