"""Exceptions raised while lexing, parsing and compiling dynein expressions."""

from __future__ import annotations


class ExpressionError(Exception):
    """Base class for every error raised by dyexpr."""

    def __init__(self, message: str, position: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.position = position

    def __str__(self) -> str:
        return self.message


# ---- Lexing ----


class LexError(ExpressionError, SyntaxError):
    """Malformed token."""


class UnterminatedStringError(LexError):
    pass


class UnterminatedBinaryError(LexError):
    pass


class InvalidEscapeError(LexError):
    pass


class InvalidBase64Error(LexError):
    pass


class UnexpectedCharError(LexError):
    pass


# ---- Parsing ----


class ParseError(ExpressionError, SyntaxError):
    """Grammar violation."""


class UnexpectedTokenError(ParseError):
    pass


class UnbalancedDelimiterError(ParseError):
    pass


# ---- Typing ----


class ValueTypeError(ExpressionError, TypeError):
    """A literal has the wrong type for where it is used."""


class HeterogeneousSetError(ValueTypeError):
    pass


class EmptySetError(ValueTypeError):
    pass


class DuplicateSetElementError(ValueTypeError):
    pass


class InvalidNumberError(ValueTypeError):
    """A number literal is outside the range or precision DynamoDB accepts."""


class SortKeyTypeMismatchError(ValueTypeError):
    """A sort key literal does not match the declared sort key type (strict mode)."""

    def __init__(
        self,
        expected: object,
        actual: object,
        suggestion: str | None = None,
    ) -> None:
        message = (
            f"Invalid type detected. Expected type is {expected}, "
            f"but actual type is {actual}."
        )
        if suggestion is not None:
            message += f"\nDid you intend '{suggestion}'?"
        super().__init__(message)
        self.expected = expected
        self.actual = actual
        self.suggestion = suggestion


class AmbiguousCoercionError(ValueTypeError):
    """A literal cannot be reinterpreted as the sort key type (non-strict mode)."""


# ---- Semantics and configuration ----


class SemanticError(ExpressionError, ValueError):
    """Well-formed input that cannot be compiled into a valid request."""


class ConfigurationError(ExpressionError, ValueError):
    """Invalid flags or configuration file content."""
