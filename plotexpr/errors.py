"""Error codes reported while parsing expressions."""

from __future__ import annotations

import enum


class ErrorCode(enum.IntEnum):
    """Reasons an expression or function definition can be rejected."""

    PARSE_SUCCESS = 0
    SYNTAX_ERROR = 1
    MISSING_BRACKET = 2
    STACK_OVERFLOW = 3
    FUNCTION_NAME_REUSED = 4
    RECURSIVE_FUNCTION_CALL = 5
    EMPTY_FUNCTION = 6
    NO_SUCH_FUNCTION = 7
    ZERO_ORDER = 8
    TOO_MANY_PM = 9
    INVALID_PM = 10
    TOO_MANY_ARGUMENTS = 11
    INCORRECT_ARGUMENT_COUNT = 12


_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.PARSE_SUCCESS: "",
    ErrorCode.SYNTAX_ERROR: "Syntax error",
    ErrorCode.MISSING_BRACKET: "Missing parenthesis",
    ErrorCode.STACK_OVERFLOW: "Stack overflow",
    ErrorCode.FUNCTION_NAME_REUSED: "Name of function is not free",
    ErrorCode.RECURSIVE_FUNCTION_CALL: "recursive function not allowed",
    ErrorCode.EMPTY_FUNCTION: "Empty function",
    ErrorCode.NO_SUCH_FUNCTION: "Function could not be found",
    ErrorCode.ZERO_ORDER: (
        "The differential equation must be at least first-order"
    ),
    ErrorCode.TOO_MANY_PM: "Too many plus-minus symbols",
    ErrorCode.INVALID_PM: (
        "Invalid plus-minus symbol (expression must be constant)"
    ),
    ErrorCode.TOO_MANY_ARGUMENTS: "The function has too many arguments",
    ErrorCode.INCORRECT_ARGUMENT_COUNT: (
        "The function does not have the correct number of arguments"
    ),
}


def error_string(code: ErrorCode | int) -> str:
    """Return a human-readable message for ``code``; empty on success."""
    return _MESSAGES[ErrorCode(code)]


class ParseError(ValueError):
    """Raised when an expression cannot be parsed or a function defined.

    ``position`` is the index in the text as the user wrote it, or -1 when
    no position applies.
    """

    def __init__(self, code: ErrorCode | int, position: int = -1) -> None:
        self.code = ErrorCode(code)
        self.position = position
        message = error_string(self.code)
        if position >= 0:
            message = f"{message} at position {position}"
        super().__init__(message)