"""Error taxonomy for expression evaluation."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    UNDEFINED_VARIABLE = "UndefinedVariable"
    UNKNOWN_OPERATION = "UnknownOperation"
    MALFORMED_OPERATION_ARGS = "MalformedOperationArgs"
    EVALUATION_DEPTH_EXCEEDED = "EvaluationDepthExceeded"
    INVALID_EXPRESSION = "InvalidExpression"


class FrankaError(Exception):
    """Base class for every error raised while evaluating an expression."""

    code: ErrorCode

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UndefinedVariableError(FrankaError):
    """A variable reference names a binding absent from the environment."""

    code = ErrorCode.UNDEFINED_VARIABLE

    def __init__(self, name: str) -> None:
        super().__init__(f"Undefined variable: {name}")
        self.name = name


class UnknownOperationError(FrankaError):
    """An operation mapping's key is not a recognized operation."""

    code = ErrorCode.UNKNOWN_OPERATION

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown operation: {name}")
        self.name = name


class MalformedOperationArgsError(FrankaError):
    """An operation payload is missing a required field or has the wrong shape."""

    code = ErrorCode.MALFORMED_OPERATION_ARGS

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(f"Malformed '{operation}' operation: {reason}")
        self.operation = operation
        self.reason = reason


class EvaluationDepthExceededError(FrankaError):
    """The expression tree is nested deeper than the configured limit."""

    code = ErrorCode.EVALUATION_DEPTH_EXCEEDED

    def __init__(self, limit: int) -> None:
        super().__init__(f"Evaluation depth exceeded the limit of {limit}")
        self.limit = limit


class InvalidExpressionError(FrankaError):
    """A Python object that is not part of the value model was found in an expression."""

    code = ErrorCode.INVALID_EXPRESSION

    def __init__(self, value: Any) -> None:
        super().__init__(f"Not a valid expression value: {value!r} ({type(value).__name__})")
        self.value = value
