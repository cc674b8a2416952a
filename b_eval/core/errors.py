"""Base exception class for all b-eval-specific errors."""


class BEvalError(Exception):
    """Base class for all b-eval errors."""


def describe_error(exc: BaseException) -> str:
    """Human-readable message for an exception, falling back to its type name."""
    return str(exc) or type(exc).__name__
