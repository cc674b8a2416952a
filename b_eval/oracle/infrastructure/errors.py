"""Error types raised by oracle infrastructure."""

from b_eval.core.errors import BEvalError
from b_eval.core.text import preview


class OracleError(BEvalError):
    """Base class for failures talking to the reasoning oracle."""


class OracleTimeoutError(OracleError):
    """Raised when an oracle call does not settle within its timeout."""

    def __init__(self, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Failed to invoke oracle: timed out after {timeout_seconds}s")


class OracleProcessError(OracleError):
    """Raised when the oracle backend exits non-zero or cannot be started."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to invoke oracle: {reason}")


class OracleParseError(OracleError):
    """Raised when the oracle response is not the JSON structure that was requested."""

    def __init__(self, text: str, reason: str = "could not parse JSON response") -> None:
        self.preview = preview(text)
        super().__init__(f"Failed to parse oracle response: {reason}: {self.preview}")
