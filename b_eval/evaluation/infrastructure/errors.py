"""Error types raised by the evaluation infrastructure."""

from pathlib import Path

from b_eval.core.errors import BEvalError


class StoreLoadError(BEvalError):
    """Raised when the store file exists but cannot be parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to load store: {reason}: {path}")
