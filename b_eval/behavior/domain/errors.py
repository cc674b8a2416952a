"""Error types raised by the behavior catalog."""

from b_eval.core.errors import BEvalError


class DuplicateBehaviorError(BEvalError):
    """Raised when a custom behavior reuses an existing key."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Failed to add behavior: key '{key}' already exists")


class BehaviorNotFoundError(BEvalError):
    """Raised when an evaluation references a behavior key that no longer exists."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Failed to resolve behavior: unknown key '{key}'")


class InvalidBehaviorError(BEvalError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to add behavior: {reason}")
