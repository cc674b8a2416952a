"""Error types raised by the evaluation pipeline."""

from b_eval.core.errors import BEvalError


class EvaluationValidationError(BEvalError):
    """Raised when an evaluation or comparison is created with invalid input."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to create evaluation: {reason}")


class EvaluationNotFoundError(BEvalError):
    def __init__(self, evaluation_id: str) -> None:
        super().__init__(f"Failed to find evaluation: '{evaluation_id}'")


class ComparisonNotFoundError(BEvalError):
    def __init__(self, comparison_id: str) -> None:
        super().__init__(f"Failed to find comparison: '{comparison_id}'")


class EvaluationStateError(BEvalError):
    """Raised when a run is requested for an evaluation that cannot start."""

    def __init__(self, evaluation_id: str, reason: str) -> None:
        super().__init__(f"Failed to start evaluation '{evaluation_id}': {reason}")


class SessionExitedError(BEvalError):
    """Raised when the agent session ends before any assistant turn was captured."""

    def __init__(self, scenario_id: str) -> None:
        super().__init__(
            f"Failed to roll out scenario '{scenario_id}': agent session exited"
            " before any output"
        )


class ComparisonError(BEvalError):
    """Raised when a comparison cannot produce a verdict from its evaluations."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to compare evaluations: {reason}")
