"""Observer port for the evaluation domain — defines events in domain language."""

from typing import Protocol


class EvaluationObserver(Protocol):
    """Observer port emitting structured events while evaluations run.

    Implementations may log to structlog, render progress, or record for tests.
    """

    def evaluation_started(
        self,
        evaluation_id: str,
        behavior_key: str,
        tier: str,
        num_scenarios: int,
        num_judges: int,
        max_turns: int,
    ) -> None: ...

    def evaluation_completed(
        self, evaluation_id: str, overall_score: float | None, elapsed_seconds: float
    ) -> None: ...

    def evaluation_failed(self, evaluation_id: str, reason: str) -> None: ...

    def stage_started(self, evaluation_id: str, stage: str) -> None: ...

    def stage_completed(self, evaluation_id: str, stage: str) -> None: ...

    def stage_failed(self, evaluation_id: str, stage: str, reason: str) -> None: ...

    def rollout_progress(self, evaluation_id: str, completed: int, total: int) -> None: ...

    def judgment_progress(
        self, evaluation_id: str, completed: int, total: int
    ) -> None: ...

    def scenario_rollout_started(self, evaluation_id: str, scenario_id: str) -> None: ...

    def scenario_rollout_completed(
        self,
        evaluation_id: str,
        scenario_id: str,
        turn_count: int,
        completed: bool,
    ) -> None: ...

    def scenario_rollout_failed(
        self, evaluation_id: str, scenario_id: str, reason: str
    ) -> None: ...

    def comparison_started(
        self, comparison_id: str, evaluation_a: str, evaluation_b: str
    ) -> None: ...

    def comparison_completed(
        self, comparison_id: str, winner: str, difference: float
    ) -> None: ...

    def comparison_failed(self, comparison_id: str, reason: str) -> None: ...
