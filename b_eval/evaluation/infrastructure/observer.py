"""StructlogEvaluationObserver — production observer that delegates to structlog."""

import structlog


class StructlogEvaluationObserver:
    """Logs evaluation domain events to structlog.

    Does NOT inherit from EvaluationObserver (structural typing via Protocol).
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def evaluation_started(
        self,
        evaluation_id: str,
        behavior_key: str,
        tier: str,
        num_scenarios: int,
        num_judges: int,
        max_turns: int,
    ) -> None:
        self._log.info(
            "evaluation.started",
            evaluation_id=evaluation_id,
            behavior_key=behavior_key,
            tier=tier,
            num_scenarios=num_scenarios,
            num_judges=num_judges,
            max_turns=max_turns,
        )

    def evaluation_completed(
        self, evaluation_id: str, overall_score: float | None, elapsed_seconds: float
    ) -> None:
        self._log.info(
            "evaluation.completed",
            evaluation_id=evaluation_id,
            overall_score=overall_score,
            elapsed_seconds=round(elapsed_seconds, 2),
        )

    def evaluation_failed(self, evaluation_id: str, reason: str) -> None:
        self._log.error("evaluation.failed", evaluation_id=evaluation_id, reason=reason)

    def stage_started(self, evaluation_id: str, stage: str) -> None:
        self._log.info("evaluation.stage_started", evaluation_id=evaluation_id, stage=stage)

    def stage_completed(self, evaluation_id: str, stage: str) -> None:
        self._log.info(
            "evaluation.stage_completed", evaluation_id=evaluation_id, stage=stage
        )

    def stage_failed(self, evaluation_id: str, stage: str, reason: str) -> None:
        self._log.error(
            "evaluation.stage_failed",
            evaluation_id=evaluation_id,
            stage=stage,
            reason=reason,
        )

    def rollout_progress(self, evaluation_id: str, completed: int, total: int) -> None:
        self._log.info(
            "evaluation.rollout_progress",
            evaluation_id=evaluation_id,
            completed=completed,
            total=total,
        )

    def judgment_progress(self, evaluation_id: str, completed: int, total: int) -> None:
        self._log.info(
            "evaluation.judgment_progress",
            evaluation_id=evaluation_id,
            completed=completed,
            total=total,
        )

    def scenario_rollout_started(self, evaluation_id: str, scenario_id: str) -> None:
        self._log.debug(
            "evaluation.scenario_rollout_started",
            evaluation_id=evaluation_id,
            scenario_id=scenario_id,
        )

    def scenario_rollout_completed(
        self,
        evaluation_id: str,
        scenario_id: str,
        turn_count: int,
        completed: bool,
    ) -> None:
        self._log.debug(
            "evaluation.scenario_rollout_completed",
            evaluation_id=evaluation_id,
            scenario_id=scenario_id,
            turn_count=turn_count,
            completed=completed,
        )

    def scenario_rollout_failed(
        self, evaluation_id: str, scenario_id: str, reason: str
    ) -> None:
        self._log.warning(
            "evaluation.scenario_rollout_failed",
            evaluation_id=evaluation_id,
            scenario_id=scenario_id,
            reason=reason,
        )

    def comparison_started(
        self, comparison_id: str, evaluation_a: str, evaluation_b: str
    ) -> None:
        self._log.info(
            "comparison.started",
            comparison_id=comparison_id,
            evaluation_a=evaluation_a,
            evaluation_b=evaluation_b,
        )

    def comparison_completed(
        self, comparison_id: str, winner: str, difference: float
    ) -> None:
        self._log.info(
            "comparison.completed",
            comparison_id=comparison_id,
            winner=winner,
            difference=round(difference, 4),
        )

    def comparison_failed(self, comparison_id: str, reason: str) -> None:
        self._log.error("comparison.failed", comparison_id=comparison_id, reason=reason)
