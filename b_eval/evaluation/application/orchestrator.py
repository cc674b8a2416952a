"""EvaluationOrchestrator — runs the four stages for one evaluation."""

import time
from dataclasses import dataclass
from datetime import datetime

from b_eval.behavior.domain.catalog import BehaviorCatalog
from b_eval.config.domain.pipeline import OracleTimeouts, RolloutSettings
from b_eval.core.errors import describe_error
from b_eval.evaluation.application.ideation import IdeationStage
from b_eval.evaluation.application.judgment import JudgmentStage
from b_eval.evaluation.application.rollout import RolloutEngine, RolloutStage
from b_eval.evaluation.application.stage_recorder import StageRecorder
from b_eval.evaluation.application.understanding import UnderstandingStage
from b_eval.evaluation.domain.errors import (
    EvaluationNotFoundError,
    EvaluationStateError,
)
from b_eval.evaluation.domain.evaluation import EvaluationResults, utcnow
from b_eval.evaluation.domain.observer import EvaluationObserver
from b_eval.evaluation.domain.store import EvaluationStore
from b_eval.oracle.domain.oracle import OneShotOracle
from b_eval.oracle.domain.session import InteractiveOracle


@dataclass(frozen=True)
class ActiveRun:
    evaluation_id: str
    started_at: datetime


class EvaluationOrchestrator:
    """Sequences Understanding, Ideation, Rollout and Judgment for one evaluation.

    Each stage persists its own progress; the orchestrator owns the top-level
    status. An evaluation runs at most once: only `pending` records that are
    not already in flight are accepted.
    """

    def __init__(
        self,
        store: EvaluationStore,
        behaviors: BehaviorCatalog,
        oracle: OneShotOracle,
        interactive: InteractiveOracle,
        rollout_settings: RolloutSettings,
        timeouts: OracleTimeouts,
        observer: EvaluationObserver,
    ) -> None:
        self._store = store
        self._observer = observer
        self._active: dict[str, ActiveRun] = {}

        recorder = StageRecorder(store=store, observer=observer)
        self._understanding = UnderstandingStage(
            behaviors=behaviors,
            oracle=oracle,
            recorder=recorder,
            timeout_seconds=timeouts.understanding_seconds,
        )
        self._ideation = IdeationStage(
            oracle=oracle,
            recorder=recorder,
            timeout_seconds=timeouts.ideation_seconds,
        )
        self._rollout = RolloutStage(
            engine=RolloutEngine(
                interactive=interactive,
                oracle=oracle,
                settings=rollout_settings,
                timeouts=timeouts,
            ),
            recorder=recorder,
            settings=rollout_settings,
            observer=observer,
        )
        self._judgment = JudgmentStage(
            store=store,
            behaviors=behaviors,
            oracle=oracle,
            recorder=recorder,
            observer=observer,
            timeout_seconds=timeouts.judgment_seconds,
        )

    def active_runs(self) -> dict[str, ActiveRun]:
        return dict(self._active)

    def is_active(self, evaluation_id: str) -> bool:
        return evaluation_id in self._active

    async def run(self, evaluation_id: str) -> EvaluationResults:
        """Run every stage and return the evaluation's results.

        Raises:
            EvaluationNotFoundError: if the id is unknown.
            EvaluationStateError: if the evaluation is not pending or already running.
            Exception: whatever stopped a stage, after the record is marked `error`.
        """
        evaluation = self._store.get_evaluation(evaluation_id)
        if evaluation is None:
            raise EvaluationNotFoundError(evaluation_id)
        if evaluation_id in self._active:
            raise EvaluationStateError(evaluation_id, reason="already running")
        if evaluation.status != "pending":
            raise EvaluationStateError(
                evaluation_id, reason=f"status is '{evaluation.status}'"
            )

        started_at = utcnow()
        self._active[evaluation_id] = ActiveRun(
            evaluation_id=evaluation_id, started_at=started_at
        )
        self._store.update_evaluation(
            evaluation_id, status="running", started_at=started_at
        )
        self._observer.evaluation_started(
            evaluation_id=evaluation_id,
            behavior_key=evaluation.behavior_key,
            tier=evaluation.config.tier,
            num_scenarios=evaluation.config.num_scenarios,
            num_judges=evaluation.config.num_judges,
            max_turns=evaluation.config.max_turns,
        )
        clock_start = time.monotonic()

        try:
            understanding = await self._understanding.run(evaluation_id)
            scenarios = await self._ideation.run(evaluation_id, understanding)
            transcripts = await self._rollout.run(evaluation_id, scenarios)
            _, results = await self._judgment.run(
                evaluation_id, transcripts, understanding
            )
        except Exception as exc:
            reason = describe_error(exc)
            self._store.update_evaluation(evaluation_id, status="error", error=reason)
            self._observer.evaluation_failed(evaluation_id=evaluation_id, reason=reason)
            raise
        finally:
            self._active.pop(evaluation_id, None)

        self._observer.evaluation_completed(
            evaluation_id=evaluation_id,
            overall_score=results.overall_score,
            elapsed_seconds=time.monotonic() - clock_start,
        )
        return results
