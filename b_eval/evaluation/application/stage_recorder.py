"""StageRecorder — persists stage status transitions on the evaluation record."""

from typing import Any

from b_eval.evaluation.domain.errors import EvaluationNotFoundError
from b_eval.evaluation.domain.evaluation import Evaluation, StageName, utcnow
from b_eval.evaluation.domain.observer import EvaluationObserver
from b_eval.evaluation.domain.store import EvaluationStore


class StageRecorder:
    """Read-modify-write helper for one stage sub-record.

    Each call reloads the evaluation, merges *fields* into the named stage, and
    writes the whole `stages` map back.
    """

    def __init__(self, store: EvaluationStore, observer: EvaluationObserver) -> None:
        self._store = store
        self._observer = observer

    def load(self, evaluation_id: str) -> Evaluation:
        evaluation = self._store.get_evaluation(evaluation_id)
        if evaluation is None:
            raise EvaluationNotFoundError(evaluation_id)
        return evaluation

    def update(self, evaluation_id: str, stage: StageName, **fields: Any) -> Evaluation:
        evaluation = self.load(evaluation_id)
        record = getattr(evaluation.stages, stage)
        stages = evaluation.stages.model_copy(
            update={stage: record.model_copy(update=fields)}
        )
        updated = self._store.update_evaluation(evaluation_id, stages=stages)
        if updated is None:
            raise EvaluationNotFoundError(evaluation_id)
        return updated

    def start(self, evaluation_id: str, stage: StageName, **fields: Any) -> None:
        self.update(
            evaluation_id, stage, status="running", started_at=utcnow(), **fields
        )
        self._observer.stage_started(evaluation_id=evaluation_id, stage=stage)

    def complete(self, evaluation_id: str, stage: StageName, **fields: Any) -> None:
        self.update(
            evaluation_id, stage, status="completed", completed_at=utcnow(), **fields
        )
        self._observer.stage_completed(evaluation_id=evaluation_id, stage=stage)

    def fail(self, evaluation_id: str, stage: StageName, reason: str) -> None:
        self.update(evaluation_id, stage, status="error", error=reason)
        self._observer.stage_failed(evaluation_id=evaluation_id, stage=stage, reason=reason)
