"""ComparisonOrchestrator — runs two evaluations and picks a winner."""

from b_eval.core.errors import describe_error
from b_eval.evaluation.application.orchestrator import EvaluationOrchestrator
from b_eval.evaluation.domain.comparison import ComparisonResults, compare_scores
from b_eval.evaluation.domain.errors import ComparisonError, ComparisonNotFoundError
from b_eval.evaluation.domain.evaluation import EvaluationResults, utcnow
from b_eval.evaluation.domain.observer import EvaluationObserver
from b_eval.evaluation.domain.store import ComparisonStore


class ComparisonOrchestrator:
    """Runs evaluation A to completion, then evaluation B.

    The runs are sequential so the two variants never compete for the same
    agent resources.
    """

    def __init__(
        self,
        store: ComparisonStore,
        evaluations: EvaluationOrchestrator,
        observer: EvaluationObserver,
    ) -> None:
        self._store = store
        self._evaluations = evaluations
        self._observer = observer

    async def run(self, comparison_id: str) -> ComparisonResults:
        comparison = self._store.get_comparison(comparison_id)
        if comparison is None:
            raise ComparisonNotFoundError(comparison_id)

        self._store.update_comparison(
            comparison_id, status="running", started_at=utcnow()
        )
        self._observer.comparison_started(
            comparison_id=comparison_id,
            evaluation_a=comparison.evaluation_a,
            evaluation_b=comparison.evaluation_b,
        )

        try:
            results_a = await self._evaluations.run(comparison.evaluation_a)
            results_b = await self._evaluations.run(comparison.evaluation_b)
            results = compare_scores(
                _require_score(results_a, label="A"),
                _require_score(results_b, label="B"),
            )
        except Exception as exc:
            reason = describe_error(exc)
            self._store.update_comparison(comparison_id, status="error", error=reason)
            self._observer.comparison_failed(comparison_id=comparison_id, reason=reason)
            raise

        self._store.update_comparison(
            comparison_id, status="completed", completed_at=utcnow(), results=results
        )
        self._observer.comparison_completed(
            comparison_id=comparison_id,
            winner=results.winner,
            difference=results.difference,
        )
        return results


def _require_score(results: EvaluationResults, label: str) -> float:
    if results.overall_score is None:
        raise ComparisonError(f"evaluation {label} produced no valid scores")
    return results.overall_score
