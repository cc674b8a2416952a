"""EvaluationService — the operations exposed to drivers such as the CLI."""

import asyncio
import uuid
from collections.abc import Coroutine

from pydantic import ValidationError

from b_eval.behavior.domain.behavior import Behavior
from b_eval.behavior.domain.catalog import BehaviorCatalog, find_behavior
from b_eval.config.domain.tier import EvaluationConfig, resolve_evaluation_config
from b_eval.evaluation.application.comparison import ComparisonOrchestrator
from b_eval.evaluation.application.orchestrator import EvaluationOrchestrator
from b_eval.evaluation.domain.comparison import Comparison, ComparisonResults
from b_eval.evaluation.domain.errors import (
    ComparisonNotFoundError,
    EvaluationNotFoundError,
    EvaluationStateError,
    EvaluationValidationError,
)
from b_eval.evaluation.domain.evaluation import (
    Evaluation,
    EvaluationResults,
    EvaluationStatusView,
    PromptConfig,
)
from b_eval.evaluation.domain.store import ComparisonStore, EvaluationStore


def new_record_id() -> str:
    return uuid.uuid4().hex[:12]


class EvaluationService:
    """Create, run, inspect and delete evaluations and comparisons.

    Runs may be awaited directly or started as background tasks on the
    running event loop; status is then polled from the store.
    """

    def __init__(
        self,
        evaluations: EvaluationStore,
        comparisons: ComparisonStore,
        behaviors: BehaviorCatalog,
        orchestrator: EvaluationOrchestrator,
        comparison_orchestrator: ComparisonOrchestrator,
    ) -> None:
        self._evaluations = evaluations
        self._comparisons = comparisons
        self._behaviors = behaviors
        self._orchestrator = orchestrator
        self._comparison_orchestrator = comparison_orchestrator
        self._background: set[asyncio.Task[object]] = set()

    def list_behaviors(self) -> list[Behavior]:
        return self._behaviors.list_behaviors()

    def add_behavior(self, key: str, description: str) -> Behavior:
        return self._behaviors.add_behavior(key, description)

    def create_evaluation(
        self,
        name: str,
        behavior_key: str,
        prompt_config: PromptConfig | None = None,
        tier: str | None = None,
        num_scenarios: int | None = None,
        num_judges: int | None = None,
        max_turns: int | None = None,
        diversity: float | None = None,
    ) -> Evaluation:
        """Persist a pending evaluation with its scale settings resolved.

        Raises:
            EvaluationValidationError: for an unknown behavior or out-of-range setting.
        """
        config = self._resolve_config(
            behavior_key,
            tier=tier,
            num_scenarios=num_scenarios,
            num_judges=num_judges,
            max_turns=max_turns,
            diversity=diversity,
        )
        return self._evaluations.create_evaluation(
            Evaluation(
                id=new_record_id(),
                name=name,
                behavior_key=behavior_key,
                prompt_config=prompt_config or PromptConfig(),
                config=config,
            )
        )

    def list_evaluations(self) -> list[Evaluation]:
        return self._evaluations.list_evaluations()

    def get_evaluation(self, evaluation_id: str) -> Evaluation:
        evaluation = self._evaluations.get_evaluation(evaluation_id)
        if evaluation is None:
            raise EvaluationNotFoundError(evaluation_id)
        return evaluation

    def get_status(self, evaluation_id: str) -> EvaluationStatusView:
        return EvaluationStatusView.of(self.get_evaluation(evaluation_id))

    def delete_evaluation(self, evaluation_id: str) -> None:
        if self._orchestrator.is_active(evaluation_id):
            raise EvaluationStateError(evaluation_id, reason="cannot delete while running")
        if not self._evaluations.delete_evaluation(evaluation_id):
            raise EvaluationNotFoundError(evaluation_id)

    async def run_evaluation(self, evaluation_id: str) -> EvaluationResults:
        return await self._orchestrator.run(evaluation_id)

    def start_evaluation(self, evaluation_id: str) -> asyncio.Task[object]:
        """Schedule a run on the current event loop and return immediately.

        Raises:
            EvaluationNotFoundError: if the id is unknown.
            EvaluationStateError: if the evaluation is not pending or already running.
        """
        evaluation = self.get_evaluation(evaluation_id)
        if evaluation.status != "pending" or self._orchestrator.is_active(evaluation_id):
            raise EvaluationStateError(
                evaluation_id, reason=f"status is '{evaluation.status}'"
            )
        return self._spawn(self._orchestrator.run(evaluation_id))

    def create_comparison(
        self,
        name: str,
        behavior_key: str,
        prompt_config_a: PromptConfig,
        prompt_config_b: PromptConfig,
        tier: str | None = None,
        num_scenarios: int | None = None,
        num_judges: int | None = None,
        max_turns: int | None = None,
        diversity: float | None = None,
    ) -> Comparison:
        """Create two pending evaluations with identical settings and link them."""
        config = self._resolve_config(
            behavior_key,
            tier=tier,
            num_scenarios=num_scenarios,
            num_judges=num_judges,
            max_turns=max_turns,
            diversity=diversity,
        )
        evaluation_a = self._create_variant(name, "A", behavior_key, prompt_config_a, config)
        evaluation_b = self._create_variant(name, "B", behavior_key, prompt_config_b, config)
        return self._comparisons.create_comparison(
            Comparison(
                id=new_record_id(),
                name=name,
                evaluation_a=evaluation_a.id,
                evaluation_b=evaluation_b.id,
                behavior_key=behavior_key,
            )
        )

    def list_comparisons(self) -> list[Comparison]:
        return self._comparisons.list_comparisons()

    def get_comparison(self, comparison_id: str) -> Comparison:
        comparison = self._comparisons.get_comparison(comparison_id)
        if comparison is None:
            raise ComparisonNotFoundError(comparison_id)
        return comparison

    def delete_comparison(self, comparison_id: str) -> None:
        """Delete the comparison record; its two evaluations are kept."""
        if not self._comparisons.delete_comparison(comparison_id):
            raise ComparisonNotFoundError(comparison_id)

    async def run_comparison(self, comparison_id: str) -> ComparisonResults:
        return await self._comparison_orchestrator.run(comparison_id)

    def start_comparison(self, comparison_id: str) -> asyncio.Task[object]:
        self.get_comparison(comparison_id)
        return self._spawn(self._comparison_orchestrator.run(comparison_id))

    def _resolve_config(
        self,
        behavior_key: str,
        tier: str | None,
        num_scenarios: int | None,
        num_judges: int | None,
        max_turns: int | None,
        diversity: float | None,
    ) -> EvaluationConfig:
        if find_behavior(self._behaviors, behavior_key) is None:
            raise EvaluationValidationError(f"unknown behavior '{behavior_key}'")
        try:
            return resolve_evaluation_config(
                tier=tier,
                num_scenarios=num_scenarios,
                num_judges=num_judges,
                max_turns=max_turns,
                diversity=diversity,
            )
        except ValidationError as exc:
            raise EvaluationValidationError(
                f"invalid settings ({exc.error_count()} errors)"
            ) from exc

    def _create_variant(
        self,
        name: str,
        label: str,
        behavior_key: str,
        prompt_config: PromptConfig,
        config: EvaluationConfig,
    ) -> Evaluation:
        return self._evaluations.create_evaluation(
            Evaluation(
                id=new_record_id(),
                name=f"{name} ({label})",
                behavior_key=behavior_key,
                prompt_config=prompt_config,
                config=config,
            )
        )

    def _spawn(self, coroutine: Coroutine[object, object, object]) -> asyncio.Task[object]:
        task: asyncio.Task[object] = asyncio.get_running_loop().create_task(coroutine)
        self._background.add(task)
        task.add_done_callback(self._finish_background)
        return task

    def _finish_background(self, task: asyncio.Task[object]) -> None:
        self._background.discard(task)
        # The failure is already persisted on the record and reported by the observer.
        if not task.cancelled():
            task.exception()
