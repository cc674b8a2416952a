"""Record store ports for evaluations and comparisons."""

from typing import Protocol

from b_eval.evaluation.domain.comparison import Comparison
from b_eval.evaluation.domain.evaluation import Evaluation


class EvaluationStore(Protocol):
    """Durable, mutable storage for Evaluation records.

    `update_evaluation` shallow-merges the given fields into the stored record;
    a `stages` value replaces the stored stages wholesale. Writers are expected
    not to race on the same id.
    """

    def get_evaluation(self, evaluation_id: str) -> Evaluation | None: ...

    def list_evaluations(self) -> list[Evaluation]: ...

    def create_evaluation(self, evaluation: Evaluation) -> Evaluation: ...

    def update_evaluation(
        self, evaluation_id: str, **fields: object
    ) -> Evaluation | None: ...

    def delete_evaluation(self, evaluation_id: str) -> bool: ...


class ComparisonStore(Protocol):
    def get_comparison(self, comparison_id: str) -> Comparison | None: ...

    def list_comparisons(self) -> list[Comparison]: ...

    def create_comparison(self, comparison: Comparison) -> Comparison: ...

    def update_comparison(
        self, comparison_id: str, **fields: object
    ) -> Comparison | None: ...

    def delete_comparison(self, comparison_id: str) -> bool: ...
