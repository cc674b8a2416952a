"""JsonFileStore — evaluations, comparisons and custom behaviors in one JSON file.

The whole document is rewritten on every mutation, via a temporary file and an
atomic rename so a crash never leaves a half-written store behind.
"""

from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from b_eval.behavior.domain.behavior import BUILTIN_BEHAVIORS, Behavior
from b_eval.behavior.domain.errors import DuplicateBehaviorError, InvalidBehaviorError
from b_eval.evaluation.domain.comparison import Comparison
from b_eval.evaluation.domain.evaluation import Evaluation, utcnow
from b_eval.evaluation.infrastructure.errors import StoreLoadError


class StoreDocument(BaseModel):
    """On-disk layout of the store file.

    Every key, nested records included, is written under its field name;
    oracle-facing camelCase aliases are not used on disk.
    """

    evaluations: list[Evaluation] = Field(default_factory=list)
    comparisons: list[Comparison] = Field(default_factory=list)
    custom_behaviors: list[Behavior] = Field(default_factory=list)
    last_updated: datetime | None = None


class JsonFileStore:
    """File-backed EvaluationStore, ComparisonStore and BehaviorCatalog.

    Satisfies all three protocols structurally. A missing file reads as an
    empty store and is created on the first write.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> StoreDocument:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return StoreDocument()
        if not raw.strip():
            return StoreDocument()
        try:
            return StoreDocument.model_validate_json(raw)
        except ValidationError as exc:
            raise StoreLoadError(
                path=self._path, reason=f"invalid store document ({exc.error_count()} errors)"
            ) from exc

    def _save(self, document: StoreDocument) -> None:
        document.last_updated = utcnow()
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(f"{self._path.name}.tmp")
        tmp_path.write_text(
            document.model_dump_json(indent=2), encoding="utf-8"
        )
        tmp_path.replace(self._path)

    # EvaluationStore

    def get_evaluation(self, evaluation_id: str) -> Evaluation | None:
        return next(
            (e for e in self._load().evaluations if e.id == evaluation_id), None
        )

    def list_evaluations(self) -> list[Evaluation]:
        return self._load().evaluations

    def create_evaluation(self, evaluation: Evaluation) -> Evaluation:
        document = self._load()
        document.evaluations.append(evaluation)
        self._save(document)
        return evaluation

    def update_evaluation(self, evaluation_id: str, **fields: Any) -> Evaluation | None:
        document = self._load()
        for index, current in enumerate(document.evaluations):
            if current.id == evaluation_id:
                updated = _merge(Evaluation, current, fields)
                document.evaluations[index] = updated
                self._save(document)
                return updated
        return None

    def delete_evaluation(self, evaluation_id: str) -> bool:
        document = self._load()
        remaining = [e for e in document.evaluations if e.id != evaluation_id]
        if len(remaining) == len(document.evaluations):
            return False
        document.evaluations = remaining
        self._save(document)
        return True

    # ComparisonStore

    def get_comparison(self, comparison_id: str) -> Comparison | None:
        return next(
            (c for c in self._load().comparisons if c.id == comparison_id), None
        )

    def list_comparisons(self) -> list[Comparison]:
        return self._load().comparisons

    def create_comparison(self, comparison: Comparison) -> Comparison:
        document = self._load()
        document.comparisons.append(comparison)
        self._save(document)
        return comparison

    def update_comparison(self, comparison_id: str, **fields: Any) -> Comparison | None:
        document = self._load()
        for index, current in enumerate(document.comparisons):
            if current.id == comparison_id:
                updated = _merge(Comparison, current, fields)
                document.comparisons[index] = updated
                self._save(document)
                return updated
        return None

    def delete_comparison(self, comparison_id: str) -> bool:
        document = self._load()
        remaining = [c for c in document.comparisons if c.id != comparison_id]
        if len(remaining) == len(document.comparisons):
            return False
        document.comparisons = remaining
        self._save(document)
        return True

    # BehaviorCatalog

    def list_behaviors(self) -> list[Behavior]:
        return [*BUILTIN_BEHAVIORS, *self._load().custom_behaviors]

    def add_behavior(self, key: str, description: str) -> Behavior:
        document = self._load()
        existing = {b.key for b in BUILTIN_BEHAVIORS} | {
            b.key for b in document.custom_behaviors
        }
        if key in existing:
            raise DuplicateBehaviorError(key)
        try:
            behavior = Behavior(key=key, description=description)
        except ValidationError as exc:
            raise InvalidBehaviorError("key and description must be non-empty") from exc
        document.custom_behaviors.append(behavior)
        self._save(document)
        return behavior


def _merge[ModelT: BaseModel](
    model: type[ModelT], current: ModelT, fields: dict[str, Any]
) -> ModelT:
    """Shallow-merge *fields* over *current* and revalidate."""
    return model.model_validate({**dict(current), **fields})
