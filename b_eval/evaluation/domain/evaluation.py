"""Evaluation aggregate — the durable record of one evaluation run."""

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field

from b_eval.config.domain.tier import EvaluationConfig
from b_eval.evaluation.domain.judgment import Evidence, ScenarioJudgment
from b_eval.evaluation.domain.scenario import BehaviorUnderstanding, Scenario
from b_eval.evaluation.domain.transcript import RolloutTranscript

type Status = Literal["pending", "running", "completed", "error"]
type StageName = Literal["understanding", "ideation", "rollout", "judgment"]

STAGE_ORDER: tuple[StageName, ...] = ("understanding", "ideation", "rollout", "judgment")


def utcnow() -> datetime:
    return datetime.now(UTC)


class StageRecord(BaseModel, frozen=True):
    status: Status = "pending"
    started_at: datetime | None = None
    completed_at: datetime | None = None
    error: str | None = None


class UnderstandingRecord(StageRecord, frozen=True):
    result: BehaviorUnderstanding | None = None


class IdeationRecord(StageRecord, frozen=True):
    scenario_count: int = 0
    scenarios: list[Scenario] = Field(default_factory=list)


class RolloutRecord(StageRecord, frozen=True):
    completed: int = 0
    total: int = 0
    transcripts: list[RolloutTranscript] = Field(default_factory=list)


class JudgmentRecord(StageRecord, frozen=True):
    completed: int = 0
    total: int = 0
    judgments: list[ScenarioJudgment] = Field(default_factory=list)


class EvaluationStages(BaseModel, frozen=True):
    understanding: UnderstandingRecord = Field(default_factory=UnderstandingRecord)
    ideation: IdeationRecord = Field(default_factory=IdeationRecord)
    rollout: RolloutRecord = Field(default_factory=RolloutRecord)
    judgment: JudgmentRecord = Field(default_factory=JudgmentRecord)


class PromptConfig(BaseModel, frozen=True):
    """Instructions applied to the agent under test; the A/B axis of a comparison."""

    system_prompt: str | None = None
    variant: str | None = None


class ScoreDistribution(BaseModel, frozen=True):
    min: float
    max: float
    mean: float
    std: float


class EvaluationResults(BaseModel, frozen=True):
    overall_score: float | None
    score_distribution: ScoreDistribution | None
    key_quotes: list[Evidence] = Field(default_factory=list)
    failure_patterns: list[str] = Field(default_factory=list)


class Evaluation(BaseModel, frozen=True):
    """Central entity: one behavior measured against one prompt configuration.

    Status moves pending -> running -> completed|error and never backwards.
    """

    id: str = Field(min_length=1)
    name: str
    behavior_key: str = Field(min_length=1)
    prompt_config: PromptConfig = Field(default_factory=PromptConfig)
    config: EvaluationConfig
    status: Status = "pending"
    stages: EvaluationStages = Field(default_factory=EvaluationStages)
    results: EvaluationResults | None = None
    created_at: datetime = Field(default_factory=utcnow)
    started_at: datetime | None = None
    completed_at: datetime | None = None
    error: str | None = None


class EvaluationStatusView(BaseModel, frozen=True):
    """The pollable subset of an Evaluation."""

    id: str
    status: Status
    stages: EvaluationStages
    results: EvaluationResults | None
    started_at: datetime | None
    completed_at: datetime | None
    error: str | None

    @classmethod
    def of(cls, evaluation: Evaluation) -> "EvaluationStatusView":
        return cls(
            id=evaluation.id,
            status=evaluation.status,
            stages=evaluation.stages,
            results=evaluation.results,
            started_at=evaluation.started_at,
            completed_at=evaluation.completed_at,
            error=evaluation.error,
        )
