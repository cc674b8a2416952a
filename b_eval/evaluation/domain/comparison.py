"""Comparison aggregate — an A/B pairing of two evaluations."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from b_eval.evaluation.domain.evaluation import Status, utcnow

type Winner = Literal["A", "B", "tie"]


class ComparisonResults(BaseModel, frozen=True):
    winner: Winner
    score_a: float
    score_b: float
    difference: float


class Comparison(BaseModel, frozen=True):
    """Pointers to two evaluations that differ only in prompt configuration."""

    id: str = Field(min_length=1)
    name: str
    evaluation_a: str
    evaluation_b: str
    behavior_key: str
    status: Status = "pending"
    results: ComparisonResults | None = None
    created_at: datetime = Field(default_factory=utcnow)
    started_at: datetime | None = None
    completed_at: datetime | None = None
    error: str | None = None


def compare_scores(score_a: float, score_b: float) -> ComparisonResults:
    """The strictly higher score wins; equal scores tie."""
    if score_a > score_b:
        winner: Winner = "A"
    elif score_b > score_a:
        winner = "B"
    else:
        winner = "tie"
    return ComparisonResults(
        winner=winner,
        score_a=score_a,
        score_b=score_b,
        difference=abs(score_a - score_b),
    )
