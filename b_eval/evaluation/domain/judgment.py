"""Judge verdicts and per-scenario judgments."""

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class Evidence(BaseModel):
    """A transcript quote cited by a judge, with its explanation."""

    model_config = ConfigDict(frozen=True)

    quote: str = ""
    explanation: str = ""

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_quote(cls, data: object) -> object:
        if isinstance(data, str):
            return {"quote": data}
        return data


class JudgeVerdict(BaseModel):
    """Structured output of a single judge call."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    score: float | None = Field(default=None, ge=0.0, le=1.0)
    confidence: str | None = None
    reasoning: str = ""
    positive_evidence: list[Evidence] = Field(default_factory=list)
    negative_evidence: list[Evidence] = Field(default_factory=list)
    opportunity_assessment: str = ""
    summary: str | None = None


class ScenarioJudgment(BaseModel, frozen=True):
    """Aggregated judgment for one scenario.

    `skipped=True` means the rollout captured nothing and no judge was called;
    `error` without `skipped` means the judge calls themselves failed.
    """

    scenario_id: str
    score: float | None
    confidence: str | None = None
    summary: str = ""
    positive_evidence: list[Evidence] = Field(default_factory=list)
    negative_evidence: list[Evidence] = Field(default_factory=list)
    judge_count: int = 0
    skipped: bool = False
    error: str | None = None
