"""Pipeline timing configuration models."""

from pydantic import BaseModel, Field


class RolloutSettings(BaseModel, frozen=True):
    """Concurrency and turn-taking parameters for the rollout stage.

    A turn is considered finished once no output has arrived for
    `quiescence_seconds`, checked every `poll_interval_seconds`.
    """

    max_concurrent: int = Field(default=3, ge=1)
    warmup_seconds: float = Field(default=1.0, ge=0.0)
    poll_interval_seconds: float = Field(default=0.5, gt=0.0)
    quiescence_seconds: float = Field(default=2.0, gt=0.0)
    turn_timeout_seconds: float = Field(default=60.0, gt=0.0)


class OracleTimeouts(BaseModel, frozen=True):
    """Per-call timeouts for each kind of one-shot oracle request."""

    understanding_seconds: float = Field(default=120.0, gt=0.0)
    ideation_seconds: float = Field(default=180.0, gt=0.0)
    continuation_seconds: float = Field(default=60.0, gt=0.0)
    judgment_seconds: float = Field(default=120.0, gt=0.0)
