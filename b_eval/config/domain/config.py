"""Top-level HarnessConfig aggregate — the root configuration object."""

from pathlib import Path

from pydantic import BaseModel, Field

from b_eval.config.domain.agent import AgentConfig, PtyAgentConfig
from b_eval.config.domain.oracle import ClaudeCliOracleConfig, OracleConfig
from b_eval.config.domain.pipeline import OracleTimeouts, RolloutSettings


class StoreConfig(BaseModel, frozen=True):
    path: Path = Path("./evaluations.json")


class HarnessConfig(BaseModel, frozen=True):
    """Root configuration aggregate for the evaluation harness."""

    store: StoreConfig = Field(default_factory=StoreConfig)
    oracle: OracleConfig = Field(default_factory=ClaudeCliOracleConfig)
    agent: AgentConfig = Field(default_factory=PtyAgentConfig)
    rollout: RolloutSettings = Field(default_factory=RolloutSettings)
    timeouts: OracleTimeouts = Field(default_factory=OracleTimeouts)
