"""Oracle configuration models — discriminated union on `type` field."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class ClaudeCliOracleConfig(BaseModel, frozen=True):
    """One-shot oracle that shells out to `claude -p --output-format json`."""

    type: Literal["claude_cli"] = "claude_cli"
    command: str = Field(default="claude", min_length=1)


class LiteLLMOracleConfig(BaseModel, frozen=True):
    """One-shot oracle reached through LiteLLM."""

    type: Literal["litellm"]
    model: str = Field(min_length=1)
    temperature: float = 0.0


type OracleConfig = Annotated[
    ClaudeCliOracleConfig | LiteLLMOracleConfig,
    Field(discriminator="type"),
]
