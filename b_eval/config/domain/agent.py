"""Agent-under-test configuration models — discriminated union on `type` field."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class PtyAgentConfig(BaseModel, frozen=True):
    """Agent CLI launched on a pseudo-terminal."""

    type: Literal["pty"] = "pty"
    command: str = Field(default="claude", min_length=1)
    args: list[str] = Field(default_factory=list)
    cols: int = Field(default=120, ge=1)
    rows: int = Field(default=40, ge=1)


class ClaudeSDKAgentConfig(BaseModel, frozen=True):
    """Agent driven through a multi-turn Claude Agent SDK client."""

    type: Literal["claude_agent_sdk"]
    model: str | None = None
    permission_mode: Literal[
        "default", "acceptEdits", "plan", "bypassPermissions"
    ] = "default"


type AgentConfig = Annotated[
    PtyAgentConfig | ClaudeSDKAgentConfig,
    Field(discriminator="type"),
]
