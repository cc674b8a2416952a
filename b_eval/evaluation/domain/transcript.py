"""Rollout transcripts — the recorded conversation for one scenario."""

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field

from b_eval.evaluation.domain.scenario import Scenario


class TranscriptEntry(BaseModel, frozen=True):
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class RolloutTranscript(BaseModel, frozen=True):
    """Immutable outcome of one scenario rollout.

    `completed=False` with an `error` marks a rollout that timed out or whose
    session could not be driven; an empty `transcript` with an `error` means
    nothing usable was captured and judgment will skip it.
    """

    scenario_id: str
    scenario: Scenario
    transcript: list[TranscriptEntry] = Field(default_factory=list)
    completed: bool
    turn_count: int = 0
    error: str | None = None

    def render(self) -> str:
        return render_entries(self.transcript)


def render_entries(entries: list[TranscriptEntry]) -> str:
    """Format a conversation as `role: content` paragraphs for oracle prompts."""
    return "\n\n".join(f"{entry.role}: {entry.content}" for entry in entries)


class ContinuationDecision(BaseModel, frozen=True):
    """The simulated user's choice after each assistant turn."""

    action: Literal["respond", "complete"]
    message: str | None = None
    reason: str = ""
