"""Oracle-produced artifacts of the understanding and ideation stages."""

import uuid
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

type Difficulty = Literal["easy", "medium", "hard", "adversarial"]


class BehaviorUnderstanding(BaseModel):
    """Structured analysis of a behavior, used to steer ideation and judgment."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    core_definition: str = Field(min_length=1)
    observable_markers: list[str] = Field(default_factory=list)
    anti_patterns: list[str] = Field(default_factory=list)
    boundary_conditions: list[str] = Field(default_factory=list)
    prerequisites: list[str] = Field(default_factory=list)
    example_prompts: list[str] = Field(default_factory=list)
    success_criteria: str = ""
    failure_criteria: str = ""


class Scenario(BaseModel):
    """One self-contained test situation for the agent under test.

    The prompt must not reference artifacts outside its own text; this is
    requested of the generating oracle and not checked here.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:8])
    prompt: str = Field(min_length=1)
    context: str = ""
    domain: str = ""
    difficulty: Difficulty = "medium"
    expected_markers: list[str] = Field(default_factory=list)
    follow_ups: list[str] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: object) -> object:
        return str(value) if isinstance(value, int) else value

    @field_validator("difficulty", mode="before")
    @classmethod
    def _normalise_difficulty(cls, value: object) -> object:
        return value.strip().lower() if isinstance(value, str) else value


class IdeationResponse(BaseModel, frozen=True):
    """The scenarios key must be present; a shorter list than requested is accepted."""

    scenarios: list[Scenario]
