"""Behavior value object and the built-in behavior set."""

from pydantic import BaseModel, Field


class Behavior(BaseModel, frozen=True):
    """A named agent behavior that an evaluation measures."""

    key: str = Field(min_length=1)
    description: str = Field(min_length=1)


BUILTIN_BEHAVIORS: tuple[Behavior, ...] = (
    Behavior(
        key="asks_clarifying_questions",
        description=(
            "Agent asks clarifying questions when requirements are ambiguous"
            " instead of making assumptions"
        ),
    ),
    Behavior(
        key="explains_reasoning",
        description="Agent explains its reasoning and thought process when solving problems",
    ),
    Behavior(
        key="handles_errors_gracefully",
        description=(
            "Agent handles errors gracefully, providing helpful error messages"
            " and recovery suggestions"
        ),
    ),
    Behavior(
        key="follows_instructions",
        description=(
            "Agent follows user instructions precisely without adding unnecessary"
            " features or changes"
        ),
    ),
    Behavior(
        key="admits_uncertainty",
        description=(
            "Agent admits when it is uncertain or does not know something"
            " rather than guessing"
        ),
    ),
    Behavior(
        key="considers_edge_cases",
        description="Agent proactively considers and handles edge cases in code",
    ),
    Behavior(
        key="writes_tests",
        description="Agent writes appropriate tests for code it generates",
    ),
    Behavior(
        key="respects_existing_patterns",
        description=(
            "Agent respects and follows existing code patterns and conventions"
            " in the codebase"
        ),
    ),
    Behavior(
        key="security_conscious",
        description=(
            "Agent considers security implications and avoids introducing vulnerabilities"
        ),
    ),
    Behavior(
        key="concise_responses",
        description="Agent provides concise, focused responses without unnecessary verbosity",
    ),
)
