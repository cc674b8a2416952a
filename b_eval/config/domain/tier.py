"""Tier presets and evaluation-level configuration resolution."""

from pydantic import BaseModel, Field

type TierName = str

DEFAULT_TIER: TierName = "standard"
DEFAULT_DIVERSITY = 0.5


class TierConfig(BaseModel, frozen=True):
    """Scale preset: how many scenarios, judges, and turns an evaluation uses."""

    num_scenarios: int = Field(ge=1)
    num_judges: int = Field(ge=1)
    max_turns: int = Field(ge=1)


TIER_CONFIG: dict[TierName, TierConfig] = {
    "quick": TierConfig(num_scenarios=5, num_judges=1, max_turns=3),
    "standard": TierConfig(num_scenarios=20, num_judges=3, max_turns=5),
    "comprehensive": TierConfig(num_scenarios=50, num_judges=3, max_turns=10),
}


class EvaluationConfig(BaseModel, frozen=True):
    """Fully resolved scale settings stored on an Evaluation at creation time."""

    tier: TierName
    num_scenarios: int = Field(ge=1)
    num_judges: int = Field(ge=1)
    max_turns: int = Field(ge=1)
    diversity: float = Field(default=DEFAULT_DIVERSITY, ge=0.0, le=1.0)


def get_tier_config(tier: TierName | None) -> TierConfig:
    """Return the preset for *tier*, falling back to the standard tier."""
    if tier is None:
        return TIER_CONFIG[DEFAULT_TIER]
    return TIER_CONFIG.get(tier, TIER_CONFIG[DEFAULT_TIER])


def resolve_evaluation_config(
    tier: TierName | None = None,
    num_scenarios: int | None = None,
    num_judges: int | None = None,
    max_turns: int | None = None,
    diversity: float | None = None,
) -> EvaluationConfig:
    """Merge explicit overrides over the tier defaults.

    Raises:
        pydantic.ValidationError: if an override is out of range.
    """
    preset = get_tier_config(tier)
    return EvaluationConfig(
        tier=tier or DEFAULT_TIER,
        num_scenarios=num_scenarios if num_scenarios is not None else preset.num_scenarios,
        num_judges=num_judges if num_judges is not None else preset.num_judges,
        max_turns=max_turns if max_turns is not None else preset.max_turns,
        diversity=diversity if diversity is not None else DEFAULT_DIVERSITY,
    )
