"""Oracle registry — maps configuration variants to oracle implementations."""

from b_eval.config.domain.agent import (
    AgentConfig,
    ClaudeSDKAgentConfig,
    PtyAgentConfig,
)
from b_eval.config.domain.oracle import (
    ClaudeCliOracleConfig,
    LiteLLMOracleConfig,
    OracleConfig,
)
from b_eval.oracle.domain.observer import OracleObserver
from b_eval.oracle.domain.oracle import OneShotOracle
from b_eval.oracle.domain.session import InteractiveOracle
from b_eval.oracle.infrastructure.claude_cli import ClaudeCliOracle
from b_eval.oracle.infrastructure.claude_sdk import ClaudeSDKInteractiveOracle
from b_eval.oracle.infrastructure.litellm import LiteLLMOracle
from b_eval.oracle.infrastructure.pty_session import PtyInteractiveOracle


def create_oneshot_oracle(config: OracleConfig, observer: OracleObserver) -> OneShotOracle:
    """Return the one-shot oracle for the given config variant."""
    if isinstance(config, LiteLLMOracleConfig):
        return LiteLLMOracle(config=config, observer=observer)
    if isinstance(config, ClaudeCliOracleConfig):
        return ClaudeCliOracle(config=config, observer=observer)
    raise TypeError(f"unsupported oracle config: {type(config).__name__}")


def create_interactive_oracle(
    config: AgentConfig, observer: OracleObserver
) -> InteractiveOracle:
    """Return the interactive oracle that drives the agent under test."""
    if isinstance(config, ClaudeSDKAgentConfig):
        return ClaudeSDKInteractiveOracle(config=config, observer=observer)
    if isinstance(config, PtyAgentConfig):
        return PtyInteractiveOracle(config=config, observer=observer)
    raise TypeError(f"unsupported agent config: {type(config).__name__}")
