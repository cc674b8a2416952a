"""Structlog implementation of the ConfigObserver port."""

import structlog


class StructlogConfigObserver:
    """Delegates config domain events to structlog.

    Satisfies the ConfigObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def config_loaded(self, path: str, oracle_type: str, agent_type: str) -> None:
        self._log.info(
            "config.loaded", path=path, oracle_type=oracle_type, agent_type=agent_type
        )

    def config_oracle_temperature_warning(self, temperature: float) -> None:
        self._log.warning(
            "config.oracle_temperature_warning",
            temperature=temperature,
            message="Oracle temperature > 0.0 adds variance to judge scores",
        )
