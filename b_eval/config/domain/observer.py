"""Observer port for the config domain — defines events in domain language."""

from typing import Protocol


class ConfigObserver(Protocol):
    def config_loaded(self, path: str, oracle_type: str, agent_type: str) -> None: ...

    def config_oracle_temperature_warning(self, temperature: float) -> None: ...
