"""YAML config loader — parses, interpolates env vars, validates, and emits observer events."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from b_eval.config.domain.config import HarnessConfig
from b_eval.config.domain.observer import ConfigObserver
from b_eval.config.domain.oracle import LiteLLMOracleConfig
from b_eval.config.infrastructure.env_interpolation import collect_missing_vars, interpolate
from b_eval.config.infrastructure.errors import (
    ConfigLoadError,
    ConfigValidationError,
    MissingEnvVarsError,
)


class YamlConfigLoader:
    """Loads, interpolates, validates, and returns a HarnessConfig from a YAML file."""

    def __init__(self, observer: ConfigObserver) -> None:
        self._observer = observer

    def load(self, path: Path | None) -> HarnessConfig:
        """
        Load the harness config at *path*; `None` yields the built-in defaults.

        Raises:
            ConfigLoadError: if the file is missing or is not valid YAML.
            MissingEnvVarsError: if any ${ENV_VAR} references are unset (all collected first).
            ConfigValidationError: if the schema is violated.
        """
        if path is None:
            cfg = HarnessConfig()
        else:
            raw = _parse_yaml(path=path)
            missing = collect_missing_vars(raw)
            if missing:
                raise MissingEnvVarsError(missing)
            cfg = _build_config(resolved=interpolate(raw))

        _emit_warnings(cfg=cfg, observer=self._observer)
        self._observer.config_loaded(
            path=str(path) if path is not None else "<defaults>",
            oracle_type=cfg.oracle.type,
            agent_type=cfg.agent.type,
        )
        return cfg


def _parse_yaml(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as fh:
            return yaml.safe_load(fh) or {}
    except FileNotFoundError as exc:
        raise ConfigLoadError(path=path) from exc
    except yaml.YAMLError as exc:
        raise ConfigLoadError(path=path, reason=f"invalid YAML ({exc})") from exc


def _build_config(resolved: Any) -> HarnessConfig:
    if not isinstance(resolved, dict):
        raise ConfigValidationError("top-level YAML value must be a mapping")
    try:
        return HarnessConfig.model_validate(resolved)
    except ValidationError as exc:
        raise ConfigValidationError(str(exc)) from exc


def _emit_warnings(cfg: HarnessConfig, observer: ConfigObserver) -> None:
    if isinstance(cfg.oracle, LiteLLMOracleConfig) and cfg.oracle.temperature > 0.0:
        observer.config_oracle_temperature_warning(cfg.oracle.temperature)
