"""Error types raised by config infrastructure."""

from pathlib import Path

from b_eval.core.errors import BEvalError


class MissingEnvVarsError(BEvalError):
    """Raised when the config references environment variables that are not set."""

    def __init__(self, missing_vars: list[str]) -> None:
        self.missing_vars = missing_vars
        super().__init__(
            "Failed to load config: missing environment variables: "
            + ", ".join(sorted(missing_vars))
        )


class ConfigValidationError(BEvalError):
    """Raised when the loaded config does not match the HarnessConfig schema."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to validate config: {reason}")


class ConfigLoadError(BEvalError):
    """Raised when the config file cannot be opened or parsed as YAML."""

    def __init__(self, path: Path, reason: str = "file not found") -> None:
        super().__init__(f"Failed to load config: {reason}: {path}")
