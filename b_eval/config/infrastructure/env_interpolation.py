"""Recursive ${ENV_VAR} substitution over raw YAML data."""

import os
import re
from collections.abc import Iterator

_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")

type RawValue = (
    str | int | float | bool | None | list["RawValue"] | dict[str, "RawValue"]
)


def collect_missing_vars(data: RawValue) -> list[str]:
    """Return every referenced variable name that is absent from the environment.

    Names are reported once each, in first-seen order.
    """
    missing: list[str] = []
    for text in _iter_strings(data):
        for match in _ENV_VAR_PATTERN.finditer(text):
            name = match.group(1)
            if name not in os.environ and name not in missing:
                missing.append(name)
    return missing


def _iter_strings(data: RawValue) -> Iterator[str]:
    if isinstance(data, str):
        yield data
    elif isinstance(data, list):
        for item in data:
            yield from _iter_strings(item)
    elif isinstance(data, dict):
        for value in data.values():
            yield from _iter_strings(value)


def interpolate(data: RawValue) -> RawValue:
    """Substitute ${ENV_VAR} references; call `collect_missing_vars` first."""
    if isinstance(data, str):
        return _ENV_VAR_PATTERN.sub(lambda m: os.environ[m.group(1)], data)
    if isinstance(data, list):
        return [interpolate(item) for item in data]
    if isinstance(data, dict):
        return {key: interpolate(value) for key, value in data.items()}
    return data
