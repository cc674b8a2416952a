"""Tests for ${ENV_VAR} interpolation over raw YAML data."""

import pytest

from b_eval.config.infrastructure.env_interpolation import (
    collect_missing_vars,
    interpolate,
)


class TestCollectMissingVars:
    def test_reports_each_name_once_in_order(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("B_EVAL_A", raising=False)
        monkeypatch.delenv("B_EVAL_B", raising=False)
        data = {"x": "${B_EVAL_B}", "y": ["${B_EVAL_A}", "${B_EVAL_B}"]}

        assert collect_missing_vars(data) == ["B_EVAL_B", "B_EVAL_A"]

    def test_set_vars_are_not_reported(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("B_EVAL_SET", "1")

        assert collect_missing_vars({"x": "${B_EVAL_SET}"}) == []


class TestInterpolate:
    def test_substitutes_nested_strings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("B_EVAL_MODEL", "gpt-4o")

        result = interpolate({"oracle": {"model": "openai/${B_EVAL_MODEL}", "n": 3}})

        assert result == {"oracle": {"model": "openai/gpt-4o", "n": 3}}

    def test_non_strings_pass_through(self) -> None:
        assert interpolate([1, 2.5, True, None]) == [1, 2.5, True, None]
