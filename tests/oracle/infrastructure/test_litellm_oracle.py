"""Tests for LiteLLMOracle infrastructure implementation."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from b_eval.config.domain.oracle import LiteLLMOracleConfig
from b_eval.oracle.infrastructure.errors import (
    OracleParseError,
    OracleProcessError,
    OracleTimeoutError,
)
from b_eval.oracle.infrastructure.litellm import LiteLLMOracle
from tests.oracle.fake_observer import FakeOracleObserver

_ACOMPLETION = "b_eval.oracle.infrastructure.litellm.litellm.acompletion"


def _make_acompletion_response(content: str) -> MagicMock:
    """Build a mock litellm response object with the given message content."""
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    return response


def _make_oracle() -> tuple[LiteLLMOracle, FakeOracleObserver]:
    observer = FakeOracleObserver()
    oracle = LiteLLMOracle(
        config=LiteLLMOracleConfig(model="gpt-4o", temperature=0.0), observer=observer
    )
    return oracle, observer


class TestSuccessfulCompletion:
    async def test_parses_json_content(self) -> None:
        oracle, observer = _make_oracle()
        mock = AsyncMock(return_value=_make_acompletion_response('{"score": 0.9}'))

        with patch(_ACOMPLETION, mock):
            response = await oracle.invoke("prompt")

        assert response.parsed_json == {"score": 0.9}
        assert observer.started[0].backend == "litellm"
        assert len(observer.completed) == 1

    async def test_system_prompt_precedes_user_message(self) -> None:
        oracle, _ = _make_oracle()
        mock = AsyncMock(return_value=_make_acompletion_response("{}"))

        with patch(_ACOMPLETION, mock):
            await oracle.invoke("prompt", system_prompt="be strict")

        messages = mock.call_args.kwargs["messages"]
        assert [m["role"] for m in messages] == ["system", "user"]
        assert mock.call_args.kwargs["model"] == "gpt-4o"


class TestFailedCompletion:
    async def test_library_error_becomes_process_error(self) -> None:
        oracle, observer = _make_oracle()

        with patch(_ACOMPLETION, AsyncMock(side_effect=RuntimeError("rate limited"))):
            with pytest.raises(OracleProcessError, match="rate limited"):
                await oracle.invoke("prompt")

        assert len(observer.failed) == 1

    async def test_slow_completion_times_out(self) -> None:
        oracle, _ = _make_oracle()

        async def _slow(**_: object) -> MagicMock:
            await asyncio.sleep(10)
            return _make_acompletion_response("{}")

        with patch(_ACOMPLETION, _slow):
            with pytest.raises(OracleTimeoutError):
                await oracle.invoke("prompt", timeout_seconds=0.05)

    async def test_prose_content_raises_parse_error(self) -> None:
        oracle, _ = _make_oracle()
        mock = AsyncMock(return_value=_make_acompletion_response("Sure thing!"))

        with patch(_ACOMPLETION, mock):
            with pytest.raises(OracleParseError):
                await oracle.invoke("prompt")
