"""LiteLLMOracle — one-shot oracle implementation using LiteLLM."""

import asyncio
import time

import litellm

from b_eval.config.domain.oracle import LiteLLMOracleConfig
from b_eval.core.text import preview
from b_eval.oracle.domain.observer import OracleObserver
from b_eval.oracle.domain.oracle import OracleResponse
from b_eval.oracle.infrastructure.errors import (
    OracleParseError,
    OracleProcessError,
    OracleTimeoutError,
)
from b_eval.oracle.infrastructure.json_extraction import extract_json

_BACKEND = "litellm"


class LiteLLMOracle:
    """One-shot oracle that delegates to any chat model LiteLLM can reach."""

    def __init__(self, config: LiteLLMOracleConfig, observer: OracleObserver) -> None:
        litellm.suppress_debug_info = True
        self._config = config
        self._observer = observer

    async def invoke(
        self,
        prompt: str,
        system_prompt: str | None = None,
        timeout_seconds: float = 120.0,
    ) -> OracleResponse:
        """Send a single chat completion and extract its JSON payload.

        Raises:
            OracleTimeoutError: if the completion does not return within timeout_seconds.
            OracleProcessError: if LiteLLM raises.
            OracleParseError: if the content holds no JSON payload.
        """
        self._observer.oracle_invocation_started(
            backend=_BACKEND,
            prompt_preview=preview(prompt.replace("\n", " "), limit=100),
            timeout_seconds=timeout_seconds,
        )

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                litellm.acompletion(
                    model=self._config.model,
                    temperature=self._config.temperature,
                    messages=messages,
                ),
                timeout=timeout_seconds,
            )
        except TimeoutError as exc:
            error = OracleTimeoutError(timeout_seconds=timeout_seconds)
            self._observer.oracle_invocation_failed(backend=_BACKEND, reason=str(error))
            raise error from exc
        except Exception as exc:
            self._observer.oracle_invocation_failed(backend=_BACKEND, reason=str(exc))
            raise OracleProcessError(reason=str(exc)) from exc

        text: str = response.choices[0].message.content or ""
        try:
            payload = extract_json(text)
        except OracleParseError as exc:
            self._observer.oracle_invocation_failed(backend=_BACKEND, reason=str(exc))
            raise

        self._observer.oracle_invocation_completed(
            backend=_BACKEND,
            duration_ms=int((time.monotonic() - start) * 1000),
        )
        return OracleResponse(text=text, parsed_json=payload)
