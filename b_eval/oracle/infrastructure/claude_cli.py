"""ClaudeCliOracle — one-shot oracle that shells out to the `claude` CLI."""

import asyncio
import contextlib
import time

from b_eval.config.domain.oracle import ClaudeCliOracleConfig
from b_eval.core.text import preview
from b_eval.oracle.domain.observer import OracleObserver
from b_eval.oracle.domain.oracle import OracleResponse
from b_eval.oracle.infrastructure.errors import (
    OracleError,
    OracleProcessError,
    OracleTimeoutError,
)
from b_eval.oracle.infrastructure.json_extraction import extract_json, unwrap_cli_output

_BACKEND = "claude_cli"


class ClaudeCliOracle:
    """Runs `claude -p --output-format json <prompt>` once per invocation.

    stdin is closed immediately; the CLI otherwise blocks waiting for EOF.
    """

    def __init__(self, config: ClaudeCliOracleConfig, observer: OracleObserver) -> None:
        self._config = config
        self._observer = observer

    async def invoke(
        self,
        prompt: str,
        system_prompt: str | None = None,
        timeout_seconds: float = 120.0,
    ) -> OracleResponse:
        """Invoke the CLI and return the response with its JSON payload.

        Raises:
            OracleTimeoutError: if the process does not exit within timeout_seconds.
            OracleProcessError: if the process cannot start or exits non-zero.
            OracleParseError: if no JSON payload can be extracted.
        """
        args = ["-p", "--permission-mode", "default", "--output-format", "json"]
        if system_prompt:
            args.extend(["--system-prompt", system_prompt])
        args.append(prompt)

        self._observer.oracle_invocation_started(
            backend=_BACKEND,
            prompt_preview=preview(prompt.replace("\n", " "), limit=100),
            timeout_seconds=timeout_seconds,
        )
        start = time.monotonic()
        try:
            stdout = await self._run(args=args, timeout_seconds=timeout_seconds)
            text, payload = unwrap_cli_output(stdout)
            if payload is None:
                payload = extract_json(text)
        except OracleError as exc:
            self._observer.oracle_invocation_failed(backend=_BACKEND, reason=str(exc))
            raise

        self._observer.oracle_invocation_completed(
            backend=_BACKEND,
            duration_ms=int((time.monotonic() - start) * 1000),
        )
        return OracleResponse(text=text, parsed_json=payload)

    async def _run(self, args: list[str], timeout_seconds: float) -> str:
        try:
            process = await asyncio.create_subprocess_exec(
                self._config.command,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise OracleProcessError(
                reason=f"failed to spawn {self._config.command}: {exc}"
            ) from exc

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=timeout_seconds
            )
        except TimeoutError as exc:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()
            raise OracleTimeoutError(timeout_seconds=timeout_seconds) from exc

        if process.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip()
            raise OracleProcessError(
                reason=(
                    f"{self._config.command} exited with code {process.returncode}:"
                    f" {preview(detail)}"
                )
            )

        return stdout.decode("utf-8", errors="replace")
