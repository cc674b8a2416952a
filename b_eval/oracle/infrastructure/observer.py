"""Structlog implementation of the OracleObserver port."""

import structlog


class StructlogOracleObserver:
    """Delegates oracle domain events to structlog.

    Satisfies the OracleObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def oracle_invocation_started(
        self, backend: str, prompt_preview: str, timeout_seconds: float
    ) -> None:
        self._log.debug(
            "oracle.invocation_started",
            backend=backend,
            prompt_preview=prompt_preview,
            timeout_seconds=timeout_seconds,
        )

    def oracle_invocation_completed(self, backend: str, duration_ms: int) -> None:
        self._log.info(
            "oracle.invocation_completed", backend=backend, duration_ms=duration_ms
        )

    def oracle_invocation_failed(self, backend: str, reason: str) -> None:
        self._log.error("oracle.invocation_failed", backend=backend, reason=reason)

    def session_opened(self, backend: str, session_id: str) -> None:
        self._log.debug("oracle.session_opened", backend=backend, session_id=session_id)

    def session_closed(self, backend: str, session_id: str) -> None:
        self._log.debug("oracle.session_closed", backend=backend, session_id=session_id)
