"""OracleObserver port — domain events emitted while talking to the oracle."""

from typing import Protocol


class OracleObserver(Protocol):
    """Observer port for oracle domain events.

    Implementations may log to structlog, record for tests, or emit metrics.
    """

    def oracle_invocation_started(
        self, backend: str, prompt_preview: str, timeout_seconds: float
    ) -> None: ...

    def oracle_invocation_completed(self, backend: str, duration_ms: int) -> None: ...

    def oracle_invocation_failed(self, backend: str, reason: str) -> None: ...

    def session_opened(self, backend: str, session_id: str) -> None: ...

    def session_closed(self, backend: str, session_id: str) -> None: ...
