"""OneShotOracle Protocol — request/response access to the reasoning oracle."""

from typing import Any, Protocol

from pydantic import BaseModel


class OracleResponse(BaseModel, frozen=True):
    """Raw response text plus the JSON payload extracted from it."""

    text: str
    parsed_json: Any = None


class OneShotOracle(Protocol):
    """Structural interface satisfied by every one-shot oracle backend.

    Implementations raise OracleTimeoutError once *timeout_seconds* elapse,
    OracleProcessError when the backend fails, and OracleParseError when no
    JSON payload can be extracted from the response.
    """

    async def invoke(
        self,
        prompt: str,
        system_prompt: str | None = None,
        timeout_seconds: float = 120.0,
    ) -> OracleResponse: ...
