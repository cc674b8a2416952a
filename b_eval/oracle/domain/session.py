"""InteractiveOracle Protocol — multi-turn sessions with the agent under test."""

from collections.abc import AsyncIterator
from typing import Protocol


class InteractiveSession(Protocol):
    """A live conversation with the agent under test.

    `output()` yields raw output chunks as they arrive and finishes when the
    session ends. There is no end-of-response marker: callers decide when a
    turn is complete.
    """

    def output(self) -> AsyncIterator[str]: ...

    async def write(self, text: str) -> None: ...

    async def close(self) -> None: ...


class InteractiveOracle(Protocol):
    """Opens one fresh InteractiveSession per scenario."""

    async def open_session(self, system_prompt: str | None) -> InteractiveSession: ...
