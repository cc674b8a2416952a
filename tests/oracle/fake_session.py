"""FakeSession and FakeInteractiveOracle — scripted interactive sessions for tests."""

import asyncio
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Reply:
    """Output emitted after one write: chunks spaced `gap_seconds` apart."""

    chunks: list[str] = field(default_factory=list)
    gap_seconds: float = 0.0
    then_exit: bool = False


class FakeSession:
    """Satisfies the InteractiveSession protocol.

    Each write pops the next Reply and emits its chunks in the background.
    With no replies left, writes produce silence. `exit_on_open` ends the
    output stream before anything is written.
    """

    def __init__(
        self,
        replies: list[Reply] | None = None,
        exit_on_open: bool = False,
        on_close: Callable[[], None] | None = None,
    ) -> None:
        self._replies = list(replies) if replies is not None else []
        self._queue: asyncio.Queue[str | None] = asyncio.Queue()
        self._tasks: list[asyncio.Task[None]] = []
        self._on_close = on_close
        self._writes: list[str] = []
        self._closed = False
        if exit_on_open:
            self._queue.put_nowait(None)

    @property
    def writes(self) -> list[str]:
        return self._writes

    @property
    def closed(self) -> bool:
        return self._closed

    async def output(self) -> AsyncIterator[str]:
        while True:
            chunk = await self._queue.get()
            if chunk is None:
                return
            yield chunk

    async def write(self, text: str) -> None:
        self._writes.append(text)
        if self._replies:
            reply = self._replies.pop(0)
            self._tasks.append(asyncio.create_task(self._emit(reply)))

    async def _emit(self, reply: Reply) -> None:
        for index, chunk in enumerate(reply.chunks):
            if index:
                await asyncio.sleep(reply.gap_seconds)
            self._queue.put_nowait(chunk)
        if reply.then_exit:
            self._queue.put_nowait(None)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for task in self._tasks:
            task.cancel()
        self._queue.put_nowait(None)
        if self._on_close is not None:
            self._on_close()


class FakeInteractiveOracle:
    """Satisfies the InteractiveOracle protocol.

    `session_factory` is called once per opened session and returns its
    replies. Returning None opens a session whose output has already ended;
    raising simulates a session that cannot be started. Tracks how many sessions are
    open at once.
    """

    def __init__(self, session_factory: Callable[[], list[Reply] | None] | None = None) -> None:
        self._session_factory = session_factory or (lambda: [Reply(chunks=["ok"])])
        self._sessions: list[FakeSession] = []
        self._system_prompts: list[str | None] = []
        self._open = 0
        self._max_open = 0

    @property
    def sessions(self) -> list[FakeSession]:
        return self._sessions

    @property
    def system_prompts(self) -> list[str | None]:
        return self._system_prompts

    @property
    def max_open(self) -> int:
        return self._max_open

    async def open_session(self, system_prompt: str | None) -> FakeSession:
        self._system_prompts.append(system_prompt)
        replies = self._session_factory()
        self._open += 1
        self._max_open = max(self._max_open, self._open)
        session = FakeSession(
            replies=replies,
            exit_on_open=replies is None,
            on_close=self._session_closed,
        )
        self._sessions.append(session)
        return session

    def _session_closed(self) -> None:
        self._open -= 1
