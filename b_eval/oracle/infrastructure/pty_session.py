"""PtyInteractiveOracle — runs the agent CLI on a pseudo-terminal."""

import asyncio
import codecs
import contextlib
import fcntl
import os
import pty
import struct
import termios
import uuid
from collections.abc import AsyncIterator

from b_eval.config.domain.agent import PtyAgentConfig
from b_eval.oracle.domain.observer import OracleObserver
from b_eval.oracle.domain.session import InteractiveSession
from b_eval.oracle.infrastructure.errors import OracleProcessError

_BACKEND = "pty"
_READ_SIZE = 4096
# Output still buffered in the terminal when the child exits is drained for this long.
_EXIT_GRACE_SECONDS = 0.1


def _set_window_size(fd: int, rows: int, cols: int) -> None:
    fcntl.ioctl(fd, termios.TIOCSWINSZ, struct.pack("HHHH", rows, cols, 0, 0))


class PtySession:
    """One agent process attached to the slave end of a pseudo-terminal.

    Output is read from the master end by an event-loop reader callback and
    queued as decoded text; `None` in the queue marks end of output.
    """

    def __init__(
        self,
        process: asyncio.subprocess.Process,
        master_fd: int,
        observer: OracleObserver,
    ) -> None:
        self.session_id = uuid.uuid4().hex[:8]
        self._process = process
        self._master_fd = master_fd
        self._observer = observer
        self._loop = asyncio.get_running_loop()
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._chunks: asyncio.Queue[str | None] = asyncio.Queue()
        self._reading = True
        self._closed = False
        self._loop.add_reader(master_fd, self._on_readable)
        self._exit_watch = asyncio.create_task(self._watch_exit())

    async def output(self) -> AsyncIterator[str]:
        while True:
            chunk = await self._chunks.get()
            if chunk is None:
                return
            yield chunk

    async def write(self, text: str) -> None:
        """Type *text* into the terminal and press return."""
        data = (text + "\r").encode("utf-8")
        await self._loop.run_in_executor(None, self._write_all, data)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._stop_reading()
        if self._process.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                self._process.kill()
            await self._process.wait()
        self._exit_watch.cancel()
        os.close(self._master_fd)
        self._observer.session_closed(backend=_BACKEND, session_id=self.session_id)

    def _write_all(self, data: bytes) -> None:
        view = memoryview(data)
        while view:
            written = os.write(self._master_fd, view)
            view = view[written:]

    def _on_readable(self) -> None:
        try:
            data = os.read(self._master_fd, _READ_SIZE)
        except OSError:
            # Linux reports EIO on the master once every slave descriptor is closed.
            data = b""
        if not data:
            self._stop_reading()
            return
        self._chunks.put_nowait(self._decoder.decode(data))

    def _stop_reading(self) -> None:
        if not self._reading:
            return
        self._reading = False
        self._loop.remove_reader(self._master_fd)
        self._chunks.put_nowait(None)

    async def _watch_exit(self) -> None:
        await self._process.wait()
        await asyncio.sleep(_EXIT_GRACE_SECONDS)
        self._stop_reading()


class PtyInteractiveOracle:
    """Spawns a fresh agent CLI process per session."""

    def __init__(self, config: PtyAgentConfig, observer: OracleObserver) -> None:
        self._config = config
        self._observer = observer

    async def open_session(self, system_prompt: str | None) -> InteractiveSession:
        """Start the agent on a new pseudo-terminal.

        Raises:
            OracleProcessError: if the agent command cannot be spawned.
        """
        args = list(self._config.args)
        if system_prompt:
            args.extend(["--system-prompt", system_prompt])

        master_fd, slave_fd = pty.openpty()
        _set_window_size(slave_fd, rows=self._config.rows, cols=self._config.cols)
        try:
            process = await asyncio.create_subprocess_exec(
                self._config.command,
                *args,
                stdin=slave_fd,
                stdout=slave_fd,
                stderr=slave_fd,
                env={**os.environ, "TERM": "xterm-256color", "COLORTERM": "truecolor"},
                start_new_session=True,
            )
        except OSError as exc:
            os.close(master_fd)
            raise OracleProcessError(
                reason=f"failed to spawn {self._config.command}: {exc}"
            ) from exc
        finally:
            os.close(slave_fd)

        session = PtySession(
            process=process, master_fd=master_fd, observer=self._observer
        )
        self._observer.session_opened(backend=_BACKEND, session_id=session.session_id)
        return session
