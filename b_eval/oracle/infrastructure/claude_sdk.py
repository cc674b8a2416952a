"""ClaudeSDKInteractiveOracle — agent sessions driven through the Claude Agent SDK."""

import uuid
from collections.abc import AsyncIterator

from claude_agent_sdk import ClaudeSDKClient
from claude_agent_sdk._errors import ClaudeSDKError
from claude_agent_sdk.types import AssistantMessage, ClaudeAgentOptions, TextBlock

from b_eval.config.domain.agent import ClaudeSDKAgentConfig
from b_eval.oracle.domain.observer import OracleObserver
from b_eval.oracle.domain.session import InteractiveSession
from b_eval.oracle.infrastructure.errors import OracleProcessError

_BACKEND = "claude_agent_sdk"


class ClaudeSDKSession:
    """A connected ClaudeSDKClient exposed as a stream of text chunks.

    Only assistant text blocks are surfaced; tool traffic is not part of the
    conversation the simulated user sees.
    """

    def __init__(self, client: ClaudeSDKClient, observer: OracleObserver) -> None:
        self.session_id = uuid.uuid4().hex[:8]
        self._client = client
        self._observer = observer
        self._closed = False

    async def output(self) -> AsyncIterator[str]:
        try:
            async for message in self._client.receive_messages():
                if not isinstance(message, AssistantMessage):
                    continue
                for block in message.content:
                    if isinstance(block, TextBlock):
                        yield block.text
        except ClaudeSDKError as exc:
            raise OracleProcessError(reason=str(exc)) from exc

    async def write(self, text: str) -> None:
        try:
            await self._client.query(text)
        except ClaudeSDKError as exc:
            raise OracleProcessError(reason=str(exc)) from exc

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._client.disconnect()
        self._observer.session_closed(backend=_BACKEND, session_id=self.session_id)


class ClaudeSDKInteractiveOracle:
    """Opens one SDK client per session with the configured model and system prompt."""

    def __init__(self, config: ClaudeSDKAgentConfig, observer: OracleObserver) -> None:
        self._config = config
        self._observer = observer

    async def open_session(self, system_prompt: str | None) -> InteractiveSession:
        """Connect a new client.

        Raises:
            OracleProcessError: if the SDK cannot start the agent.
        """
        options = ClaudeAgentOptions(
            model=self._config.model,
            system_prompt=system_prompt,
            permission_mode=self._config.permission_mode,
            setting_sources=[],
        )
        client = ClaudeSDKClient(options=options)
        try:
            await client.connect()
        except ClaudeSDKError as exc:
            raise OracleProcessError(reason=str(exc)) from exc

        session = ClaudeSDKSession(client=client, observer=self._observer)
        self._observer.session_opened(backend=_BACKEND, session_id=session.session_id)
        return session
