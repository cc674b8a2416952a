"""Rollout stage — drives the agent under test through each scenario.

A rollout is a turn-taking loop over an interactive session. The session gives
no end-of-response signal, so a turn ends once output has been quiet for
`quiescence_seconds`. Scenarios run in fixed batches of `max_concurrent`; a
failed scenario becomes a transcript carrying its error rather than aborting
the stage.
"""

import asyncio
import time
from typing import Literal

from b_eval.config.domain.pipeline import OracleTimeouts, RolloutSettings
from b_eval.core.errors import BEvalError, describe_error
from b_eval.core.text import strip_ansi
from b_eval.evaluation.application.payloads import parse_payload
from b_eval.evaluation.application.stage_recorder import StageRecorder
from b_eval.evaluation.domain.errors import SessionExitedError
from b_eval.evaluation.domain.evaluation import Evaluation
from b_eval.evaluation.domain.observer import EvaluationObserver
from b_eval.evaluation.domain.scenario import Scenario
from b_eval.evaluation.domain.transcript import (
    ContinuationDecision,
    RolloutTranscript,
    TranscriptEntry,
    render_entries,
)
from b_eval.oracle.domain.oracle import OneShotOracle
from b_eval.oracle.domain.session import InteractiveOracle, InteractiveSession
from b_eval.prompts.templates import USER_SIMULATOR_PROMPT, fill_template

RESPONSE_TIMEOUT_ERROR = "Response timeout"

type TurnOutcome = Literal["response", "timeout", "exited"]


class _OutputMonitor:
    """Pumps session output into a buffer and tracks when output last arrived."""

    def __init__(self, session: InteractiveSession) -> None:
        self._session = session
        self._buffer: list[str] = []
        self.last_output_at = time.monotonic()
        self.exited = asyncio.Event()
        self.exit_reason: str | None = None
        self._pump = asyncio.create_task(self._consume())

    async def _consume(self) -> None:
        try:
            async for chunk in self._session.output():
                self._buffer.append(chunk)
                self.last_output_at = time.monotonic()
        except Exception as exc:
            # A broken output stream is indistinguishable from the agent exiting.
            self.exit_reason = describe_error(exc)
        finally:
            self.exited.set()

    def begin_turn(self) -> None:
        self._buffer.clear()
        self.last_output_at = time.monotonic()

    def take_response(self) -> str:
        text = strip_ansi("".join(self._buffer)).strip()
        self._buffer.clear()
        return text

    async def stop(self) -> None:
        self._pump.cancel()
        await asyncio.wait([self._pump])


class RolloutEngine:
    """Runs one scenario against a fresh interactive session."""

    def __init__(
        self,
        interactive: InteractiveOracle,
        oracle: OneShotOracle,
        settings: RolloutSettings,
        timeouts: OracleTimeouts,
    ) -> None:
        self._interactive = interactive
        self._oracle = oracle
        self._settings = settings
        self._timeouts = timeouts

    async def run_scenario(
        self, scenario: Scenario, system_prompt: str | None, max_turns: int
    ) -> RolloutTranscript:
        """Converse until the scenario completes, times out, or the agent exits.

        Raises:
            SessionExitedError: if the agent exits before producing any turn.
        """
        session = await self._interactive.open_session(system_prompt=system_prompt)
        monitor = _OutputMonitor(session)
        try:
            return await self._converse(scenario, session, monitor, max_turns)
        finally:
            await monitor.stop()
            await session.close()

    async def _converse(
        self,
        scenario: Scenario,
        session: InteractiveSession,
        monitor: _OutputMonitor,
        max_turns: int,
    ) -> RolloutTranscript:
        entries: list[TranscriptEntry] = []
        turn_count = 0

        await asyncio.sleep(self._settings.warmup_seconds)
        message = scenario.prompt

        while True:
            if monitor.exited.is_set():
                return self._after_exit(scenario, entries, turn_count)

            entries.append(TranscriptEntry(role="user", content=message))
            monitor.begin_turn()
            try:
                await session.write(message)
            except (OSError, BEvalError):
                return self._after_exit(scenario, entries, turn_count)

            outcome = await self._await_turn(monitor)
            if outcome == "exited":
                # Output that arrived before the exit still counts as a turn.
                response = monitor.take_response()
                if response:
                    entries.append(TranscriptEntry(role="assistant", content=response))
                    turn_count += 1
                return self._after_exit(scenario, entries, turn_count)
            if outcome == "timeout":
                return RolloutTranscript(
                    scenario_id=scenario.id,
                    scenario=scenario,
                    transcript=entries,
                    completed=False,
                    turn_count=turn_count,
                    error=RESPONSE_TIMEOUT_ERROR,
                )

            response = monitor.take_response()
            if response:
                entries.append(TranscriptEntry(role="assistant", content=response))
            turn_count += 1

            if turn_count >= max_turns:
                return self._finished(scenario, entries, turn_count)

            decision = await self._decide(scenario, entries)
            if decision.action == "complete" or not decision.message:
                return self._finished(scenario, entries, turn_count)
            message = decision.message

    async def _await_turn(self, monitor: _OutputMonitor) -> TurnOutcome:
        started = time.monotonic()
        while True:
            await asyncio.sleep(self._settings.poll_interval_seconds)
            if monitor.exited.is_set():
                return "exited"
            now = time.monotonic()
            if now - monitor.last_output_at > self._settings.quiescence_seconds:
                return "response"
            if now - started >= self._settings.turn_timeout_seconds:
                return "timeout"

    async def _decide(
        self, scenario: Scenario, entries: list[TranscriptEntry]
    ) -> ContinuationDecision:
        prompt = fill_template(
            USER_SIMULATOR_PROMPT,
            {"scenario": scenario, "transcript": render_entries(entries)},
        )
        try:
            response = await self._oracle.invoke(
                prompt, timeout_seconds=self._timeouts.continuation_seconds
            )
            return parse_payload(ContinuationDecision, response)
        except BEvalError as exc:
            return ContinuationDecision(
                action="complete", reason=f"Evaluator error: {exc}"
            )

    @staticmethod
    def _after_exit(
        scenario: Scenario, entries: list[TranscriptEntry], turn_count: int
    ) -> RolloutTranscript:
        if turn_count == 0:
            raise SessionExitedError(scenario.id)
        return RolloutEngine._finished(scenario, entries, turn_count)

    @staticmethod
    def _finished(
        scenario: Scenario, entries: list[TranscriptEntry], turn_count: int
    ) -> RolloutTranscript:
        return RolloutTranscript(
            scenario_id=scenario.id,
            scenario=scenario,
            transcript=entries,
            completed=True,
            turn_count=turn_count,
        )


class RolloutStage:
    """Runs every scenario in batches and persists progress after each batch."""

    def __init__(
        self,
        engine: RolloutEngine,
        recorder: StageRecorder,
        settings: RolloutSettings,
        observer: EvaluationObserver,
    ) -> None:
        self._engine = engine
        self._recorder = recorder
        self._settings = settings
        self._observer = observer

    async def run(
        self, evaluation_id: str, scenarios: list[Scenario]
    ) -> list[RolloutTranscript]:
        evaluation = self._recorder.load(evaluation_id)
        total = len(scenarios)
        self._recorder.start(evaluation_id, "rollout", completed=0, total=total)

        try:
            transcripts = await self._run_batches(evaluation, scenarios)
        except Exception as exc:
            self._recorder.fail(evaluation_id, "rollout", reason=describe_error(exc))
            raise

        self._recorder.complete(
            evaluation_id,
            "rollout",
            completed=total,
            total=total,
            transcripts=transcripts,
        )
        return transcripts

    async def _run_batches(
        self, evaluation: Evaluation, scenarios: list[Scenario]
    ) -> list[RolloutTranscript]:
        transcripts: list[RolloutTranscript] = []
        total = len(scenarios)
        size = self._settings.max_concurrent

        for start in range(0, total, size):
            batch = scenarios[start : start + size]
            outcomes = await asyncio.gather(
                *(self._roll_out(evaluation, scenario) for scenario in batch),
                return_exceptions=True,
            )
            for scenario, outcome in zip(batch, outcomes, strict=True):
                transcripts.append(self._settle(evaluation.id, scenario, outcome))

            completed = min(start + size, total)
            self._recorder.update(
                evaluation.id, "rollout", completed=completed, total=total
            )
            self._observer.rollout_progress(
                evaluation_id=evaluation.id, completed=completed, total=total
            )

        return transcripts

    async def _roll_out(
        self, evaluation: Evaluation, scenario: Scenario
    ) -> RolloutTranscript:
        self._observer.scenario_rollout_started(
            evaluation_id=evaluation.id, scenario_id=scenario.id
        )
        transcript = await self._engine.run_scenario(
            scenario,
            system_prompt=evaluation.prompt_config.system_prompt,
            max_turns=evaluation.config.max_turns,
        )
        self._observer.scenario_rollout_completed(
            evaluation_id=evaluation.id,
            scenario_id=scenario.id,
            turn_count=transcript.turn_count,
            completed=transcript.completed,
        )
        return transcript

    def _settle(
        self,
        evaluation_id: str,
        scenario: Scenario,
        outcome: RolloutTranscript | BaseException,
    ) -> RolloutTranscript:
        if isinstance(outcome, RolloutTranscript):
            return outcome
        if not isinstance(outcome, Exception):
            raise outcome

        reason = describe_error(outcome)
        self._observer.scenario_rollout_failed(
            evaluation_id=evaluation_id, scenario_id=scenario.id, reason=reason
        )
        return RolloutTranscript(
            scenario_id=scenario.id,
            scenario=scenario,
            transcript=[],
            completed=False,
            error=reason,
        )
