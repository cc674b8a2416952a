"""Tests for JudgmentStage."""

from pathlib import Path

import pytest

from b_eval.behavior.domain.errors import BehaviorNotFoundError
from b_eval.evaluation.application.judgment import JudgmentStage
from b_eval.evaluation.application.stage_recorder import StageRecorder
from b_eval.evaluation.domain.scenario import BehaviorUnderstanding, Scenario
from b_eval.evaluation.domain.transcript import RolloutTranscript, TranscriptEntry
from b_eval.evaluation.infrastructure.json_store import JsonFileStore
from b_eval.oracle.infrastructure.errors import OracleTimeoutError
from tests.evaluation.builders import (
    TIMEOUTS,
    UNDERSTANDING_PAYLOAD,
    make_evaluation,
    make_store,
    verdict_payload,
)
from tests.evaluation.fake_observer import FakeEvaluationObserver
from tests.oracle.fake_oracle import JUDGMENT, FakeOneShotOracle


def _make_transcript(
    scenario_id: str = "s1",
    reply: str | None = "Use sorted().",
    error: str | None = None,
) -> RolloutTranscript:
    entries: list[TranscriptEntry] = []
    if reply is not None:
        entries = [
            TranscriptEntry(role="user", content="How do I sort a list?"),
            TranscriptEntry(role="assistant", content=reply),
        ]
    return RolloutTranscript(
        scenario_id=scenario_id,
        scenario=Scenario(id=scenario_id, prompt="How do I sort a list?"),
        transcript=entries,
        completed=error is None,
        turn_count=1 if reply is not None else 0,
        error=error,
    )


def _make_stage(
    store: JsonFileStore,
    oracle: FakeOneShotOracle,
    observer: FakeEvaluationObserver | None = None,
) -> tuple[JudgmentStage, FakeEvaluationObserver]:
    obs = observer if observer is not None else FakeEvaluationObserver()
    stage = JudgmentStage(
        store=store,
        behaviors=store,
        oracle=oracle,
        recorder=StageRecorder(store=store, observer=obs),
        observer=obs,
        timeout_seconds=TIMEOUTS.judgment_seconds,
    )
    return stage, obs


_UNDERSTANDING = BehaviorUnderstanding.model_validate(UNDERSTANDING_PAYLOAD)


class TestJudgeTranscripts:
    async def test_empty_failed_rollout_is_skipped_without_a_judge_call(
        self, tmp_path: Path
    ) -> None:
        store = make_store(tmp_path)
        store.create_evaluation(make_evaluation("e1"))
        oracle = FakeOneShotOracle(routes={JUDGMENT: verdict_payload(0.9)})
        stage, _ = _make_stage(store, oracle)

        judgments, _ = await stage.run(
            "e1", [_make_transcript(reply=None, error="boom")], _UNDERSTANDING
        )

        assert judgments[0].skipped is True
        assert judgments[0].score is None
        assert judgments[0].error == "boom"
        assert oracle.prompts == []

    async def test_median_of_three_judges(self, tmp_path: Path) -> None:
        store = make_store(tmp_path)
        store.create_evaluation(make_evaluation("e1", num_judges=3))
        oracle = FakeOneShotOracle(
            routes={
                JUDGMENT: [
                    verdict_payload(0.9, summary="first judge", confidence="low"),
                    verdict_payload(0.1, summary="second judge"),
                    verdict_payload(0.5, summary="third judge"),
                ]
            }
        )
        stage, _ = _make_stage(store, oracle)

        judgments, _ = await stage.run("e1", [_make_transcript()], _UNDERSTANDING)

        judgment = judgments[0]
        assert judgment.score == pytest.approx(0.5)
        assert judgment.summary == "first judge"
        assert judgment.confidence == "low"
        assert judgment.judge_count == 3
        assert len(oracle.calls_for(JUDGMENT)) == 3
        assert oracle.timeouts == [TIMEOUTS.judgment_seconds] * 3

    async def test_judge_prompt_carries_behavior_and_transcript(self, tmp_path: Path) -> None:
        store = make_store(tmp_path)
        store.create_evaluation(make_evaluation("e1"))
        oracle = FakeOneShotOracle(routes={JUDGMENT: verdict_payload(0.7)})
        stage, _ = _make_stage(store, oracle)

        await stage.run("e1", [_make_transcript(reply="Just call sorted(xs).")], _UNDERSTANDING)

        prompt = oracle.prompts[0]
        assert "Key: concise_responses" in prompt
        assert "assistant: Just call sorted(xs)." in prompt
        assert "Keeps answers short and on point." in prompt

    async def test_judge_failure_is_recorded_on_the_judgment(self, tmp_path: Path) -> None:
        store = make_store(tmp_path)
        store.create_evaluation(make_evaluation("e1"))
        oracle = FakeOneShotOracle(
            routes={JUDGMENT: [OracleTimeoutError(timeout_seconds=120), verdict_payload(0.6)]}
        )
        stage, _ = _make_stage(store, oracle)

        judgments, results = await stage.run(
            "e1",
            [_make_transcript("s1"), _make_transcript("s2")],
            _UNDERSTANDING,
        )

        assert judgments[0].score is None
        assert "timed out" in (judgments[0].error or "")
        assert judgments[0].skipped is False
        assert judgments[1].score == pytest.approx(0.6)
        assert results.overall_score == pytest.approx(0.6)

    async def test_unparsable_verdict_is_recorded_on_the_judgment(
        self, tmp_path: Path
    ) -> None:
        store = make_store(tmp_path)
        store.create_evaluation(make_evaluation("e1"))
        oracle = FakeOneShotOracle(routes={JUDGMENT: verdict_payload(1.7)})
        stage, _ = _make_stage(store, oracle)

        judgments, results = await stage.run("e1", [_make_transcript()], _UNDERSTANDING)

        assert judgments[0].score is None
        assert (judgments[0].error or "").startswith("Failed to parse oracle response")
        assert results.overall_score is None


class TestFinalization:
    async def test_marks_evaluation_completed_with_results(self, tmp_path: Path) -> None:
        store = make_store(tmp_path)
        store.create_evaluation(make_evaluation("e1"))
        oracle = FakeOneShotOracle(
            routes={JUDGMENT: [verdict_payload(0.2, summary="rambled"), verdict_payload(0.8)]}
        )
        stage, observer = _make_stage(store, oracle)

        await stage.run(
            "e1", [_make_transcript("s1"), _make_transcript("s2")], _UNDERSTANDING
        )

        evaluation = store.get_evaluation("e1")
        assert evaluation is not None
        assert evaluation.status == "completed"
        assert evaluation.completed_at is not None
        assert evaluation.results is not None
        assert evaluation.results.overall_score == pytest.approx(0.5)
        assert evaluation.results.failure_patterns == ["rambled"]
        record = evaluation.stages.judgment
        assert record.status == "completed"
        assert (record.completed, record.total) == (2, 2)
        assert [j.scenario_id for j in record.judgments] == ["s1", "s2"]
        assert [e.completed for e in observer.judgment_progress_events] == [1, 2]
        assert [e.stage for e in observer.stages_completed] == ["judgment"]

    async def test_unknown_behavior_fails_the_stage(self, tmp_path: Path) -> None:
        store = make_store(tmp_path)
        store.create_evaluation(make_evaluation("e1", behavior_key="not_a_behavior"))
        stage, observer = _make_stage(
            store, FakeOneShotOracle(routes={JUDGMENT: verdict_payload(0.5)})
        )

        with pytest.raises(BehaviorNotFoundError):
            await stage.run("e1", [_make_transcript()], _UNDERSTANDING)

        evaluation = store.get_evaluation("e1")
        assert evaluation is not None
        assert evaluation.stages.judgment.status == "error"
        assert evaluation.status == "pending"
        assert [e.stage for e in observer.stages_failed] == ["judgment"]
