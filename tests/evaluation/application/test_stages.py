"""Tests for the understanding and ideation stages and the stage recorder."""

from pathlib import Path

import pytest

from b_eval.behavior.domain.errors import BehaviorNotFoundError
from b_eval.evaluation.application.ideation import IdeationStage
from b_eval.evaluation.application.stage_recorder import StageRecorder
from b_eval.evaluation.application.understanding import UnderstandingStage
from b_eval.evaluation.domain.errors import EvaluationNotFoundError
from b_eval.evaluation.domain.scenario import BehaviorUnderstanding
from b_eval.evaluation.infrastructure.json_store import JsonFileStore
from b_eval.oracle.infrastructure.errors import OracleParseError, OracleTimeoutError
from tests.evaluation.builders import (
    TIMEOUTS,
    UNDERSTANDING_PAYLOAD,
    ideation_payload,
    make_evaluation,
    make_store,
)
from tests.evaluation.fake_observer import FakeEvaluationObserver
from tests.oracle.fake_oracle import IDEATION, UNDERSTANDING, FakeOneShotOracle

_UNDERSTANDING = BehaviorUnderstanding.model_validate(UNDERSTANDING_PAYLOAD)


def _make_recorder(
    store: JsonFileStore,
) -> tuple[StageRecorder, FakeEvaluationObserver]:
    observer = FakeEvaluationObserver()
    return StageRecorder(store=store, observer=observer), observer


def _make_understanding(
    store: JsonFileStore, oracle: FakeOneShotOracle
) -> tuple[UnderstandingStage, FakeEvaluationObserver]:
    recorder, observer = _make_recorder(store)
    stage = UnderstandingStage(
        behaviors=store,
        oracle=oracle,
        recorder=recorder,
        timeout_seconds=TIMEOUTS.understanding_seconds,
    )
    return stage, observer


def _make_ideation(
    store: JsonFileStore, oracle: FakeOneShotOracle
) -> tuple[IdeationStage, FakeEvaluationObserver]:
    recorder, observer = _make_recorder(store)
    stage = IdeationStage(
        oracle=oracle, recorder=recorder, timeout_seconds=TIMEOUTS.ideation_seconds
    )
    return stage, observer


class TestStageRecorder:
    def test_start_marks_stage_running(self, tmp_path: Path) -> None:
        store = make_store(tmp_path)
        store.create_evaluation(make_evaluation("e1"))
        recorder, observer = _make_recorder(store)

        recorder.start("e1", "rollout", completed=0, total=4)

        record = store.get_evaluation("e1").stages.rollout
        assert record.status == "running"
        assert record.started_at is not None
        assert record.total == 4
        assert [(e.evaluation_id, e.stage) for e in observer.stages_started] == [
            ("e1", "rollout")
        ]

    def test_update_leaves_other_stages_untouched(self, tmp_path: Path) -> None:
        store = make_store(tmp_path)
        store.create_evaluation(make_evaluation("e1"))
        recorder, _ = _make_recorder(store)
        recorder.complete("e1", "understanding", result=_UNDERSTANDING)

        recorder.update("e1", "rollout", completed=2, total=5)

        stages = store.get_evaluation("e1").stages
        assert stages.understanding.status == "completed"
        assert stages.understanding.result == _UNDERSTANDING
        assert (stages.rollout.completed, stages.rollout.total) == (2, 5)
        assert stages.rollout.status == "pending"

    def test_fail_records_reason(self, tmp_path: Path) -> None:
        store = make_store(tmp_path)
        store.create_evaluation(make_evaluation("e1"))
        recorder, observer = _make_recorder(store)

        recorder.fail("e1", "ideation", reason="oracle went away")

        record = store.get_evaluation("e1").stages.ideation
        assert record.status == "error"
        assert record.error == "oracle went away"
        assert observer.stages_failed[0].reason == "oracle went away"

    def test_unknown_evaluation_raises(self, tmp_path: Path) -> None:
        recorder, _ = _make_recorder(make_store(tmp_path))

        with pytest.raises(EvaluationNotFoundError):
            recorder.update("missing", "rollout", completed=1)


class TestUnderstandingStage:
    async def test_parses_understanding_and_persists_it(self, tmp_path: Path) -> None:
        store = make_store(tmp_path)
        store.create_evaluation(make_evaluation("e1"))
        oracle = FakeOneShotOracle(routes={UNDERSTANDING: UNDERSTANDING_PAYLOAD})
        stage, observer = _make_understanding(store, oracle)

        understanding = await stage.run("e1")

        assert understanding.core_definition == "Keeps answers short and on point."
        assert understanding.anti_patterns == ["long preambles"]
        record = store.get_evaluation("e1").stages.understanding
        assert record.status == "completed"
        assert record.result == understanding
        assert oracle.timeouts == [TIMEOUTS.understanding_seconds]
        assert [e.stage for e in observer.stages_completed] == ["understanding"]

    async def test_prompt_names_the_behavior(self, tmp_path: Path) -> None:
        store = make_store(tmp_path)
        store.create_evaluation(make_evaluation("e1"))
        oracle = FakeOneShotOracle(routes={UNDERSTANDING: UNDERSTANDING_PAYLOAD})
        stage, _ = _make_understanding(store, oracle)

        await stage.run("e1")

        assert "Key: concise_responses" in oracle.prompts[0]
        assert "{{behaviorDescription}}" not in oracle.prompts[0]

    async def test_non_object_payload_fails_the_stage(self, tmp_path: Path) -> None:
        store = make_store(tmp_path)
        store.create_evaluation(make_evaluation("e1"))
        oracle = FakeOneShotOracle(routes={UNDERSTANDING: "I would rather not."})
        stage, observer = _make_understanding(store, oracle)

        with pytest.raises(OracleParseError):
            await stage.run("e1")

        record = store.get_evaluation("e1").stages.understanding
        assert record.status == "error"
        assert (record.error or "").startswith("Failed to parse oracle response")
        assert [e.stage for e in observer.stages_failed] == ["understanding"]

    async def test_object_without_definition_fails_the_stage(self, tmp_path: Path) -> None:
        store = make_store(tmp_path)
        store.create_evaluation(make_evaluation("e1"))
        oracle = FakeOneShotOracle(routes={UNDERSTANDING: {"answer": "sure"}})
        stage, _ = _make_understanding(store, oracle)

        with pytest.raises(OracleParseError):
            await stage.run("e1")

        record = store.get_evaluation("e1").stages.understanding
        assert record.status == "error"
        assert record.result is None

    async def test_unknown_behavior_fails_before_calling_oracle(
        self, tmp_path: Path
    ) -> None:
        store = make_store(tmp_path)
        store.create_evaluation(make_evaluation("e1", behavior_key="not_a_behavior"))
        oracle = FakeOneShotOracle(routes={UNDERSTANDING: UNDERSTANDING_PAYLOAD})
        stage, _ = _make_understanding(store, oracle)

        with pytest.raises(BehaviorNotFoundError):
            await stage.run("e1")

        assert oracle.prompts == []
        assert store.get_evaluation("e1").stages.understanding.status == "error"


class TestIdeationStage:
    async def test_parses_scenarios_and_persists_them(self, tmp_path: Path) -> None:
        store = make_store(tmp_path)
        store.create_evaluation(make_evaluation("e1", num_scenarios=3))
        oracle = FakeOneShotOracle(routes={IDEATION: ideation_payload(3)})
        stage, _ = _make_ideation(store, oracle)

        scenarios = await stage.run("e1", _UNDERSTANDING)

        assert [s.id for s in scenarios] == ["1", "2", "3"]
        assert scenarios[0].prompt == "Task number 1"
        assert scenarios[0].difficulty == "easy"
        record = store.get_evaluation("e1").stages.ideation
        assert record.status == "completed"
        assert record.scenario_count == 3
        assert oracle.timeouts == [TIMEOUTS.ideation_seconds]

    async def test_prompt_carries_count_and_diversity(self, tmp_path: Path) -> None:
        store = make_store(tmp_path)
        store.create_evaluation(make_evaluation("e1", num_scenarios=7))
        oracle = FakeOneShotOracle(routes={IDEATION: ideation_payload(7)})
        stage, _ = _make_ideation(store, oracle)

        await stage.run("e1", _UNDERSTANDING)

        prompt = oracle.prompts[0]
        assert "Number of scenarios to generate: 7" in prompt
        assert "Diversity level: 0.5" in prompt
        assert '"coreDefinition": "Keeps answers short and on point."' in prompt

    async def test_fewer_scenarios_than_requested_are_accepted(
        self, tmp_path: Path
    ) -> None:
        store = make_store(tmp_path)
        store.create_evaluation(make_evaluation("e1", num_scenarios=5))
        oracle = FakeOneShotOracle(routes={IDEATION: ideation_payload(2)})
        stage, _ = _make_ideation(store, oracle)

        scenarios = await stage.run("e1", _UNDERSTANDING)

        assert len(scenarios) == 2
        assert store.get_evaluation("e1").stages.ideation.scenario_count == 2

    async def test_object_without_scenarios_fails_the_stage(self, tmp_path: Path) -> None:
        store = make_store(tmp_path)
        store.create_evaluation(make_evaluation("e1"))
        oracle = FakeOneShotOracle(
            routes={IDEATION: {"items": [{"prompt": "Task number 1"}]}}
        )
        stage, _ = _make_ideation(store, oracle)

        with pytest.raises(OracleParseError):
            await stage.run("e1", _UNDERSTANDING)

        record = store.get_evaluation("e1").stages.ideation
        assert record.status == "error"
        assert record.scenario_count == 0

    async def test_malformed_scenario_fails_the_stage(self, tmp_path: Path) -> None:
        store = make_store(tmp_path)
        store.create_evaluation(make_evaluation("e1"))
        oracle = FakeOneShotOracle(routes={IDEATION: {"scenarios": [{"id": "x", "prompt": ""}]}})
        stage, _ = _make_ideation(store, oracle)

        with pytest.raises(OracleParseError):
            await stage.run("e1", _UNDERSTANDING)

        assert store.get_evaluation("e1").stages.ideation.status == "error"

    async def test_oracle_timeout_fails_the_stage(self, tmp_path: Path) -> None:
        store = make_store(tmp_path)
        store.create_evaluation(make_evaluation("e1"))
        oracle = FakeOneShotOracle(routes={IDEATION: OracleTimeoutError(timeout_seconds=180)})
        stage, observer = _make_ideation(store, oracle)

        with pytest.raises(OracleTimeoutError):
            await stage.run("e1", _UNDERSTANDING)

        assert "timed out" in (observer.stages_failed[0].reason or "")
