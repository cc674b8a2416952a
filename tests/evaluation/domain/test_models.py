"""Tests for evaluation domain model parsing rules."""

import pytest
from pydantic import ValidationError

from b_eval.evaluation.domain.judgment import Evidence, JudgeVerdict
from b_eval.evaluation.domain.scenario import (
    BehaviorUnderstanding,
    IdeationResponse,
    Scenario,
)
from b_eval.evaluation.domain.transcript import (
    RolloutTranscript,
    TranscriptEntry,
    render_entries,
)


class TestScenario:
    def test_integer_id_is_stringified(self) -> None:
        assert Scenario.model_validate({"id": 3, "prompt": "p"}).id == "3"

    def test_missing_id_is_generated(self) -> None:
        assert Scenario(prompt="p").id != ""

    def test_difficulty_is_normalised(self) -> None:
        assert Scenario.model_validate({"prompt": "p", "difficulty": " Hard "}).difficulty == "hard"

    def test_camel_case_fields_are_accepted(self) -> None:
        scenario = Scenario.model_validate({"prompt": "p", "followUps": ["more?"]})

        assert scenario.follow_ups == ["more?"]

    def test_empty_prompt_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Scenario(prompt="")


class TestJudgeVerdict:
    def test_camel_case_payload(self) -> None:
        verdict = JudgeVerdict.model_validate(
            {"score": 0.8, "positiveEvidence": ["plain quote"], "opportunityAssessment": "x"}
        )

        assert verdict.positive_evidence == [Evidence(quote="plain quote")]
        assert verdict.opportunity_assessment == "x"

    def test_score_out_of_range_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            JudgeVerdict.model_validate({"score": 1.5})

    def test_null_score_is_allowed(self) -> None:
        assert JudgeVerdict.model_validate({"score": None}).score is None


class TestUnderstanding:
    def test_optional_lists_default_when_definition_present(self) -> None:
        understanding = BehaviorUnderstanding.model_validate({"coreDefinition": "x"})

        assert understanding.core_definition == "x"
        assert understanding.observable_markers == []

    def test_missing_core_definition_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            BehaviorUnderstanding.model_validate({"answer": "sure"})

    def test_empty_core_definition_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            BehaviorUnderstanding.model_validate({"coreDefinition": ""})


class TestIdeationResponse:
    def test_missing_scenarios_key_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            IdeationResponse.model_validate({"items": [{"prompt": "p"}]})

    def test_empty_scenario_list_is_accepted(self) -> None:
        assert IdeationResponse.model_validate({"scenarios": []}).scenarios == []


class TestTranscriptRendering:
    def test_entries_render_as_role_paragraphs(self) -> None:
        entries = [
            TranscriptEntry(role="user", content="hi"),
            TranscriptEntry(role="assistant", content="hello"),
        ]

        assert render_entries(entries) == "user: hi\n\nassistant: hello"

    def test_transcript_render_uses_its_entries(self) -> None:
        transcript = RolloutTranscript(
            scenario_id="s",
            scenario=Scenario(id="s", prompt="hi"),
            transcript=[TranscriptEntry(role="user", content="hi")],
            completed=True,
        )

        assert transcript.render() == "user: hi"
