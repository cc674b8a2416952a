"""Ideation stage — generates self-contained test scenarios."""

from b_eval.core.errors import describe_error
from b_eval.evaluation.application.payloads import parse_payload
from b_eval.evaluation.application.stage_recorder import StageRecorder
from b_eval.evaluation.domain.scenario import (
    BehaviorUnderstanding,
    IdeationResponse,
    Scenario,
)
from b_eval.oracle.domain.oracle import OneShotOracle
from b_eval.prompts.templates import IDEATION_PROMPT, fill_template


class IdeationStage:
    """Requests `num_scenarios` scenarios in a single oracle call.

    The count and diversity are guidance for the oracle; fewer scenarios than
    requested are accepted as returned.
    """

    def __init__(
        self, oracle: OneShotOracle, recorder: StageRecorder, timeout_seconds: float
    ) -> None:
        self._oracle = oracle
        self._recorder = recorder
        self._timeout_seconds = timeout_seconds

    async def run(
        self, evaluation_id: str, understanding: BehaviorUnderstanding
    ) -> list[Scenario]:
        evaluation = self._recorder.load(evaluation_id)
        self._recorder.start(evaluation_id, "ideation")

        try:
            prompt = fill_template(
                IDEATION_PROMPT,
                {
                    "understanding": understanding,
                    "numScenarios": evaluation.config.num_scenarios,
                    "diversity": evaluation.config.diversity,
                },
            )
            response = await self._oracle.invoke(
                prompt, timeout_seconds=self._timeout_seconds
            )
            scenarios = parse_payload(IdeationResponse, response).scenarios
        except Exception as exc:
            self._recorder.fail(evaluation_id, "ideation", reason=describe_error(exc))
            raise

        self._recorder.complete(
            evaluation_id,
            "ideation",
            scenario_count=len(scenarios),
            scenarios=scenarios,
        )
        return scenarios
