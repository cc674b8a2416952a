"""Understanding stage — turns a behavior into a structured definition."""

from b_eval.behavior.domain.catalog import BehaviorCatalog, find_behavior
from b_eval.behavior.domain.errors import BehaviorNotFoundError
from b_eval.core.errors import describe_error
from b_eval.evaluation.application.payloads import parse_payload
from b_eval.evaluation.application.stage_recorder import StageRecorder
from b_eval.evaluation.domain.scenario import BehaviorUnderstanding
from b_eval.oracle.domain.oracle import OneShotOracle
from b_eval.prompts.templates import UNDERSTANDING_PROMPT, fill_template


class UnderstandingStage:
    """Asks the oracle for markers, anti-patterns, and success criteria of a behavior.

    Every later stage depends on this result, so any failure here aborts the
    evaluation.
    """

    def __init__(
        self,
        behaviors: BehaviorCatalog,
        oracle: OneShotOracle,
        recorder: StageRecorder,
        timeout_seconds: float,
    ) -> None:
        self._behaviors = behaviors
        self._oracle = oracle
        self._recorder = recorder
        self._timeout_seconds = timeout_seconds

    async def run(self, evaluation_id: str) -> BehaviorUnderstanding:
        evaluation = self._recorder.load(evaluation_id)
        self._recorder.start(evaluation_id, "understanding")

        try:
            behavior = find_behavior(self._behaviors, evaluation.behavior_key)
            if behavior is None:
                raise BehaviorNotFoundError(evaluation.behavior_key)

            prompt = fill_template(
                UNDERSTANDING_PROMPT,
                {
                    "behaviorKey": behavior.key,
                    "behaviorDescription": behavior.description,
                },
            )
            response = await self._oracle.invoke(
                prompt, timeout_seconds=self._timeout_seconds
            )
            understanding = parse_payload(BehaviorUnderstanding, response)
        except Exception as exc:
            self._recorder.fail(evaluation_id, "understanding", reason=describe_error(exc))
            raise

        self._recorder.complete(evaluation_id, "understanding", result=understanding)
        return understanding
