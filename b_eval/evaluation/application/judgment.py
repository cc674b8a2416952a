"""Judgment stage — scores each transcript with independent judges."""

from b_eval.behavior.domain.behavior import Behavior
from b_eval.behavior.domain.catalog import BehaviorCatalog, find_behavior
from b_eval.behavior.domain.errors import BehaviorNotFoundError
from b_eval.core.errors import BEvalError, describe_error
from b_eval.evaluation.application.payloads import parse_payload
from b_eval.evaluation.application.stage_recorder import StageRecorder
from b_eval.evaluation.domain.aggregation import combine_verdicts, summarize_judgments
from b_eval.evaluation.domain.evaluation import EvaluationResults, utcnow
from b_eval.evaluation.domain.judgment import JudgeVerdict, ScenarioJudgment
from b_eval.evaluation.domain.observer import EvaluationObserver
from b_eval.evaluation.domain.scenario import BehaviorUnderstanding
from b_eval.evaluation.domain.store import EvaluationStore
from b_eval.evaluation.domain.transcript import RolloutTranscript
from b_eval.oracle.domain.oracle import OneShotOracle
from b_eval.prompts.templates import JUDGMENT_PROMPT, fill_template


class JudgmentStage:
    """Judges transcripts one at a time and finalizes the evaluation.

    Judges for a transcript run sequentially with identical prompts. A rollout
    that captured nothing is skipped without calling any judge, and a judge
    failure is recorded on that transcript's judgment instead of aborting the
    stage.
    """

    def __init__(
        self,
        store: EvaluationStore,
        behaviors: BehaviorCatalog,
        oracle: OneShotOracle,
        recorder: StageRecorder,
        observer: EvaluationObserver,
        timeout_seconds: float,
    ) -> None:
        self._store = store
        self._behaviors = behaviors
        self._oracle = oracle
        self._recorder = recorder
        self._observer = observer
        self._timeout_seconds = timeout_seconds

    async def run(
        self,
        evaluation_id: str,
        transcripts: list[RolloutTranscript],
        understanding: BehaviorUnderstanding,
    ) -> tuple[list[ScenarioJudgment], EvaluationResults]:
        evaluation = self._recorder.load(evaluation_id)
        total = len(transcripts)
        self._recorder.start(evaluation_id, "judgment", completed=0, total=total)

        judgments: list[ScenarioJudgment] = []
        try:
            behavior = find_behavior(self._behaviors, evaluation.behavior_key)
            if behavior is None:
                raise BehaviorNotFoundError(evaluation.behavior_key)

            for index, transcript in enumerate(transcripts, start=1):
                judgments.append(
                    await self._judge_transcript(
                        behavior,
                        understanding,
                        transcript,
                        evaluation.config.num_judges,
                    )
                )
                self._recorder.update(
                    evaluation_id, "judgment", completed=index, total=total
                )
                self._observer.judgment_progress(
                    evaluation_id=evaluation_id, completed=index, total=total
                )

            results = summarize_judgments(judgments)
        except Exception as exc:
            self._recorder.fail(evaluation_id, "judgment", reason=describe_error(exc))
            raise

        self._recorder.complete(
            evaluation_id,
            "judgment",
            completed=total,
            total=total,
            judgments=judgments,
        )
        self._store.update_evaluation(
            evaluation_id, status="completed", completed_at=utcnow(), results=results
        )
        return judgments, results

    async def _judge_transcript(
        self,
        behavior: Behavior,
        understanding: BehaviorUnderstanding,
        transcript: RolloutTranscript,
        num_judges: int,
    ) -> ScenarioJudgment:
        if transcript.error and not transcript.transcript:
            return ScenarioJudgment(
                scenario_id=transcript.scenario_id,
                score=None,
                skipped=True,
                error=transcript.error,
            )

        prompt = fill_template(
            JUDGMENT_PROMPT,
            {
                "behaviorKey": behavior.key,
                "behaviorDescription": behavior.description,
                "understanding": understanding,
                "transcript": transcript.render(),
            },
        )
        try:
            verdicts = [await self._judge_once(prompt) for _ in range(num_judges)]
        except BEvalError as exc:
            return ScenarioJudgment(
                scenario_id=transcript.scenario_id, score=None, error=str(exc)
            )
        return combine_verdicts(transcript.scenario_id, verdicts, judge_count=num_judges)

    async def _judge_once(self, prompt: str) -> JudgeVerdict:
        response = await self._oracle.invoke(
            prompt, timeout_seconds=self._timeout_seconds
        )
        return parse_payload(JudgeVerdict, response)
