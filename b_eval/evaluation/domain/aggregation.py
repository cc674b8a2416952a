"""Score aggregation across judges and across scenarios."""

import statistics

from b_eval.evaluation.domain.evaluation import EvaluationResults, ScoreDistribution
from b_eval.evaluation.domain.judgment import JudgeVerdict, ScenarioJudgment

EVIDENCE_PER_POLARITY = 3
KEY_QUOTE_LIMIT = 5
FAILURE_THRESHOLD = 0.4
DEFAULT_CONFIDENCE = "medium"


def median_score(scores: list[float]) -> float | None:
    """Middle element of the sorted scores; the lower middle for even counts.

    Never averages the two middle values: [0.2, 0.8] yields 0.2.
    """
    if not scores:
        return None
    ordered = sorted(scores)
    return ordered[(len(ordered) - 1) // 2]


def combine_verdicts(
    scenario_id: str, verdicts: list[JudgeVerdict], judge_count: int
) -> ScenarioJudgment:
    """Fold independent judge verdicts for one transcript into a ScenarioJudgment.

    The score is the median over judges that returned one. Evidence lists are
    concatenated in judge order and truncated per polarity. Confidence and
    summary come from the first judge only.
    """
    first = verdicts[0] if verdicts else None
    return ScenarioJudgment(
        scenario_id=scenario_id,
        score=median_score([v.score for v in verdicts if v.score is not None]),
        confidence=(first.confidence if first else None) or DEFAULT_CONFIDENCE,
        summary=(first.summary if first else None) or "",
        positive_evidence=[e for v in verdicts for e in v.positive_evidence][
            :EVIDENCE_PER_POLARITY
        ],
        negative_evidence=[e for v in verdicts for e in v.negative_evidence][
            :EVIDENCE_PER_POLARITY
        ],
        judge_count=judge_count,
    )


def summarize_judgments(judgments: list[ScenarioJudgment]) -> EvaluationResults:
    """Compute evaluation-level results over the judgments with a valid score."""
    scores = [j.score for j in judgments if j.score is not None]

    distribution: ScoreDistribution | None = None
    overall: float | None = None
    if scores:
        overall = statistics.mean(scores)
        distribution = ScoreDistribution(
            min=min(scores),
            max=max(scores),
            mean=overall,
            std=statistics.pstdev(scores),
        )

    return EvaluationResults(
        overall_score=overall,
        score_distribution=distribution,
        key_quotes=[e for j in judgments for e in j.positive_evidence][:KEY_QUOTE_LIMIT],
        failure_patterns=[
            j.summary
            for j in judgments
            if j.score is not None and j.score < FAILURE_THRESHOLD and j.summary
        ],
    )
