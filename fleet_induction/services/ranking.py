# fleet_induction/services/ranking.py
import logging
from datetime import datetime
from typing import List, Sequence, Tuple

from fleet_induction.models.plan import Blocked, RankedResult, Scored
from fleet_induction.models.trainset import Trainset, WeightConfig
from fleet_induction.services.eligibility import classify
from fleet_induction.services.scorer import score_breakdown, weighted_sum

logger = logging.getLogger(__name__)


def effective_weights(weights: WeightConfig, respect_branding: bool) -> WeightConfig:
    """Weights for a single run; branding is zeroed on a copy when it is not respected."""
    return weights if respect_branding else weights.without_branding()


def rank_trainsets(
    trainsets: Sequence[Trainset],
    weights: WeightConfig,
    now: datetime,
    respect_branding: bool = True,
) -> List[RankedResult]:
    """Classify, score and order the whole fleet.

    Ordering:
    - Priority 1: eligible before blocked
    - Priority 2: score (descending) among eligible
    - Priority 3: input order (stable sort)
    Ranks are 1..N over the final order, blocked entries included.
    """
    run_weights = effective_weights(weights, respect_branding)

    entries = []
    for trainset in trainsets:
        verdict = classify(trainset, now)
        sub_scores = score_breakdown(trainset, verdict)
        score = Blocked() if sub_scores is None else Scored(value=weighted_sum(sub_scores, run_weights))
        entries.append((trainset, verdict, sub_scores, score))

    def sort_key(entry) -> Tuple[int, float]:
        score = entry[3]
        if isinstance(score, Blocked):
            return (1, 0.0)
        return (0, -score.value)

    ordered = sorted(entries, key=sort_key)

    ranked = [
        RankedResult(trainset=trainset, score=score, eligibility=verdict, sub_scores=sub_scores, rank=position)
        for position, (trainset, verdict, sub_scores, score) in enumerate(ordered, start=1)
    ]

    blocked_count = sum(1 for r in ranked if r.blocked)
    logger.info(f"Ranked {len(ranked)} trainsets: {len(ranked) - blocked_count} eligible, {blocked_count} blocked")
    return ranked
