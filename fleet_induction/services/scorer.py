# fleet_induction/services/scorer.py
import logging
from datetime import datetime
from typing import Optional

from fleet_induction.core.scoring_config import (
    BRANDING_NEUTRAL_SCORE,
    CLEANING_CLEAR_SCORE,
    CLEANING_DUE_SCORE,
    FITNESS_SATURATION_DAYS,
    JOB_CARD_SATURATION,
    MILEAGE_TARGET_KM,
    MILEAGE_TOLERANCE_KM,
    STABLING_SCORES,
)
from fleet_induction.models.plan import EligibilityVerdict, SubScores
from fleet_induction.models.trainset import Branding, StablingLocation, Trainset, WeightConfig
from fleet_induction.services.eligibility import classify

logger = logging.getLogger(__name__)


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def fitness_score(min_certificate_days: int) -> float:
    return clamp(min_certificate_days / FITNESS_SATURATION_DAYS)


def jobs_score(job_cards_open: int) -> float:
    return clamp(1.0 - job_cards_open / JOB_CARD_SATURATION)


def mileage_score(mileage_km: float) -> float:
    return clamp(1.0 - abs(mileage_km - MILEAGE_TARGET_KM) / MILEAGE_TOLERANCE_KM)


def branding_score(branding: Branding) -> float:
    """Fraction of contractual exposure still owed; neutral when there is no campaign."""
    if not branding.has_campaign:
        return BRANDING_NEUTRAL_SCORE
    owed = branding.hours_committed - branding.hours_delivered
    return clamp(owed / max(1.0, branding.hours_committed))


def cleaning_score(cleaning_due: bool) -> float:
    return CLEANING_DUE_SCORE if cleaning_due else CLEANING_CLEAR_SCORE


def stabling_score(stabled_at: StablingLocation) -> float:
    return STABLING_SCORES[stabled_at.value]


def compute_sub_scores(trainset: Trainset, min_certificate_days: int) -> SubScores:
    """Six independent sub-scores for a non-blocked trainset."""
    return SubScores(
        fitness=fitness_score(min_certificate_days),
        jobs=jobs_score(trainset.job_cards_open),
        mileage=mileage_score(trainset.mileage_km),
        branding=branding_score(trainset.branding),
        cleaning=cleaning_score(trainset.cleaning_due),
        stabling=stabling_score(trainset.stabled_at),
    )


def weighted_sum(sub_scores: SubScores, weights: WeightConfig) -> float:
    # Fixed summation order keeps the result bit-for-bit reproducible
    return (
        sub_scores.fitness * weights.fitness
        + sub_scores.jobs * weights.jobs
        + sub_scores.mileage * weights.mileage
        + sub_scores.branding * weights.branding
        + sub_scores.cleaning * weights.cleaning
        + sub_scores.stabling * weights.stabling
    )


def score_breakdown(trainset: Trainset, verdict: EligibilityVerdict) -> Optional[SubScores]:
    """Sub-scores for an eligible trainset, None for a blocked one."""
    if verdict.blocked:
        return None
    return compute_sub_scores(trainset, verdict.min_certificate_days_remaining)


def score_trainset(trainset: Trainset, weights: WeightConfig, now: datetime) -> float:
    """Composite desirability score. Only defined for trainsets that pass the fitness gate."""
    verdict = classify(trainset, now)
    if verdict.blocked:
        raise ValueError(f"{trainset.trainset_id} is blocked by the fitness gate and has no score")
    sub_scores = compute_sub_scores(trainset, verdict.min_certificate_days_remaining)
    score = weighted_sum(sub_scores, weights)
    logger.debug(f"{trainset.trainset_id}: score {score:.4f} from {sub_scores.model_dump()}")
    return score
