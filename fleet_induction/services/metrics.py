# fleet_induction/services/metrics.py
import logging
import math
from datetime import datetime
from typing import List, Sequence

from fleet_induction.core.scoring_config import (
    ALERT_FEED_LIMIT,
    BRANDING_DELIVERY_FLOOR_HOURS,
    JOB_CARD_ALERT_THRESHOLD,
    SHUNTING_COST_MULTIPLIER,
    SHUNTING_UNIT_COST,
    TELECOM_ALERT_WINDOW,
)
from fleet_induction.models.plan import Alert, AlertKind, AlertSeverity, RankedResult
from fleet_induction.models.trainset import Trainset, TrainsetStatus
from fleet_induction.services.eligibility import ensure_utc

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to nearest integer with .5 going up (round() would go to even)."""
    return int(math.floor(value + 0.5))


def clamp_service_demand(service_demand: int, eligible_count: int) -> int:
    clamped = max(0, min(service_demand, eligible_count))
    if clamped != service_demand:
        logger.warning(
            f"Service demand {service_demand} clamped to {clamped} ({eligible_count} eligible trainsets)"
        )
    return clamped


def select_induction_set(ranked: Sequence[RankedResult], service_demand: int) -> List[RankedResult]:
    """First `service_demand` eligible entries in rank order; smaller when not enough are eligible."""
    eligible = [r for r in ranked if not r.blocked]
    return eligible[:clamp_service_demand(service_demand, len(eligible))]


def branding_compliance_percent(trainsets: Sequence[Trainset]) -> int:
    """Share of campaign-bearing trainsets that have logged at least min(committed, 1h) of exposure."""
    campaigns = [t for t in trainsets if t.branding.has_campaign]
    if not campaigns:
        return 100

    compliant = sum(
        1
        for t in campaigns
        if t.branding.hours_delivered >= min(t.branding.hours_committed, BRANDING_DELIVERY_FLOOR_HOURS)
    )
    return round_half_up(compliant / len(campaigns) * 100)


def shunting_cost_estimate(induction_set: Sequence[RankedResult]) -> int:
    """Coarse per-depot proxy, not a routing computation."""
    cost = sum(SHUNTING_UNIT_COST[r.trainset.stabled_at.value] for r in induction_set)
    return round_half_up(cost * SHUNTING_COST_MULTIPLIER)


def collect_alerts(ranked: Sequence[RankedResult], now: datetime, limit: int = ALERT_FEED_LIMIT) -> List[Alert]:
    """Scan the full ranked list in order; feed is capped at `limit` entries."""
    horizon = ensure_utc(now) + TELECOM_ALERT_WINDOW
    alerts: List[Alert] = []

    for result in ranked:
        trainset = result.trainset
        telecom_expiry = trainset.fitness.telecom_valid_till
        if telecom_expiry is not None and telecom_expiry < horizon:
            alerts.append(Alert(
                trainset_id=trainset.trainset_id,
                severity=AlertSeverity.HIGH,
                kind=AlertKind.TELECOM_EXPIRY,
                message=f"{trainset.trainset_id}: Telecom fitness expiring soon.",
            ))
        if trainset.job_cards_open >= JOB_CARD_ALERT_THRESHOLD:
            alerts.append(Alert(
                trainset_id=trainset.trainset_id,
                severity=AlertSeverity.MEDIUM,
                kind=AlertKind.JOB_CARD_OVERLOAD,
                message=f"{trainset.trainset_id}: {trainset.job_cards_open} open job-cards.",
            ))
        if trainset.cleaning_due:
            alerts.append(Alert(
                trainset_id=trainset.trainset_id,
                severity=AlertSeverity.LOW,
                kind=AlertKind.CLEANING_DUE,
                message=f"{trainset.trainset_id}: Deep clean due.",
            ))

    if len(alerts) > limit:
        logger.debug(f"Alert feed truncated from {len(alerts)} to {limit}")
    return alerts[:limit]


def ready_count(trainsets: Sequence[Trainset]) -> int:
    """Units not lifted in the inspection bay line."""
    return sum(1 for t in trainsets if t.status != TrainsetStatus.IBL)
