# fleet_induction/services/planner.py
import logging
from datetime import datetime
from typing import Optional, Sequence

from fleet_induction.config import default_weights, settings
from fleet_induction.models.plan import InductionPlan
from fleet_induction.models.trainset import Trainset, WeightConfig
from fleet_induction.services.eligibility import ensure_utc
from fleet_induction.services.metrics import (
    branding_compliance_percent,
    collect_alerts,
    ready_count,
    select_induction_set,
    shunting_cost_estimate,
)
from fleet_induction.services.ranking import effective_weights, rank_trainsets
from fleet_induction.utils.explainability import build_decision

logger = logging.getLogger(__name__)


def plan_induction(
    trainsets: Sequence[Trainset],
    weights: WeightConfig,
    now: datetime,
    service_demand: int,
    respect_branding: bool = True,
) -> InductionPlan:
    """Run one complete planning pass: classify -> score -> rank -> select -> derive.

    Pure function of its inputs. Every call builds a fresh plan; nothing is
    cached or shared between runs (see PlanCache for opt-in memoization).
    """
    now = ensure_utc(now)
    run_weights = effective_weights(weights, respect_branding)

    ranked = rank_trainsets(trainsets, weights, now, respect_branding)
    induction_set = select_induction_set(ranked, service_demand)
    induction_ids = [r.trainset_id for r in induction_set]
    inducted = set(induction_ids)

    eligible_count = sum(1 for r in ranked if not r.blocked)
    plan = InductionPlan(
        planned_at=now,
        service_demand=service_demand,
        effective_service_demand=len(induction_set),
        respect_branding=respect_branding,
        effective_weights=run_weights,
        ranked=ranked,
        induction_set_ids=induction_ids,
        decisions=[build_decision(r, r.trainset_id in inducted) for r in ranked],
        alerts=collect_alerts(ranked, now),
        branding_compliance_percent=branding_compliance_percent(trainsets),
        shunting_cost_estimate=shunting_cost_estimate(induction_set),
        ready_count=ready_count(trainsets),
        induction_shortfall=max(0, service_demand - len(induction_set)),
    )

    logger.info(
        f"Induction plan: {len(induction_ids)}/{service_demand} inducted from {eligible_count} eligible "
        f"({len(ranked) - eligible_count} blocked), branding compliance {plan.branding_compliance_percent}%, "
        f"shunting cost {plan.shunting_cost_estimate} u"
    )
    if plan.induction_shortfall:
        logger.warning(f"Service demand short by {plan.induction_shortfall} trainsets")
    return plan


def plan_with_defaults(
    trainsets: Sequence[Trainset],
    weights: Optional[WeightConfig] = None,
    now: Optional[datetime] = None,
    service_demand: Optional[int] = None,
    respect_branding: bool = True,
) -> InductionPlan:
    """plan_induction with configured defaults filled in for anything not supplied."""
    return plan_induction(
        trainsets,
        weights if weights is not None else default_weights(),
        now if now is not None else datetime.now().astimezone(),
        service_demand if service_demand is not None else settings.default_service_demand,
        respect_branding,
    )
