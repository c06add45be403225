# fleet_induction/utils/explainability.py
from __future__ import annotations

from typing import Dict, List, Optional

from fleet_induction.core.scoring_config import FITNESS_SATURATION_DAYS, MILEAGE_TARGET_KM
from fleet_induction.models.plan import DecisionType, RankedResult, TrainsetDecision
from fleet_induction.models.trainset import StablingLocation


_DEPARTMENT_LABELS = {
    "rolling_stock": "Rolling-stock",
    "signalling": "Signalling",
    "telecom": "Telecom",
}


def _tightest_certificate(days_by_cert: Dict[str, Optional[int]]) -> Optional[str]:
    known = {name: days for name, days in days_by_cert.items() if days is not None}
    if not known:
        return None
    # min() keeps the first of equal values, so ties resolve in department order
    return min(known, key=known.get)


def _blocked_risks(result: RankedResult) -> List[str]:
    risks: List[str] = []
    for dept, days in result.eligibility.certificate_days_remaining.items():
        label = _DEPARTMENT_LABELS.get(dept, dept)
        if days is None:
            risks.append(f"{label} certificate missing or unreadable - safety critical failure")
        elif days <= 0:
            risks.append(f"{label} certificate expired - safety critical failure")
    return risks


def top_reasons_and_risks(result: RankedResult) -> Dict[str, List[str]]:
    """Generate top reasons and risks from the fitness verdict and sub-score breakdown"""
    reasons: List[str] = []
    risks: List[str] = []

    if result.blocked or result.sub_scores is None:
        return {"top_reasons": [], "top_risks": _blocked_risks(result)[:3]}

    trainset = result.trainset
    sub = result.sub_scores
    verdict = result.eligibility

    # Fitness window
    min_days = verdict.min_certificate_days_remaining
    if min_days is not None and min_days >= FITNESS_SATURATION_DAYS:
        reasons.append(f"All fitness certificates valid for {min_days}+ days")
    else:
        dept = _tightest_certificate(verdict.certificate_days_remaining)
        label = _DEPARTMENT_LABELS.get(dept, dept)
        unit = "day" if min_days == 1 else "days"
        risks.append(f"{label} certificate expires in {min_days} {unit}")

    # Job-cards
    if trainset.job_cards_open == 0:
        reasons.append("No open job-cards")
    else:
        risks.append(f"{trainset.job_cards_open} open job-card(s)")

    # Branding exposure
    branding = trainset.branding
    if branding.has_campaign:
        if sub.branding > 0:
            owed = branding.hours_committed - branding.hours_delivered
            reasons.append(f"'{branding.campaign}' still owed {owed:.1f} h of exposure")
        else:
            risks.append(f"'{branding.campaign}' commitment already met - no exposure owed")

    # Cleaning
    if trainset.cleaning_due:
        risks.append("Deep clean due")

    # Stabling geometry
    if trainset.stabled_at == StablingLocation.MAIN_DEPOT_A:
        reasons.append("Stabled at main depot A - minimal shunting")
    elif trainset.stabled_at == StablingLocation.SATELLITE:
        risks.append("Stabled at satellite yard - extra shunting to service tracks")

    # Mileage balancing
    if sub.mileage >= 0.8:
        reasons.append("Mileage close to fleet balancing target")
    elif sub.mileage < 0.4:
        direction = "above" if trainset.mileage_km > MILEAGE_TARGET_KM else "below"
        risks.append(f"Mileage {trainset.mileage_km:.0f} km well {direction} balancing target")

    return {
        "top_reasons": reasons[:3],
        "top_risks": risks[:3],
    }


def build_decision(result: RankedResult, inducted: bool) -> TrainsetDecision:
    if result.blocked:
        decision = DecisionType.BLOCKED
    elif inducted:
        decision = DecisionType.INDUCT
    else:
        decision = DecisionType.STANDBY

    explanation = top_reasons_and_risks(result)
    return TrainsetDecision(
        trainset_id=result.trainset_id,
        rank=result.rank,
        decision=decision,
        display_score=result.display_score,
        top_reasons=explanation["top_reasons"],
        top_risks=explanation["top_risks"],
    )
