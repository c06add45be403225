# fleet_induction/services/eligibility.py
import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from fleet_induction.models.plan import EligibilityVerdict
from fleet_induction.models.trainset import Trainset

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


def ensure_utc(moment: datetime) -> datetime:
    """Treat naive timestamps as UTC so they compare with certificate expiries."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def days_remaining(expiry: Optional[datetime], now: datetime) -> Optional[int]:
    """Whole days until expiry, rounded up. None when the expiry is unknown."""
    if expiry is None:
        return None
    return math.ceil((ensure_utc(expiry) - ensure_utc(now)) / ONE_DAY)


def classify(trainset: Trainset, now: datetime) -> EligibilityVerdict:
    """Hard fitness gate.

    Blocked when any certificate is missing/malformed or the tightest one has
    <= 0 days left. A certificate expiring in exactly 0 days counts as expired.
    No weight can override this.
    """
    per_certificate: Dict[str, Optional[int]] = {
        name: days_remaining(expiry, now) for name, expiry in trainset.fitness.expiries().items()
    }

    if any(days is None for days in per_certificate.values()):
        logger.warning(f"{trainset.trainset_id}: missing or malformed fitness certificate expiry, blocking")
        return EligibilityVerdict(
            blocked=True,
            min_certificate_days_remaining=None,
            certificate_days_remaining=per_certificate,
        )

    min_days = min(per_certificate.values())
    blocked = min_days <= 0
    if blocked:
        logger.debug(f"{trainset.trainset_id}: fitness certificate expired ({min_days} days), blocking")

    return EligibilityVerdict(
        blocked=blocked,
        min_certificate_days_remaining=min_days,
        certificate_days_remaining=per_certificate,
    )
