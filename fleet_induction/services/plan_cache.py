# fleet_induction/services/plan_cache.py
import hashlib
import json
import logging
import threading
from collections import OrderedDict
from datetime import datetime
from typing import Any, Optional, Sequence

from fleet_induction.models.plan import InductionPlan
from fleet_induction.models.trainset import Trainset, WeightConfig
from fleet_induction.services.eligibility import ensure_utc
from fleet_induction.services.planner import plan_induction

logger = logging.getLogger(__name__)


def generate_cache_key(prefix: str, **kwargs: Any) -> str:
    """Stable key from parameters; None values are skipped."""
    key_parts = [prefix]
    for key, value in sorted(kwargs.items()):
        if value is not None:
            key_parts.append(f"{key}:{value}")
    return ":".join(key_parts)


def snapshot_fingerprint(trainsets: Sequence[Trainset]) -> str:
    payload = json.dumps([t.model_dump(mode="json") for t in trainsets], sort_keys=True, default=str)
    return hashlib.sha256(payload.encode()).hexdigest()


class PlanCache:
    """Opt-in LRU memoization of planning runs keyed by the full parameter tuple.

    Entries are never patched. Callers always receive a deep copy, so no two
    consumers share a plan instance. Call invalidate() when the snapshot source
    changes.
    """

    def __init__(self, max_size: int = 32):
        self.max_size = max_size
        self._plans: "OrderedDict[str, InductionPlan]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def key_for(
        self,
        trainsets: Sequence[Trainset],
        weights: WeightConfig,
        now: datetime,
        service_demand: int,
        respect_branding: bool,
    ) -> str:
        return generate_cache_key(
            "plan",
            snapshot=snapshot_fingerprint(trainsets),
            weights=json.dumps(weights.model_dump(), sort_keys=True),
            now=ensure_utc(now).isoformat(),
            demand=service_demand,
            branding=respect_branding,
        )

    def get(self, key: str) -> Optional[InductionPlan]:
        with self._lock:
            plan = self._lookup(key)
            return None if plan is None else plan.model_copy(deep=True)

    def _lookup(self, key: str) -> Optional[InductionPlan]:
        plan = self._plans.get(key)
        if plan is not None:
            self._plans.move_to_end(key)
        return plan

    def get_or_compute(
        self,
        trainsets: Sequence[Trainset],
        weights: WeightConfig,
        now: datetime,
        service_demand: int,
        respect_branding: bool = True,
    ) -> InductionPlan:
        key = self.key_for(trainsets, weights, now, service_demand, respect_branding)
        with self._lock:
            cached = self._lookup(key)
            if cached is not None:
                self.hits += 1
                logger.debug(f"Plan cache hit ({len(self._plans)} cached)")
                return cached.model_copy(deep=True)
            self.misses += 1

        plan = plan_induction(trainsets, weights, now, service_demand, respect_branding)
        if self.max_size > 0:
            with self._lock:
                self._plans[key] = plan
                self._plans.move_to_end(key)
                while len(self._plans) > self.max_size:
                    self._plans.popitem(last=False)
        return plan.model_copy(deep=True)

    def invalidate(self) -> None:
        with self._lock:
            dropped = len(self._plans)
            self._plans.clear()
        logger.info(f"Plan cache invalidated ({dropped} plans dropped)")

    def __len__(self) -> int:
        with self._lock:
            return len(self._plans)
