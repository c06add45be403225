# Fleet induction planning: fitness gate, soft-factor scoring, ranking and derived metrics
__version__ = "1.0.0"

from fleet_induction.models.plan import Alert, InductionPlan, RankedResult
from fleet_induction.models.trainset import Trainset, WeightConfig
from fleet_induction.services.planner import plan_induction

__all__ = [
    "Alert",
    "InductionPlan",
    "RankedResult",
    "Trainset",
    "WeightConfig",
    "plan_induction",
]
