from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from fleet_induction.models.trainset import Trainset, WeightConfig


class _PlanModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


class EligibilityVerdict(_PlanModel):
    """Hard fitness gate result for one trainset."""
    blocked: bool
    min_certificate_days_remaining: Optional[int] = Field(
        None, description="Days left on the tightest certificate; None when an expiry is missing or malformed"
    )
    certificate_days_remaining: Dict[str, Optional[int]] = Field(default_factory=dict)


class SubScores(_PlanModel):
    """The six soft factors, each clamped to [0, 1] before weighting."""
    fitness: float = Field(ge=0.0, le=1.0)
    jobs: float = Field(ge=0.0, le=1.0)
    mileage: float = Field(ge=0.0, le=1.0)
    branding: float = Field(ge=0.0, le=1.0)
    cleaning: float = Field(ge=0.0, le=1.0)
    stabling: float = Field(ge=0.0, le=1.0)


class Scored(_PlanModel):
    kind: Literal["scored"] = "scored"
    value: float


class Blocked(_PlanModel):
    kind: Literal["blocked"] = "blocked"


# Blocked entries carry no number at all, so nothing can do arithmetic on them
ScoreVariant = Annotated[Union[Scored, Blocked], Field(discriminator="kind")]


class RankedResult(_PlanModel):
    trainset: Trainset
    score: ScoreVariant
    eligibility: EligibilityVerdict
    sub_scores: Optional[SubScores] = None
    rank: int = Field(ge=1, description="1-based position in the full ordering")

    @computed_field
    @property
    def blocked(self) -> bool:
        return isinstance(self.score, Blocked)

    @computed_field
    @property
    def display_score(self) -> str:
        if isinstance(self.score, Blocked):
            return "BLOCKED"
        return f"{self.score.value:.3f}"

    @property
    def trainset_id(self) -> str:
        return self.trainset.trainset_id


class AlertSeverity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class AlertKind(str, Enum):
    TELECOM_EXPIRY = "TELECOM_EXPIRY"
    JOB_CARD_OVERLOAD = "JOB_CARD_OVERLOAD"
    CLEANING_DUE = "CLEANING_DUE"


class Alert(_PlanModel):
    trainset_id: str
    severity: AlertSeverity
    kind: AlertKind
    message: str


class DecisionType(str, Enum):
    INDUCT = "INDUCT"
    STANDBY = "STANDBY"
    BLOCKED = "BLOCKED"


class TrainsetDecision(_PlanModel):
    trainset_id: str
    rank: int
    decision: DecisionType
    display_score: str
    top_reasons: List[str] = Field(default_factory=list, description="Top 3 contributing positive reasons")
    top_risks: List[str] = Field(default_factory=list, description="Top 3 negative reasons")


class InductionPlan(_PlanModel):
    """Complete, independently owned output of one planning run."""
    planned_at: datetime
    service_demand: int = Field(description="Demand as requested by the caller")
    effective_service_demand: int = Field(description="Demand clamped to [0, eligible count]")
    respect_branding: bool
    effective_weights: WeightConfig
    ranked: List[RankedResult] = Field(default_factory=list)
    induction_set_ids: List[str] = Field(default_factory=list, description="Inducted trainset ids in rank order")
    decisions: List[TrainsetDecision] = Field(default_factory=list)
    alerts: List[Alert] = Field(default_factory=list)
    branding_compliance_percent: int = 100
    shunting_cost_estimate: int = 0
    ready_count: int = 0
    induction_shortfall: int = 0

    def is_inducted(self, trainset_id: str) -> bool:
        return trainset_id in self.induction_set_ids

    @property
    def induction_set(self) -> List[RankedResult]:
        selected = set(self.induction_set_ids)
        return [r for r in self.ranked if r.trainset_id in selected]
