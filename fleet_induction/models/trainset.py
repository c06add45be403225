from __future__ import annotations

from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from fleet_induction.core.scoring_config import DEFAULT_WEIGHTS


class TrainsetStatus(str, Enum):
    READY = "Ready"
    STANDBY = "Standby"
    IBL = "IBL"  # inspection bay line, lifted for maintenance


class StablingLocation(str, Enum):
    MAIN_DEPOT_A = "MAIN_DEPOT_A"
    MAIN_DEPOT_B = "MAIN_DEPOT_B"
    SATELLITE = "SATELLITE"


def parse_expiry(value: Any) -> Optional[datetime]:
    """Coerce a certificate expiry into an aware UTC datetime.

    Anything that is not a recognisable timestamp becomes None, which the
    eligibility classifier treats as an invalid certificate.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        cleaned = value.strip()
        if not cleaned:
            return None
        try:
            parsed = datetime.fromisoformat(cleaned.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


class _SnapshotModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


class FitnessCertificates(_SnapshotModel):
    """Expiry of the three department certificates (rolling-stock, signalling, telecom)."""
    rolling_stock_valid_till: Optional[datetime] = None
    signalling_valid_till: Optional[datetime] = None
    telecom_valid_till: Optional[datetime] = None

    @field_validator("rolling_stock_valid_till", "signalling_valid_till", "telecom_valid_till", mode="before")
    @classmethod
    def _coerce_expiry(cls, value: Any) -> Optional[datetime]:
        return parse_expiry(value)

    def expiries(self) -> dict[str, Optional[datetime]]:
        return {
            "rolling_stock": self.rolling_stock_valid_till,
            "signalling": self.signalling_valid_till,
            "telecom": self.telecom_valid_till,
        }


class Branding(_SnapshotModel):
    campaign: Optional[str] = None
    hours_committed: float = Field(0.0, ge=0.0, allow_inf_nan=False, description="Contractual exposure hours per week")
    hours_delivered: float = Field(0.0, ge=0.0, allow_inf_nan=False, description="Exposure hours achieved this period")

    @field_validator("campaign", mode="before")
    @classmethod
    def _blank_campaign_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def has_campaign(self) -> bool:
        return self.campaign is not None


class Trainset(_SnapshotModel):
    trainset_id: str = Field(alias="id", min_length=1)
    car_count: int = Field(4, gt=0)
    mileage_km: float = Field(0.0, ge=0.0, allow_inf_nan=False)
    last_service_km: float = Field(0.0, ge=0.0, allow_inf_nan=False)
    fitness: FitnessCertificates = Field(default_factory=FitnessCertificates)
    job_cards_open: int = Field(0, ge=0)
    branding: Branding = Field(default_factory=Branding)
    cleaning_due: bool = False
    stabled_at: StablingLocation
    bay: str = ""
    status: TrainsetStatus = TrainsetStatus.STANDBY

    @model_validator(mode="after")
    def validate_service_mileage(self):
        if self.last_service_km > self.mileage_km:
            raise ValueError(
                f"lastServiceKm ({self.last_service_km}) exceeds mileageKm ({self.mileage_km}) for {self.trainset_id}"
            )
        return self


class WeightConfig(BaseModel):
    """Operator weights for the six soft factors. Independent knobs; no need to sum to 1."""
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={"example": dict(DEFAULT_WEIGHTS)},
    )

    fitness: float = Field(DEFAULT_WEIGHTS["fitness"], ge=0.0, allow_inf_nan=False)
    jobs: float = Field(DEFAULT_WEIGHTS["jobs"], ge=0.0, allow_inf_nan=False)
    mileage: float = Field(DEFAULT_WEIGHTS["mileage"], ge=0.0, allow_inf_nan=False)
    branding: float = Field(DEFAULT_WEIGHTS["branding"], ge=0.0, allow_inf_nan=False)
    cleaning: float = Field(DEFAULT_WEIGHTS["cleaning"], ge=0.0, allow_inf_nan=False)
    stabling: float = Field(DEFAULT_WEIGHTS["stabling"], ge=0.0, allow_inf_nan=False)

    def without_branding(self) -> "WeightConfig":
        """Copy with the branding weight zeroed; the original is left untouched."""
        return self.model_copy(update={"branding": 0.0})
