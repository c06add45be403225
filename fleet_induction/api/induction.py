# fleet_induction/api/induction.py
from fastapi import APIRouter, Depends, HTTPException
from typing import Any, Dict, List, Optional
from datetime import datetime
import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from fleet_induction.config import default_weights, settings
from fleet_induction.models.plan import InductionPlan
from fleet_induction.models.trainset import WeightConfig
from fleet_induction.security import require_api_key
from fleet_induction.services.plan_cache import PlanCache
from fleet_induction.services.planner import plan_induction
from fleet_induction.utils.normalization import load_trainsets

router = APIRouter()
logger = logging.getLogger(__name__)

plan_cache = PlanCache(max_size=settings.plan_cache_size)


class PlanRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    trainsets: List[Dict[str, Any]] = Field(default_factory=list, description="Raw trainset snapshot records")
    weights: Optional[WeightConfig] = Field(default=None, description="Defaults from configuration when omitted")
    now: Optional[datetime] = Field(default=None, description="Planning instant; server time when omitted")
    service_demand: Optional[int] = Field(default=None, description="Units required at dawn")
    respect_branding: bool = True
    use_cache: bool = Field(default=False, description="Serve identical repeat requests from the plan cache")


def _validation_detail(e: ValidationError) -> List[Dict[str, Any]]:
    return [{"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]} for err in e.errors()]


def _configured_default_weights() -> WeightConfig:
    try:
        return default_weights()
    except ValidationError as e:
        logger.error(f"Invalid WEIGHTS in defaults.yaml: {e}")
        raise HTTPException(status_code=500, detail={"error": "Invalid weight configuration", "errors": _validation_detail(e)})


@router.post("/plan", response_model=InductionPlan)
async def run_plan(request: PlanRequest, _: bool = Depends(require_api_key)):
    """Rank the supplied fleet snapshot and select the induction set"""
    try:
        trainsets = load_trainsets(request.trainsets)
    except ValidationError as e:
        logger.warning(f"Rejected planning snapshot: {e.error_count()} validation errors")
        raise HTTPException(status_code=422, detail=_validation_detail(e))

    weights = request.weights if request.weights is not None else _configured_default_weights()
    now = request.now if request.now is not None else datetime.now().astimezone()
    demand = request.service_demand if request.service_demand is not None else settings.default_service_demand

    if request.use_cache:
        return plan_cache.get_or_compute(trainsets, weights, now, demand, request.respect_branding)
    return plan_induction(trainsets, weights, now, demand, request.respect_branding)


@router.get("/weights/default", response_model=WeightConfig)
async def get_default_weights():
    """Configured default weights"""
    return _configured_default_weights()


@router.post("/cache/invalidate")
async def invalidate_plan_cache(_: bool = Depends(require_api_key)):
    """Drop every memoized plan"""
    plan_cache.invalidate()
    return {"status": "invalidated"}
