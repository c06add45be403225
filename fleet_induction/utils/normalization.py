# fleet_induction/utils/normalization.py
import logging
import math
from typing import Any, Dict, Iterable, List, Optional

from fleet_induction.models.trainset import Trainset

logger = logging.getLogger(__name__)

# (snake_case, camelCase) pairs for numeric fields that upstream exports often send as strings
_INT_FIELDS = [("car_count", "carCount"), ("job_cards_open", "jobCardsOpen")]
_FLOAT_FIELDS = [("mileage_km", "mileageKm"), ("last_service_km", "lastServiceKm")]
_BRANDING_FLOAT_FIELDS = [("hours_committed", "hoursCommitted"), ("hours_delivered", "hoursDelivered")]


def _parse_numeric_string(value: str) -> Optional[float]:
    cleaned = value.strip()
    if not cleaned:
        return None
    try:
        parsed = float(cleaned)
    except ValueError:
        return None
    return parsed if math.isfinite(parsed) else None


def normalize_to_int(value: Any) -> Any:
    """Convert clean integral strings like "2" or "2.0" to int.

    Anything else is returned unchanged so model validation rejects it
    instead of silently defaulting.
    """
    if not isinstance(value, str):
        return value
    parsed = _parse_numeric_string(value)
    if parsed is None or not parsed.is_integer():
        return value
    return int(parsed)


def normalize_to_float(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    parsed = _parse_numeric_string(value)
    return value if parsed is None else parsed


def _normalize_fields(data: Dict[str, Any], fields, normalizer) -> None:
    for snake, camel in fields:
        for key in (snake, camel):
            if key in data:
                data[key] = normalizer(data[key])


def normalize_trainset_record(record: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize a raw snapshot record to the types Trainset expects. Input is not mutated."""
    normalized = dict(record)
    _normalize_fields(normalized, _INT_FIELDS, normalize_to_int)
    _normalize_fields(normalized, _FLOAT_FIELDS, normalize_to_float)

    branding = normalized.get("branding")
    if isinstance(branding, dict):
        branding = dict(branding)
        _normalize_fields(branding, _BRANDING_FLOAT_FIELDS, normalize_to_float)
        normalized["branding"] = branding
    elif branding is not None:
        logger.warning(f"Ignoring malformed branding block on {record.get('id') or record.get('trainset_id')}")
        normalized.pop("branding")

    return normalized


def load_trainsets(records: Iterable[Dict[str, Any]]) -> List[Trainset]:
    """Build a planning snapshot from raw records.

    Duplicate ids keep the first record. Records that still fail validation
    raise pydantic.ValidationError.
    """
    trainsets: List[Trainset] = []
    seen = set()
    duplicates = 0
    for record in records:
        trainset = Trainset.model_validate(normalize_trainset_record(record))
        if trainset.trainset_id in seen:
            duplicates += 1
            continue
        seen.add(trainset.trainset_id)
        trainsets.append(trainset)

    if duplicates:
        logger.warning(f"Removed {duplicates} duplicate trainset records")
    logger.info(f"Loaded {len(trainsets)} trainsets into planning snapshot")
    return trainsets
