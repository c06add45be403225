# fleet_induction/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from dotenv import load_dotenv
from typing import Any, Dict, Optional
import logging
import os
import yaml
from pathlib import Path

from fleet_induction.core.scoring_config import DEFAULT_SERVICE_DEMAND, DEFAULT_WEIGHTS
from fleet_induction.models.trainset import WeightConfig

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # API Configuration
    api_host: str = Field(default="127.0.0.1")
    api_port: int = Field(default=8000)
    api_key: Optional[str] = Field(default=None, description="X-API-Key required by the planning API when set")
    environment: Optional[str] = None
    debug: bool = False
    log_level: str = Field(default="INFO")

    # Planning defaults
    default_service_demand: int = Field(default=DEFAULT_SERVICE_DEMAND, ge=0)
    plan_cache_size: int = Field(default=32, ge=0, description="Max memoized plans kept by PlanCache (0 disables)")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Eagerly load .env so values defined there are visible to os.getenv below
load_dotenv(".env")

# Load defaults from YAML if available
_defaults_path = Path(__file__).parent / "core" / "defaults.yaml"
_defaults: Dict[str, Any] = {}
if _defaults_path.exists():
    try:
        with open(_defaults_path, "r") as f:
            _defaults = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not load defaults.yaml: {e}")

settings = Settings()

# defaults.yaml only fills in what the environment left unset
if "DEFAULT_SERVICE_DEMAND" in _defaults and not os.getenv("DEFAULT_SERVICE_DEMAND"):
    settings.default_service_demand = int(_defaults["DEFAULT_SERVICE_DEMAND"])


def _configured_weights() -> WeightConfig:
    """Merge defaults.yaml weights over the built-in ones.

    Bad values (negative, non-numeric, NaN) raise pydantic.ValidationError.
    """
    weights: Dict[str, Any] = dict(DEFAULT_WEIGHTS)
    yaml_weights = _defaults.get("WEIGHTS") or {}
    if isinstance(yaml_weights, dict):
        for key, value in yaml_weights.items():
            if key in weights:
                weights[key] = value
            else:
                logger.warning(f"Ignoring unknown weight '{key}' in defaults.yaml")
    else:
        logger.warning("Ignoring WEIGHTS in defaults.yaml: expected a mapping")

    return WeightConfig.model_validate(weights)


def get_config() -> dict:
    """
    Lightweight config accessor for planning defaults.
    """
    return {
        "WEIGHTS": _configured_weights().model_dump(),
        "DEFAULT_SERVICE_DEMAND": settings.default_service_demand,
        "PLAN_CACHE_SIZE": settings.plan_cache_size,
    }


def default_weights() -> WeightConfig:
    """Default weight configuration built from defaults.yaml over the built-in values."""
    return _configured_weights()
