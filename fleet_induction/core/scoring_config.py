# fleet_induction/core/scoring_config.py

# Centralized scoring constants for nightly induction planning.
# Shared by the scorer, the ranking engine, the derived metrics and the explainability utils.
from datetime import timedelta

# Default operator weights (tunable per run via WeightConfig)
DEFAULT_WEIGHTS = {
    "fitness": 0.35,
    "jobs": 0.2,
    "mileage": 0.15,
    "branding": 0.1,
    "cleaning": 0.1,
    "stabling": 0.1,
}

DEFAULT_SERVICE_DEMAND = 18  # rakes required at dawn

# Fitness: saturates once the tightest certificate has this many days left
FITNESS_SATURATION_DAYS = 10.0

# Job-cards: three or more open cards zero the sub-score
JOB_CARD_SATURATION = 3.0

# Mileage balancing: peak at the wear-levelling target, linear decay over the band
MILEAGE_TARGET_KM = 36000.0
MILEAGE_TOLERANCE_KM = 20000.0

# Branding: neutral value for units without a campaign
BRANDING_NEUTRAL_SCORE = 0.3

# Cleaning: flat penalty, not a gradient
CLEANING_DUE_SCORE = 0.4
CLEANING_CLEAR_SCORE = 1.0

# Stabling geometry proxy (higher = less shunting to reach service tracks)
STABLING_SCORES = {
    "MAIN_DEPOT_A": 1.0,
    "MAIN_DEPOT_B": 0.85,
    "SATELLITE": 0.7,
}

# Shunting cost proxy per inducted unit
SHUNTING_UNIT_COST = {
    "MAIN_DEPOT_A": 1,
    "MAIN_DEPOT_B": 2,
    "SATELLITE": 3,
}
SHUNTING_COST_MULTIPLIER = 1.4

# Alerts
TELECOM_ALERT_WINDOW = timedelta(hours=48)
JOB_CARD_ALERT_THRESHOLD = 3
ALERT_FEED_LIMIT = 6

# Branding compliance floor: delivered >= min(committed, 1 hour)
BRANDING_DELIVERY_FLOOR_HOURS = 1.0
