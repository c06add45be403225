"""Unit tests for the fitness-certificate gate"""
from datetime import datetime, timedelta, timezone

import pytest

from fleet_induction.models.trainset import FitnessCertificates, StablingLocation, Trainset
from fleet_induction.services.eligibility import classify, days_remaining

NOW = datetime(2025, 1, 15, 20, 0, tzinfo=timezone.utc)


def _make_trainset(rolling_stock=20, signalling=20, telecom=20, **overrides) -> Trainset:
    def expiry(offset):
        if offset is None or isinstance(offset, str):
            return offset
        return NOW + timedelta(days=offset)

    fields = {
        "trainset_id": "KMRL-TS-01",
        "stabled_at": StablingLocation.MAIN_DEPOT_A,
        "mileage_km": 36000,
        "last_service_km": 34000,
        "fitness": FitnessCertificates(
            rolling_stock_valid_till=expiry(rolling_stock),
            signalling_valid_till=expiry(signalling),
            telecom_valid_till=expiry(telecom),
        ),
    }
    fields.update(overrides)
    return Trainset(**fields)


def test_days_remaining_rounds_up_partial_days():
    assert days_remaining(NOW + timedelta(hours=1), NOW) == 1
    assert days_remaining(NOW + timedelta(days=1), NOW) == 1
    assert days_remaining(NOW + timedelta(days=1, hours=1), NOW) == 2


def test_days_remaining_unknown_expiry_is_none():
    assert days_remaining(None, NOW) is None


def test_all_certificates_valid_passes():
    verdict = classify(_make_trainset(rolling_stock=12, signalling=5, telecom=30), NOW)

    assert verdict.blocked is False
    assert verdict.min_certificate_days_remaining == 5
    assert verdict.certificate_days_remaining == {"rolling_stock": 12, "signalling": 5, "telecom": 30}


@pytest.mark.parametrize("department", ["rolling_stock", "signalling", "telecom"])
def test_any_expired_certificate_blocks(department):
    trainset = _make_trainset(**{department: -1})

    verdict = classify(trainset, NOW)

    assert verdict.blocked is True
    assert verdict.min_certificate_days_remaining == -1


def test_certificate_expiring_exactly_now_is_blocked():
    verdict = classify(_make_trainset(telecom=0), NOW)

    assert verdict.min_certificate_days_remaining == 0
    assert verdict.blocked is True


def test_certificate_expired_within_the_last_day_is_blocked():
    trainset = _make_trainset()
    trainset = trainset.model_copy(update={
        "fitness": trainset.fitness.model_copy(update={"telecom_valid_till": NOW - timedelta(hours=1)})
    })

    assert classify(trainset, NOW).blocked is True


def test_certificate_one_hour_out_is_still_valid():
    trainset = _make_trainset()
    trainset = trainset.model_copy(update={
        "fitness": trainset.fitness.model_copy(update={"telecom_valid_till": NOW + timedelta(hours=1)})
    })

    verdict = classify(trainset, NOW)
    assert verdict.blocked is False
    assert verdict.min_certificate_days_remaining == 1


def test_missing_certificate_is_blocked():
    verdict = classify(_make_trainset(signalling=None), NOW)

    assert verdict.blocked is True
    assert verdict.min_certificate_days_remaining is None
    assert verdict.certificate_days_remaining["signalling"] is None


def test_malformed_certificate_date_is_blocked_not_raised():
    trainset = _make_trainset(telecom="not-a-date")

    assert trainset.fitness.telecom_valid_till is None
    assert classify(trainset, NOW).blocked is True


def test_naive_now_is_treated_as_utc():
    naive_now = NOW.replace(tzinfo=None)

    verdict = classify(_make_trainset(telecom=3), naive_now)

    assert verdict.blocked is False
    assert verdict.min_certificate_days_remaining == 3


def test_operational_status_does_not_gate_eligibility():
    trainset = _make_trainset(status="IBL")

    assert classify(trainset, NOW).blocked is False
