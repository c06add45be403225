import pytest
from fastapi.testclient import TestClient

from fleet_induction import config as config_module
from fleet_induction.api import induction
from fleet_induction.config import settings
from fleet_induction.main import app

client = TestClient(app)

PLANNING_INSTANT = "2025-01-15T20:00:00+00:00"


def _record(trainset_id: str, **overrides):
    record = {
        "id": trainset_id,
        "carCount": 4,
        "mileageKm": 36000,
        "lastServiceKm": 34000,
        "fitness": {
            "rollingStockValidTill": "2025-02-10T00:00:00Z",
            "signallingValidTill": "2025-02-10T00:00:00Z",
            "telecomValidTill": "2025-02-10T00:00:00Z",
        },
        "jobCardsOpen": 0,
        "branding": {"campaign": None, "hoursCommitted": 0, "hoursDelivered": 0},
        "cleaningDue": False,
        "stabledAt": "MAIN_DEPOT_A",
        "bay": "A1",
        "status": "Ready",
    }
    record.update(overrides)
    return record


def _payload(**overrides):
    payload = {
        "trainsets": [
            _record("KMRL-TS-01"),
            _record("KMRL-TS-02", jobCardsOpen=2, stabledAt="SATELLITE"),
            _record("KMRL-TS-03", fitness={"telecomValidTill": "2025-01-10T00:00:00Z"}),
        ],
        "now": PLANNING_INSTANT,
        "serviceDemand": 2,
    }
    payload.update(overrides)
    return payload


@pytest.fixture(autouse=True)
def _fresh_cache():
    induction.plan_cache.invalidate()
    yield
    induction.plan_cache.invalidate()


def test_root_and_health():
    root = client.get("/")
    assert root.status_code == 200
    assert root.json()["message"] == "Fleet Induction Planner API"

    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["status"] == "healthy"


def test_default_weights_endpoint():
    response = client.get("/api/induction/weights/default")

    assert response.status_code == 200
    data = response.json()
    assert data["fitness"] == pytest.approx(0.35)
    assert data["jobs"] == pytest.approx(0.2)
    assert data["branding"] == pytest.approx(0.1)


def test_plan_endpoint_returns_ranked_plan():
    response = client.post("/api/induction/plan", json=_payload())

    assert response.status_code == 200
    data = response.json()
    for key in ("ranked", "inductionSetIds", "brandingCompliancePercent", "shuntingCostEstimate", "alerts", "decisions"):
        assert key in data

    assert [r["trainset"]["id"] for r in data["ranked"]] == ["KMRL-TS-01", "KMRL-TS-02", "KMRL-TS-03"]
    assert data["ranked"][-1]["displayScore"] == "BLOCKED"
    assert data["ranked"][-1]["score"]["kind"] == "blocked"
    assert data["ranked"][0]["score"]["kind"] == "scored"
    assert data["inductionSetIds"] == ["KMRL-TS-01", "KMRL-TS-02"]
    assert data["brandingCompliancePercent"] == 100
    # (1 + 3) * 1.4 = 5.6
    assert data["shuntingCostEstimate"] == 6


def test_plan_endpoint_uses_configured_demand_when_omitted():
    payload = _payload()
    payload.pop("serviceDemand")

    data = client.post("/api/induction/plan", json=payload).json()

    assert data["serviceDemand"] == settings.default_service_demand
    assert data["inductionShortfall"] == settings.default_service_demand - 2


def test_negative_weight_is_rejected():
    weights = {"fitness": 0.35, "jobs": -0.2, "mileage": 0.15, "branding": 0.1, "cleaning": 0.1, "stabling": 0.1}

    response = client.post("/api/induction/plan", json=_payload(weights=weights))

    assert response.status_code == 422


def test_inconsistent_mileage_record_is_rejected():
    payload = _payload(trainsets=[_record("KMRL-TS-01", mileageKm=1000, lastServiceKm=2000)])

    response = client.post("/api/induction/plan", json=payload)

    assert response.status_code == 422
    assert isinstance(response.json()["detail"], list)


def test_api_key_is_enforced_when_configured(monkeypatch):
    monkeypatch.setattr(settings, "api_key", "depot-secret")

    assert client.post("/api/induction/plan", json=_payload()).status_code == 401
    ok = client.post("/api/induction/plan", json=_payload(), headers={"X-API-Key": "depot-secret"})
    assert ok.status_code == 200


def test_repeat_request_served_from_cache():
    hits_before = induction.plan_cache.hits
    first = client.post("/api/induction/plan", json=_payload(useCache=True))
    second = client.post("/api/induction/plan", json=_payload(useCache=True))

    assert first.status_code == second.status_code == 200
    assert first.json() == second.json()
    assert induction.plan_cache.hits == hits_before + 1

    assert client.post("/api/induction/cache/invalidate").json() == {"status": "invalidated"}
    assert len(induction.plan_cache) == 0


def test_unreadable_job_card_count_is_rejected():
    payload = _payload(trainsets=[_record("KMRL-TS-01", jobCardsOpen="five")])

    response = client.post("/api/induction/plan", json=payload)

    assert response.status_code == 422
    assert any("jobCardsOpen" in err["loc"] for err in response.json()["detail"])


def test_bad_configured_weights_report_configuration_error(monkeypatch):
    monkeypatch.setattr(config_module, "_defaults", {"WEIGHTS": {"jobs": "heavy"}})

    response = client.post("/api/induction/plan", json=_payload())

    assert response.status_code == 500
    assert response.json()["detail"]["error"] == "Invalid weight configuration"
