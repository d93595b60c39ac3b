import pytest
from fastapi.testclient import TestClient

from api.main import app

ASSETS = [
    {"symbol": "AAA", "name": "Alpha Tech", "asset_class": "stock", "sector": "Technology"},
    {"symbol": "BTC", "name": "Bitcoin", "asset_class": "crypto", "sector": "Cryptocurrency"},
]
ALLOCATIONS = {"AAA": 50, "BTC": 50}


@pytest.fixture(scope="module")
def client():
    with TestClient(app) as test_client:
        yield test_client


def _series(values, start_day=2):
    return [
        {"date": f"2025-01-{start_day + i:02d}", "value": v}
        for i, v in enumerate(values)
    ]


def test_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_scenario_catalog(client) -> None:
    scenarios = client.get("/api/risk/scenarios").json()["scenarios"]
    assert len(scenarios) == 5
    assert scenarios[0]["key"] == "global_financial_crisis"


def test_correlation(client) -> None:
    response = client.post("/api/risk/correlation", json={"assets": ASSETS, "allocations": ALLOCATIONS})
    data = response.json()

    assert response.status_code == 200
    assert data["assets"] == ["AAA", "BTC"]
    assert data["correlations"][0][1] == data["correlations"][1][0]


def test_volatility(client) -> None:
    response = client.post("/api/risk/volatility", json={
        "assets": ASSETS,
        "allocations": ALLOCATIONS,
        "volatility_overrides": {"AAA": 0.3, "BTC": 0.8},
    })
    data = response.json()

    assert response.status_code == 200
    assert data["weighted_average_volatility"] == pytest.approx(55.0)
    assert data["diversification_benefit"] > 0


def test_var_is_reproducible_with_seed(client) -> None:
    payload = {
        "assets": ASSETS,
        "allocations": ALLOCATIONS,
        "portfolio_value": 100_000,
        "simulations": 2_000,
        "seed": 11,
    }
    first = client.post("/api/risk/var", json=payload).json()["results"]
    second = client.post("/api/risk/var", json=payload).json()["results"]

    assert [r["var_1day"] for r in first] == [r["var_1day"] for r in second]
    assert [r["confidence"] for r in first] == [0.95, 0.99]


def test_stress_test(client) -> None:
    response = client.post("/api/risk/stress-test", json={
        "assets": ASSETS,
        "allocations": ALLOCATIONS,
        "portfolio_value": 100_000,
    })
    data = response.json()

    assert response.status_code == 200
    assert data["scenarios"][0]["result"] == pytest.approx(-62_500)
    assert data["risk_rating"] == "Very High"


def test_unknown_scenario_is_rejected(client) -> None:
    response = client.post("/api/risk/stress-test", json={
        "assets": ASSETS,
        "allocations": ALLOCATIONS,
        "portfolio_value": 100_000,
        "scenarios": ["alien_invasion"],
    })
    assert response.status_code == 422
    assert response.json()["detail"]["kind"] == "invalid_parameter"


def test_non_positive_value_fails_validation(client) -> None:
    response = client.post("/api/risk/stress-test", json={
        "assets": ASSETS,
        "allocations": ALLOCATIONS,
        "portfolio_value": 0,
    })
    assert response.status_code == 422


def test_diversification_errors_carry_kind(client) -> None:
    response = client.post("/api/risk/diversification", json={
        "assets": ASSETS,
        "allocations": {"AAA": 0, "BTC": 0},
    })
    assert response.status_code == 422
    assert response.json()["detail"]["kind"] == "insufficient_data"


def test_risk_report(client) -> None:
    response = client.post("/api/risk/report", json={
        "assets": ASSETS,
        "allocations": ALLOCATIONS,
        "portfolio_value": 100_000,
        "simulations": 1_000,
    })
    assert response.status_code == 200
    assert response.json()["diversification"]["concentration_risk"] == "High"


def test_performance_metrics(client) -> None:
    response = client.post("/api/performance/metrics", json={
        "portfolio_returns": [0.01, -0.02, 0.015, -0.005, 0.02],
        "benchmark_returns": [0.005, -0.01, 0.01, 0.0, 0.012],
    })
    data = response.json()

    assert response.status_code == 200
    assert data["win_rate"] == pytest.approx(60.0)
    assert data["profit_factor"] == pytest.approx(1.8)


def test_performance_metrics_length_mismatch(client) -> None:
    response = client.post("/api/performance/metrics", json={
        "portfolio_returns": [0.01, 0.02, 0.03],
        "benchmark_returns": [0.01, 0.02],
    })
    assert response.status_code == 422
    assert response.json()["detail"]["kind"] == "invalid_parameter"


def test_drawdowns(client) -> None:
    response = client.post("/api/performance/drawdowns", json={
        "series": _series([100, 95, 97, 101, 100.5, 90, 92]),
    })
    drawdowns = response.json()["drawdowns"]

    assert len(drawdowns) == 2
    assert drawdowns[0]["recovered"] is False


def test_summary(client) -> None:
    response = client.post("/api/performance/summary", json={"series": _series([100, 110, 99])})
    assert response.status_code == 200
    assert response.json()["total_return"] == pytest.approx(-1.0)


def test_periods_and_report(client) -> None:
    payload = {
        "portfolio": _series([1000, 1010, 990, 1030]),
        "benchmark": _series([100, 100.5, 99.5, 101]),
        "as_of": "2025-03-31",
    }
    periods = client.post("/api/performance/periods", json=payload).json()["periods"]
    assert [p["period"] for p in periods] == ["2025Q1", "2025"]

    report = client.post("/api/performance/report", json=payload)
    assert report.status_code == 200
    assert report.json()["metrics"]["observations"] == 3
