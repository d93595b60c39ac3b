from datetime import date, timedelta

import pytest

from portfolio_analytics.config import AnalyticsConfig
from portfolio_analytics.models import ValuePoint
from portfolio_analytics.performance import PerformanceAnalyzer
from portfolio_analytics.risk_management import RiskEngine, RiskRating


@pytest.fixture
def engine():
    return RiskEngine(AnalyticsConfig(simulations=2_000, random_seed=99))


def test_full_risk_report(engine, sample_assets, sample_allocations) -> None:
    report = engine.calculate_all_metrics(sample_assets, sample_allocations, 500_000)

    assert report.correlation.size == 7
    assert len(report.value_at_risk) == 2
    assert report.value_at_risk[0].simulations == 2_000
    assert len(report.stress_test.scenarios) == 5
    assert isinstance(report.stress_test.risk_rating, RiskRating)
    assert 0 < report.diversification.herfindahl_index < 1

    data = report.to_dict()
    assert set(data) == {
        "correlation", "volatility", "value_at_risk", "stress_test",
        "diversification", "portfolio_value", "timestamp",
    }


def test_configured_seed_makes_var_reproducible(engine, tech_crypto_portfolio) -> None:
    assets, allocations = tech_crypto_portfolio

    first = engine.calculate_var(assets, allocations, 100_000)
    second = engine.calculate_var(assets, allocations, 100_000)
    other = engine.calculate_var(assets, allocations, 100_000, seed=1)

    assert [r.var_1day for r in first] == [r.var_1day for r in second]
    assert first[0].var_1day != other[0].var_1day


def test_var_overrides(engine, tech_crypto_portfolio) -> None:
    assets, allocations = tech_crypto_portfolio
    results = engine.calculate_var(
        assets, allocations, 100_000,
        simulations=500, confidence_levels=[0.9], coupling="cholesky"
    )

    assert len(results) == 1
    assert results[0].confidence == 0.9
    assert results[0].simulations == 500


def test_performance_analyzer_report() -> None:
    start = date(2025, 1, 1)
    values = [10_000, 10_200, 10_100, 9_800, 10_400, 10_600, 10_500, 10_900]
    bench = [100, 101, 100.5, 99, 102, 103, 103.5, 104]
    portfolio = [ValuePoint(start + timedelta(days=i), v, 10_000) for i, v in enumerate(values)]
    benchmark = [ValuePoint(start + timedelta(days=i), v) for i, v in enumerate(bench)]

    report = PerformanceAnalyzer().analyze(portfolio, benchmark, as_of=date(2025, 1, 31))

    assert report.metrics.observations == 7
    assert [p.period for p in report.periods] == ["2025Q1", "2025"]
    assert report.portfolio_summary.total_return == pytest.approx(9.0)
    assert report.benchmark_summary.total_return == pytest.approx(4.0)
    assert len(report.drawdowns) == 1
    assert report.drawdowns[0].recovered
