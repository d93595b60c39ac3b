import math

import numpy as np
import pytest

from portfolio_analytics.config import create_rng
from portfolio_analytics.exceptions import DegenerateInputError, InvalidParameterError
from portfolio_analytics.models import Asset, AssetClass
from portfolio_analytics.risk_management.correlation import CorrelationEngine, CorrelationMatrix
from portfolio_analytics.risk_management.volatility import (
    VolatilityDecomposer,
    volatility_band,
)


def test_bands_by_class_and_sector(tech_stock, bitcoin, bond_etf, gold_etf) -> None:
    assert (volatility_band(bitcoin).low, volatility_band(bitcoin).high) == (0.60, 1.00)
    assert volatility_band(tech_stock).midpoint == pytest.approx(0.35)
    assert volatility_band(bond_etf).midpoint == pytest.approx(0.055)
    assert volatility_band(gold_etf).midpoint == pytest.approx(0.225)

    other = Asset("KO", "Coca-Cola", AssetClass.STOCK, "Consumer")
    assert volatility_band(other).midpoint == pytest.approx(0.24)


def test_single_asset_has_no_diversification_benefit(bitcoin) -> None:
    correlation = CorrelationEngine().build([bitcoin])
    analysis = VolatilityDecomposer().decompose([bitcoin], {"BTC": 100.0}, correlation)

    assert analysis.portfolio_volatility == pytest.approx(80.0)
    assert analysis.portfolio_volatility == pytest.approx(analysis.asset_volatilities[0].volatility)
    assert analysis.diversification_benefit == pytest.approx(0.0, abs=1e-9)


def test_two_asset_quadratic_form() -> None:
    assets = [
        Asset("A", "A", AssetClass.STOCK, "Industrials"),
        Asset("B", "B", AssetClass.STOCK, "Utilities"),
    ]
    correlation = CorrelationMatrix(["A", "B"], np.array([[1.0, 0.5], [0.5, 1.0]]))
    analysis = VolatilityDecomposer().decompose(
        assets, {"A": 50.0, "B": 50.0}, correlation,
        volatility_overrides={"A": 0.2, "B": 0.3},
    )

    expected_vol = math.sqrt(0.25 * 0.04 + 0.25 * 0.09 + 2 * 0.25 * 0.2 * 0.3 * 0.5)
    assert analysis.portfolio_volatility == pytest.approx(expected_vol * 100)
    assert analysis.weighted_average_volatility == pytest.approx(25.0)
    assert analysis.diversification_benefit == pytest.approx(25.0 - expected_vol * 100)
    assert analysis.diversification_benefit > 0


def test_contributions_sum_to_100_and_are_sorted(sample_assets, sample_allocations) -> None:
    correlation = CorrelationEngine().build(sample_assets)
    analysis = VolatilityDecomposer().decompose(sample_assets, sample_allocations, correlation)

    contributions = [row.contribution_to_portfolio for row in analysis.asset_volatilities]
    assert sum(contributions) == pytest.approx(100.0)
    assert contributions == sorted(contributions, reverse=True)
    assert analysis.portfolio_volatility <= analysis.weighted_average_volatility


def test_seeded_sampling_is_reproducible_and_within_bands(sample_assets, sample_allocations) -> None:
    correlation = CorrelationEngine().build(sample_assets)
    first = VolatilityDecomposer(rng=create_rng(11)).decompose(
        sample_assets, sample_allocations, correlation
    )
    second = VolatilityDecomposer(rng=create_rng(11)).decompose(
        sample_assets, sample_allocations, correlation
    )

    assert first.to_dict() == second.to_dict()
    by_symbol = {row.symbol: row.volatility for row in first.asset_volatilities}
    assert 60.0 <= by_symbol["BTC"] <= 100.0
    assert 3.0 <= by_symbol["AGG"] <= 8.0


def test_empty_portfolio_is_neutral() -> None:
    analysis = VolatilityDecomposer().decompose([], {}, CorrelationEngine().build([]))
    assert analysis.portfolio_volatility == 0.0
    assert analysis.diversification_benefit == 0.0
    assert analysis.asset_volatilities == []


def test_mismatched_correlation_matrix(sample_assets, sample_allocations) -> None:
    correlation = CorrelationMatrix(["AAA"], np.eye(1))
    with pytest.raises(DegenerateInputError):
        VolatilityDecomposer().decompose(sample_assets, sample_allocations, correlation)


def test_negative_override_rejected(bitcoin) -> None:
    correlation = CorrelationEngine().build([bitcoin])
    with pytest.raises(InvalidParameterError):
        VolatilityDecomposer().decompose(
            [bitcoin], {"BTC": 100.0}, correlation, volatility_overrides={"BTC": -0.1}
        )
