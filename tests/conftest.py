"""
Shared pytest fixtures for the portfolio analytics test suite.

Provides:
- Sample assets across classes and sectors
- Allocation maps
- Value series builders
"""

from datetime import date, timedelta
from typing import List, Optional, Sequence

import pytest

from portfolio_analytics.models import Asset, AssetClass, ValuePoint


def build_series(
    values: Sequence[float],
    start: date = date(2025, 1, 1),
    contributions: Optional[Sequence[float]] = None
) -> List[ValuePoint]:
    """Daily value series starting at `start`"""
    points = []
    for i, value in enumerate(values):
        contributed = contributions[i] if contributions is not None else None
        points.append(ValuePoint(start + timedelta(days=i), value, contributed))
    return points


@pytest.fixture
def tech_stock() -> Asset:
    return Asset("AAA", "Alpha Tech", AssetClass.STOCK, "Technology")


@pytest.fixture
def bitcoin() -> Asset:
    return Asset("BTC", "Bitcoin", AssetClass.CRYPTO, "Cryptocurrency")


@pytest.fixture
def bond_etf() -> Asset:
    return Asset("AGG", "Aggregate Bond ETF", AssetClass.ETF, "Bonds")


@pytest.fixture
def gold_etf() -> Asset:
    return Asset("GLD", "Gold Trust", AssetClass.ETF, "Precious Metals")


@pytest.fixture
def sample_assets(tech_stock, bitcoin, bond_etf, gold_etf) -> List[Asset]:
    return [
        tech_stock,
        Asset("MSFT", "Microsoft", AssetClass.STOCK, "Technology"),
        bitcoin,
        Asset("ETH", "Ethereum", AssetClass.CRYPTO, "Smart Contracts"),
        bond_etf,
        gold_etf,
        Asset("SPX", "S&P 500", AssetClass.INDEX, "Broad Market"),
    ]


@pytest.fixture
def sample_allocations():
    return {
        "AAA": 20.0,
        "MSFT": 15.0,
        "BTC": 10.0,
        "ETH": 5.0,
        "AGG": 25.0,
        "GLD": 10.0,
        "SPX": 15.0,
    }


@pytest.fixture
def tech_crypto_portfolio(tech_stock, bitcoin):
    """AAA / BTC at 50% each"""
    return [tech_stock, bitcoin], {"AAA": 50.0, "BTC": 50.0}


@pytest.fixture
def make_series():
    return build_series
