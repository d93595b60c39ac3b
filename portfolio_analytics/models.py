"""
Portfolio Data Model
Assets, allocation weights and value series shared by all engines
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from .exceptions import DegenerateInputError


class AssetClass(Enum):
    STOCK = "stock"
    CRYPTO = "crypto"
    ETF = "etf"
    INDEX = "index"


@dataclass(frozen=True)
class Asset:
    """Immutable asset metadata"""
    symbol: str
    name: str
    asset_class: AssetClass = AssetClass.STOCK
    sector: str = ""
    currency: str = "USD"

    @property
    def is_crypto(self) -> bool:
        return self.asset_class == AssetClass.CRYPTO

    def to_dict(self) -> Dict[str, str]:
        return {
            "symbol": self.symbol,
            "name": self.name,
            "asset_class": self.asset_class.value,
            "sector": self.sector,
            "currency": self.currency,
        }


# symbol -> weight percentage (0-100)
AllocationWeights = Dict[str, float]


@dataclass(frozen=True)
class ValuePoint:
    """One observation of a value series"""
    date: date
    value: float
    cumulative_contributed: Optional[float] = None


ValueSeries = List[ValuePoint]


def weight_vector(assets: Sequence[Asset], allocations: AllocationWeights) -> np.ndarray:
    """
    Allocation fractions aligned with the asset order.

    Symbols missing from the allocation map carry zero weight.
    """
    weights = np.array([float(allocations.get(a.symbol, 0.0)) for a in assets], dtype=float)
    if not np.all(np.isfinite(weights)):
        raise DegenerateInputError("allocation weights must be finite")
    return weights / 100.0


def value_series_from_frame(
    frame: pd.DataFrame,
    value_col: str = "value",
    contributed_col: str = "cumulative_contributed"
) -> ValueSeries:
    """Convert a date-indexed DataFrame into a ValueSeries"""
    points = []
    has_contributions = contributed_col in frame.columns
    for ts, row in frame.sort_index().iterrows():
        contributed = row[contributed_col] if has_contributions else None
        if contributed is not None and pd.isna(contributed):
            contributed = None
        points.append(ValuePoint(
            date=pd.Timestamp(ts).date(),
            value=float(row[value_col]),
            cumulative_contributed=None if contributed is None else float(contributed),
        ))
    return points


def sorted_series(points: Iterable[ValuePoint]) -> ValueSeries:
    """Chronologically sorted copy; rejects non-finite values"""
    ordered = sorted(points, key=lambda p: p.date)
    for point in ordered:
        if not np.isfinite(point.value):
            raise DegenerateInputError(f"non-finite value on {point.date}")
    return ordered
