"""
Correlation Engine
Heuristic pairwise correlation structure from asset metadata
"""

import math
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

import numpy as np
import pandas as pd

from ..exceptions import DegenerateInputError
from ..models import Asset, AssetClass

logger = logging.getLogger(__name__)

SAME_SECTOR_CORRELATION = 0.6
CRYPTO_PAIR_CORRELATION = 0.5
SAME_CLASS_CORRELATION = 0.3
CROSS_CLASS_CORRELATION = 0.1

PERTURBATION_SCALE = 0.4  # (u - 0.5) * 0.4 -> +/-0.2
MIN_CORRELATION = -0.8
MAX_CORRELATION = 0.9


@dataclass
class CorrelationMatrix:
    """Symmetric correlation matrix with unit diagonal"""
    symbols: List[str]
    values: np.ndarray

    @property
    def size(self) -> int:
        return len(self.symbols)

    def __getitem__(self, key):
        return self.values[key]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.values, index=self.symbols, columns=self.symbols)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "assets": list(self.symbols),
            "correlations": self.values.tolist(),
        }

    def validate(self, assets: Sequence[Asset]) -> None:
        """Check shape and content against the asset list the caller is about to use"""
        n = len(assets)
        if self.values.shape != (n, n):
            raise DegenerateInputError(
                f"correlation matrix is {self.values.shape}, expected ({n}, {n})"
            )
        if not np.all(np.isfinite(self.values)):
            raise DegenerateInputError("correlation matrix contains non-finite values")


def _pair_seed(symbol_a: str, symbol_b: str) -> int:
    """Sum of character codes; order independent"""
    return sum(ord(ch) for ch in symbol_a + symbol_b)


def _seeded_uniform(seed: int) -> float:
    x = math.sin(seed) * 10000
    return x - math.floor(x)


def pair_perturbation(symbol_a: str, symbol_b: str) -> float:
    """Deterministic perturbation in [-0.2, 0.2) for a symbol pair"""
    return (_seeded_uniform(_pair_seed(symbol_a, symbol_b)) - 0.5) * PERTURBATION_SCALE


def base_correlation(asset_a: Asset, asset_b: Asset) -> float:
    """Metadata-driven base correlation before perturbation"""
    if asset_a.sector == asset_b.sector:
        return SAME_SECTOR_CORRELATION
    if asset_a.asset_class == asset_b.asset_class:
        if asset_a.asset_class == AssetClass.CRYPTO:
            return CRYPTO_PAIR_CORRELATION
        return SAME_CLASS_CORRELATION
    return CROSS_CLASS_CORRELATION


class CorrelationEngine:
    """
    Builds the N x N correlation matrix for a list of assets.

    Results depend only on asset metadata, so the same asset list always
    produces the same matrix.
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    def build(self, assets: Sequence[Asset]) -> CorrelationMatrix:
        n = len(assets)
        values = np.eye(n, dtype=float)

        for i in range(n):
            for j in range(i + 1, n):
                correlation = base_correlation(assets[i], assets[j])
                correlation += pair_perturbation(assets[i].symbol, assets[j].symbol)
                correlation = min(MAX_CORRELATION, max(MIN_CORRELATION, correlation))
                values[i, j] = correlation
                values[j, i] = correlation

        self.logger.debug(f"Built {n}x{n} correlation matrix")
        return CorrelationMatrix(symbols=[a.symbol for a in assets], values=values)
