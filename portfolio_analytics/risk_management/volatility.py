"""
Volatility Decomposition
Per-asset annualized volatility and portfolio variance over the correlation matrix
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..exceptions import InvalidParameterError
from ..models import AllocationWeights, Asset, weight_vector
from .correlation import CorrelationMatrix

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VolatilityBand:
    """Annualized volatility range for a class of assets"""
    low: float
    high: float

    @property
    def midpoint(self) -> float:
        return (self.low + self.high) / 2


CRYPTO_BAND = VolatilityBand(0.60, 1.00)
# (sector keyword, band); first match wins
SECTOR_BANDS: Tuple[Tuple[str, VolatilityBand], ...] = (
    ("Technology", VolatilityBand(0.25, 0.45)),
    ("Bonds", VolatilityBand(0.03, 0.08)),
    ("Precious Metals", VolatilityBand(0.15, 0.30)),
)
DEFAULT_BAND = VolatilityBand(0.18, 0.30)


def volatility_band(asset: Asset) -> VolatilityBand:
    if asset.is_crypto:
        return CRYPTO_BAND
    for keyword, band in SECTOR_BANDS:
        if keyword in (asset.sector or ""):
            return band
    return DEFAULT_BAND


@dataclass
class AssetVolatility:
    """Volatility and risk contribution of one position (percent figures)"""
    symbol: str
    name: str
    volatility: float
    allocation: float
    contribution_to_portfolio: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "asset": self.symbol,
            "name": self.name,
            "volatility": self.volatility,
            "allocation": self.allocation,
            "contribution_to_portfolio": self.contribution_to_portfolio,
        }


@dataclass
class VolatilityAnalysis:
    """Portfolio volatility decomposition (percent figures)"""
    portfolio_volatility: float
    weighted_average_volatility: float
    diversification_benefit: float
    asset_volatilities: List[AssetVolatility] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "portfolio_volatility": self.portfolio_volatility,
            "weighted_average_volatility": self.weighted_average_volatility,
            "diversification_benefit": self.diversification_benefit,
            "asset_volatilities": [a.to_dict() for a in self.asset_volatilities],
        }


class VolatilityDecomposer:
    """
    Portfolio volatility from per-asset volatility estimates

    Per-asset volatility comes from a class/sector lookup table. Without a
    random generator the band midpoint is used; with one, a uniform draw
    inside the band is taken so repeated runs under one seed agree.
    """

    def __init__(self, rng: Optional[np.random.Generator] = None):
        self.rng = rng
        self.logger = logging.getLogger(self.__class__.__name__)

    def estimate_volatility(self, asset: Asset) -> float:
        """Annualized volatility as a fraction"""
        band = volatility_band(asset)
        if self.rng is None:
            return band.midpoint
        return float(self.rng.uniform(band.low, band.high))

    def estimate_volatilities(
        self,
        assets: Sequence[Asset],
        overrides: Optional[Dict[str, float]] = None
    ) -> np.ndarray:
        overrides = overrides or {}
        vols = []
        for asset in assets:
            if asset.symbol in overrides:
                vol = float(overrides[asset.symbol])
                if vol < 0 or not np.isfinite(vol):
                    raise InvalidParameterError(
                        f"volatility override for {asset.symbol} must be a nonnegative number"
                    )
                vols.append(vol)
            else:
                vols.append(self.estimate_volatility(asset))
        return np.array(vols, dtype=float)

    def decompose(
        self,
        assets: Sequence[Asset],
        allocations: AllocationWeights,
        correlation: CorrelationMatrix,
        volatility_overrides: Optional[Dict[str, float]] = None
    ) -> VolatilityAnalysis:
        """
        Decompose portfolio volatility

        Args:
            assets: Portfolio assets
            allocations: Weight percentages per symbol
            correlation: Correlation matrix aligned with assets
            volatility_overrides: Optional annualized volatility (fraction) per symbol
        """
        if not assets:
            return VolatilityAnalysis(0.0, 0.0, 0.0, [])

        correlation.validate(assets)
        w = weight_vector(assets, allocations)
        sigma = self.estimate_volatilities(assets, volatility_overrides)

        # Covariance = D rho D
        cov = correlation.values * np.outer(sigma, sigma)
        marginal = cov @ w
        variance = float(w @ marginal)
        if variance < 0:
            self.logger.warning(f"Negative portfolio variance {variance:.3e} clipped to zero")
            variance = 0.0

        portfolio_vol = float(np.sqrt(variance))
        weighted_vol = float(w @ sigma)

        # Component contributions sum to the total variance
        components = w * marginal
        if variance > 0:
            shares = components / variance
        else:
            shares = np.zeros_like(components)

        rows = [
            AssetVolatility(
                symbol=asset.symbol,
                name=asset.name,
                volatility=float(sigma[i] * 100),
                allocation=float(w[i] * 100),
                contribution_to_portfolio=float(shares[i] * 100),
            )
            for i, asset in enumerate(assets)
        ]
        rows.sort(key=lambda r: r.contribution_to_portfolio, reverse=True)

        return VolatilityAnalysis(
            portfolio_volatility=portfolio_vol * 100,
            weighted_average_volatility=weighted_vol * 100,
            diversification_benefit=(weighted_vol - portfolio_vol) * 100,
            asset_volatilities=rows,
        )
