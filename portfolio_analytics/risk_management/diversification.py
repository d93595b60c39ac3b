"""
Diversification Analysis
Herfindahl-Hirschman concentration and rule-based recommendations
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Sequence

import numpy as np

from ..exceptions import InsufficientDataError, InvalidParameterError
from ..models import AllocationWeights, Asset

logger = logging.getLogger(__name__)

LOW_CONCENTRATION_HHI = 0.15
HIGH_CONCENTRATION_HHI = 0.25
MAX_POSITION_PCT = 30.0
MAX_CRYPTO_PCT = 20.0


class ConcentrationRisk(Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


@dataclass
class DiversificationReport:
    herfindahl_index: float
    effective_assets: float
    concentration_risk: ConcentrationRisk
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "herfindahl_index": self.herfindahl_index,
            "effective_assets": self.effective_assets,
            "concentration_risk": self.concentration_risk.value,
            "recommendations": list(self.recommendations),
        }


def classify_concentration(hhi: float) -> ConcentrationRisk:
    if hhi < LOW_CONCENTRATION_HHI:
        return ConcentrationRisk.LOW
    elif hhi < HIGH_CONCENTRATION_HHI:
        return ConcentrationRisk.MEDIUM
    return ConcentrationRisk.HIGH


class DiversificationAnalyzer:
    """
    Concentration analysis on normalized weights.

    Weights are divided by their total, so any positive rescaling of the
    allocation map gives the same report.
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    def analyze(
        self,
        assets: Sequence[Asset],
        allocations: AllocationWeights
    ) -> DiversificationReport:
        if not assets:
            return DiversificationReport(0.0, 0.0, ConcentrationRisk.LOW, [])

        raw = np.array([float(allocations.get(a.symbol, 0.0)) for a in assets], dtype=float)
        if np.any(raw < 0) or not np.all(np.isfinite(raw)):
            raise InvalidParameterError("allocations must be finite and nonnegative")

        total = raw.sum()
        if total <= 0:
            raise InsufficientDataError("all allocations are zero; concentration is undefined")

        weights = raw / total
        hhi = float(np.sum(weights ** 2))
        effective_assets = 1.0 / hhi
        risk = classify_concentration(hhi)

        recommendations = []
        if hhi > HIGH_CONCENTRATION_HHI:
            recommendations.append(
                "Portfolio is highly concentrated. Consider diversifying across more assets."
            )

        pct = weights * 100
        oversized = [a.symbol for a, p in zip(assets, pct) if p > MAX_POSITION_PCT]
        if oversized:
            recommendations.append(
                f"Single-asset allocation exceeds {MAX_POSITION_PCT:.0f}% "
                f"({', '.join(oversized)}). Consider reducing these positions to spread risk."
            )

        crypto_pct = float(sum(p for a, p in zip(assets, pct) if a.is_crypto))
        if crypto_pct > MAX_CRYPTO_PCT:
            recommendations.append(
                f"Crypto allocation is {crypto_pct:.1f}%. Consider reducing it to limit volatility exposure."
            )

        self.logger.debug(f"HHI {hhi:.4f}, effective assets {effective_assets:.2f}")
        return DiversificationReport(
            herfindahl_index=hhi,
            effective_assets=effective_assets,
            concentration_risk=risk,
            recommendations=recommendations,
        )
