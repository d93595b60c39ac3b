"""
Risk Management and Analytics Engine
Correlation, volatility, Monte Carlo VaR, stress and concentration in one report
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from ..config import AnalyticsConfig
from ..models import AllocationWeights, Asset
from .correlation import CorrelationEngine, CorrelationMatrix
from .diversification import DiversificationAnalyzer, DiversificationReport
from .monte_carlo import MonteCarloVaR, ReturnProfile, VaRResult
from .stress_testing import StressTestEngine, StressTestResult
from .volatility import VolatilityAnalysis, VolatilityDecomposer

logger = logging.getLogger(__name__)


@dataclass
class RiskReport:
    """Comprehensive portfolio risk report"""
    correlation: CorrelationMatrix
    volatility: VolatilityAnalysis
    value_at_risk: List[VaRResult]
    stress_test: StressTestResult
    diversification: DiversificationReport
    portfolio_value: float
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "correlation": self.correlation.to_dict(),
            "volatility": self.volatility.to_dict(),
            "value_at_risk": [v.to_dict() for v in self.value_at_risk],
            "stress_test": self.stress_test.to_dict(),
            "diversification": self.diversification.to_dict(),
            "portfolio_value": self.portfolio_value,
            "timestamp": self.timestamp.isoformat(),
        }


class RiskEngine:
    """
    Portfolio risk analytics engine

    Holds configuration only. Every call builds its own random generator
    from the configured seed (or the seed passed in), so concurrent calls
    never share random state.
    """

    def __init__(self, config: Optional[AnalyticsConfig] = None):
        self.config = config or AnalyticsConfig()
        self.correlation_engine = CorrelationEngine()
        self.stress_test_engine = StressTestEngine()
        self.diversification_analyzer = DiversificationAnalyzer()
        self.logger = logging.getLogger(self.__class__.__name__)

    def correlation_matrix(self, assets: Sequence[Asset]) -> CorrelationMatrix:
        return self.correlation_engine.build(assets)

    def analyze_volatility(
        self,
        assets: Sequence[Asset],
        allocations: AllocationWeights,
        correlation: Optional[CorrelationMatrix] = None,
        volatility_overrides: Optional[Dict[str, float]] = None,
        rng: Optional[np.random.Generator] = None
    ) -> VolatilityAnalysis:
        """Volatility decomposition; band midpoints unless a generator is supplied"""
        if correlation is None:
            correlation = self.correlation_matrix(assets)
        decomposer = VolatilityDecomposer(rng=rng)
        return decomposer.decompose(assets, allocations, correlation, volatility_overrides)

    def calculate_var(
        self,
        assets: Sequence[Asset],
        allocations: AllocationWeights,
        portfolio_value: float,
        correlation: Optional[CorrelationMatrix] = None,
        simulations: Optional[int] = None,
        confidence_levels: Optional[Sequence[float]] = None,
        seed: Optional[int] = None,
        coupling: Optional[str] = None,
        profile_overrides: Optional[Dict[str, ReturnProfile]] = None
    ) -> List[VaRResult]:
        if correlation is None:
            correlation = self.correlation_matrix(assets)
        engine = MonteCarloVaR(
            simulations=simulations if simulations is not None else self.config.simulations,
            confidence_levels=confidence_levels or self.config.confidence_levels,
            rng=self.config.create_rng(seed),
            coupling=coupling or self.config.coupling,
            coupling_damping=self.config.coupling_damping,
            batch_size=self.config.batch_size,
        )
        return engine.calculate(assets, allocations, portfolio_value, correlation, profile_overrides)

    def run_stress_test(
        self,
        assets: Sequence[Asset],
        allocations: AllocationWeights,
        portfolio_value: float,
        scenario_keys: Optional[Sequence[str]] = None
    ) -> StressTestResult:
        return self.stress_test_engine.run_stress_test(
            assets, allocations, portfolio_value, scenario_keys
        )

    def analyze_diversification(
        self,
        assets: Sequence[Asset],
        allocations: AllocationWeights
    ) -> DiversificationReport:
        return self.diversification_analyzer.analyze(assets, allocations)

    def calculate_all_metrics(
        self,
        assets: Sequence[Asset],
        allocations: AllocationWeights,
        portfolio_value: float,
        simulations: Optional[int] = None,
        seed: Optional[int] = None
    ) -> RiskReport:
        """
        Calculate the full risk report

        Args:
            assets: Portfolio assets
            allocations: Weight percentages per symbol
            portfolio_value: Portfolio notional in base currency
            simulations: Optional Monte Carlo draw count
            seed: Optional seed overriding the configured one
        """
        correlation = self.correlation_matrix(assets)
        volatility = self.analyze_volatility(assets, allocations, correlation)
        var_results = self.calculate_var(
            assets, allocations, portfolio_value, correlation,
            simulations=simulations, seed=seed
        )
        stress = self.run_stress_test(assets, allocations, portfolio_value)
        diversification = self.analyze_diversification(assets, allocations)

        self.logger.info(
            f"Risk report for {len(assets)} assets: volatility {volatility.portfolio_volatility:.2f}%, "
            f"rating {stress.risk_rating.value}"
        )
        return RiskReport(
            correlation=correlation,
            volatility=volatility,
            value_at_risk=var_results,
            stress_test=stress,
            diversification=diversification,
            portfolio_value=portfolio_value,
        )
