"""
Risk Management Module
Correlation structure, volatility decomposition, Monte Carlo VaR,
stress testing and concentration analysis
"""

from .correlation import CorrelationEngine, CorrelationMatrix
from .diversification import (
    ConcentrationRisk,
    DiversificationAnalyzer,
    DiversificationReport,
)
from .monte_carlo import MonteCarloVaR, ReturnProfile, ReturnSimulator, VaRResult
from .risk_engine import RiskEngine, RiskReport
from .stress_testing import (
    STRESS_SCENARIOS,
    RiskRating,
    ScenarioResult,
    StressScenario,
    StressTestEngine,
    StressTestResult,
    get_scenario,
)
from .volatility import AssetVolatility, VolatilityAnalysis, VolatilityDecomposer

__all__ = [
    'CorrelationEngine',
    'CorrelationMatrix',
    'ConcentrationRisk',
    'DiversificationAnalyzer',
    'DiversificationReport',
    'MonteCarloVaR',
    'ReturnProfile',
    'ReturnSimulator',
    'VaRResult',
    'RiskEngine',
    'RiskReport',
    'STRESS_SCENARIOS',
    'RiskRating',
    'ScenarioResult',
    'StressScenario',
    'StressTestEngine',
    'StressTestResult',
    'get_scenario',
    'AssetVolatility',
    'VolatilityAnalysis',
    'VolatilityDecomposer',
]
