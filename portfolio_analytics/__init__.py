"""
Portfolio Analytics
Quantitative risk and performance analytics on caller-supplied portfolio data
"""

from .config import AnalyticsConfig, create_rng, load_config
from .exceptions import (
    AnalyticsError,
    DegenerateInputError,
    InsufficientDataError,
    InvalidParameterError,
)
from .models import Asset, AssetClass, ValuePoint, value_series_from_frame
from .performance import PerformanceAnalyzer, PerformanceMetricsCalculator
from .risk_management import RiskEngine

__version__ = "1.0.0"

__all__ = [
    'AnalyticsConfig',
    'create_rng',
    'load_config',
    'AnalyticsError',
    'DegenerateInputError',
    'InsufficientDataError',
    'InvalidParameterError',
    'Asset',
    'AssetClass',
    'ValuePoint',
    'value_series_from_frame',
    'PerformanceAnalyzer',
    'PerformanceMetricsCalculator',
    'RiskEngine',
]
