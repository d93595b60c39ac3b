"""
Performance Analysis Module
Risk-adjusted metrics, calendar period returns and drawdown episodes
"""

from .analyzer import PerformanceAnalyzer, PerformanceReport
from .drawdowns import DrawdownEpisode, DrawdownSegmenter, max_drawdown, max_gain
from .metrics import (
    PerformanceMetrics,
    PerformanceMetricsCalculator,
    SeriesSummary,
    daily_returns,
    summarize_value_series,
)
from .periods import (
    Granularity,
    PeriodPerformance,
    PeriodPerformanceBucketing,
    calendar_buckets,
)

__all__ = [
    'PerformanceAnalyzer',
    'PerformanceReport',
    'DrawdownEpisode',
    'DrawdownSegmenter',
    'max_drawdown',
    'max_gain',
    'PerformanceMetrics',
    'PerformanceMetricsCalculator',
    'SeriesSummary',
    'daily_returns',
    'summarize_value_series',
    'Granularity',
    'PeriodPerformance',
    'PeriodPerformanceBucketing',
    'calendar_buckets',
]
