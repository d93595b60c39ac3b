"""
Performance Analyzer
Metrics, period buckets, drawdown episodes and summaries for one portfolio
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

from ..config import AnalyticsConfig
from ..models import ValuePoint
from .drawdowns import DrawdownEpisode, DrawdownSegmenter
from .metrics import (
    PerformanceMetrics,
    PerformanceMetricsCalculator,
    SeriesSummary,
    daily_returns,
    summarize_value_series,
)
from .periods import PeriodPerformance, PeriodPerformanceBucketing

logger = logging.getLogger(__name__)


@dataclass
class PerformanceReport:
    metrics: PerformanceMetrics
    periods: List[PeriodPerformance]
    drawdowns: List[DrawdownEpisode]
    portfolio_summary: SeriesSummary
    benchmark_summary: SeriesSummary
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metrics": self.metrics.to_dict(),
            "periods": [p.to_dict() for p in self.periods],
            "drawdowns": [d.to_dict() for d in self.drawdowns],
            "portfolio_summary": self.portfolio_summary.to_dict(),
            "benchmark_summary": self.benchmark_summary.to_dict(),
            "timestamp": self.timestamp.isoformat(),
        }


class PerformanceAnalyzer:
    """
    Portfolio-vs-benchmark performance analysis from value series
    """

    def __init__(
        self,
        config: Optional[AnalyticsConfig] = None,
        net_benchmark_contributions: bool = False
    ):
        self.config = config or AnalyticsConfig()
        self.calculator = PerformanceMetricsCalculator(risk_free_rate=self.config.risk_free_rate)
        self.bucketing = PeriodPerformanceBucketing(
            net_benchmark_contributions=net_benchmark_contributions
        )
        self.segmenter = DrawdownSegmenter(threshold_pct=self.config.drawdown_threshold_pct)
        self.logger = logging.getLogger(self.__class__.__name__)

    def analyze(
        self,
        portfolio: Sequence[ValuePoint],
        benchmark: Sequence[ValuePoint],
        as_of: Optional[date] = None
    ) -> PerformanceReport:
        """
        Full performance report

        Daily returns are derived from both series net of contributions and
        aligned on their common dates.
        """
        metrics = self.calculator.calculate(daily_returns(portfolio), daily_returns(benchmark))
        periods = self.bucketing.calculate(portfolio, benchmark, as_of=as_of)
        drawdowns = self.segmenter.segment(portfolio)

        self.logger.info(
            f"Performance report: {metrics.observations} aligned days, "
            f"{len(periods)} periods, {len(drawdowns)} drawdown episodes"
        )
        return PerformanceReport(
            metrics=metrics,
            periods=periods,
            drawdowns=drawdowns,
            portfolio_summary=summarize_value_series(portfolio),
            benchmark_summary=summarize_value_series(benchmark),
        )
