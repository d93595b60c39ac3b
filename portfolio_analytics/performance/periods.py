"""
Period Performance
Calendar year / quarter buckets with money-weighted portfolio returns
"""

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from ..exceptions import InvalidParameterError
from ..models import ValuePoint, sorted_series

logger = logging.getLogger(__name__)

DEFAULT_YEARS = 3
DEFAULT_QUARTERS = 8


class Granularity(Enum):
    YEAR = "year"
    QUARTER = "quarter"


@dataclass(frozen=True)
class PeriodBucket:
    label: str
    granularity: Granularity
    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass
class PeriodPerformance:
    """Returns over one calendar bucket, in percent"""
    period: str
    granularity: Granularity
    start_date: date
    end_date: date
    portfolio_return: float
    benchmark_return: float
    alpha: float
    relative_return: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": self.period,
            "granularity": self.granularity.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "portfolio_return": self.portfolio_return,
            "benchmark_return": self.benchmark_return,
            "alpha": self.alpha,
            "relative_return": self.relative_return,
        }


def calendar_buckets(
    as_of: date,
    years: int = DEFAULT_YEARS,
    quarters: int = DEFAULT_QUARTERS
) -> List[PeriodBucket]:
    """The last `years` calendar years and last `quarters` calendar quarters, including the current ones"""
    if years < 0 or quarters < 0:
        raise InvalidParameterError("bucket counts cannot be negative")

    buckets = []
    for i in range(years):
        year = as_of.year - i
        buckets.append(PeriodBucket(
            label=str(year),
            granularity=Granularity.YEAR,
            start=date(year, 1, 1),
            end=date(year, 12, 31),
        ))

    current = pd.Period(pd.Timestamp(as_of), freq="Q")
    for i in range(quarters):
        quarter = current - i
        buckets.append(PeriodBucket(
            label=f"{quarter.year}Q{quarter.quarter}",
            granularity=Granularity.QUARTER,
            start=quarter.start_time.date(),
            end=quarter.end_time.date(),
        ))
    return buckets


def money_weighted_return(points: Sequence[ValuePoint]) -> Optional[float]:
    """
    (end value - capital contributed by the end) / capital contributed, in percent.

    Falls back to the first value in the window when the end point carries no
    contribution figure.
    """
    start, end = points[0], points[-1]
    invested = end.cumulative_contributed or start.value
    if not invested or invested <= 0:
        return None
    return (end.value - invested) / invested * 100


def time_weighted_return(points: Sequence[ValuePoint]) -> Optional[float]:
    start, end = points[0], points[-1]
    if start.value <= 0:
        return None
    return (end.value / start.value - 1) * 100


class PeriodPerformanceBucketing:
    """
    Splits portfolio and benchmark value series into calendar buckets.

    The benchmark return is a plain price ratio unless
    net_benchmark_contributions is set, in which case a benchmark series that
    records contributions is measured the same money-weighted way as the
    portfolio.
    """

    def __init__(
        self,
        years: int = DEFAULT_YEARS,
        quarters: int = DEFAULT_QUARTERS,
        net_benchmark_contributions: bool = False
    ):
        self.years = years
        self.quarters = quarters
        self.net_benchmark_contributions = net_benchmark_contributions
        self.logger = logging.getLogger(self.__class__.__name__)

    def _benchmark_return(self, points: Sequence[ValuePoint]) -> Optional[float]:
        if self.net_benchmark_contributions and points[-1].cumulative_contributed:
            return money_weighted_return(points)
        return time_weighted_return(points)

    def calculate(
        self,
        portfolio: Sequence[ValuePoint],
        benchmark: Sequence[ValuePoint],
        as_of: Optional[date] = None
    ) -> List[PeriodPerformance]:
        """
        Calculate period performance

        Args:
            portfolio: Portfolio value series with cumulative contributions
            benchmark: Benchmark value series
            as_of: Reference date for the buckets, defaults to today
        """
        as_of = as_of or date.today()
        portfolio_points = sorted_series(portfolio)
        benchmark_points = sorted_series(benchmark)

        results = []
        for bucket in calendar_buckets(as_of, self.years, self.quarters):
            p_window = [pt for pt in portfolio_points if bucket.contains(pt.date)]
            b_window = [pt for pt in benchmark_points if bucket.contains(pt.date)]
            if not p_window or not b_window:
                continue

            portfolio_return = money_weighted_return(p_window)
            benchmark_return = self._benchmark_return(b_window)
            if portfolio_return is None or benchmark_return is None:
                self.logger.warning(f"Skipping {bucket.label}: non-positive base value")
                continue

            alpha = portfolio_return - benchmark_return
            results.append(PeriodPerformance(
                period=bucket.label,
                granularity=bucket.granularity,
                start_date=bucket.start,
                end_date=bucket.end,
                portfolio_return=portfolio_return,
                benchmark_return=benchmark_return,
                alpha=alpha,
                relative_return=alpha,
            ))

        # Chronological by period end; a year precedes its final quarter
        results.sort(key=lambda r: (r.end_date, r.start_date))
        return results
