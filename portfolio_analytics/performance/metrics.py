"""
Performance Metrics
Risk-adjusted return statistics of a portfolio against a benchmark
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from ..config import DEFAULT_RISK_FREE_RATE, TRADING_DAYS_PER_YEAR
from ..exceptions import DegenerateInputError, InsufficientDataError, InvalidParameterError
from ..models import ValuePoint, sorted_series
from .drawdowns import max_drawdown, max_gain

logger = logging.getLogger(__name__)

# Denominators at or below this are treated as zero
ZERO_TOLERANCE = 1e-12
# Reported when there are profits but no losses
PROFIT_FACTOR_CAP = 10.0

ReturnsInput = Union[pd.Series, Sequence[float], np.ndarray]


@dataclass
class PerformanceMetrics:
    """
    Portfolio performance statistics

    Ratios are None when their denominator is zero. Alpha, tracking error,
    drawdown, gain and win rate are percentages.
    """
    sharpe_ratio: Optional[float]
    sortino_ratio: Optional[float]
    alpha: Optional[float]
    beta: Optional[float]
    information_ratio: Optional[float]
    tracking_error: float
    calmar_ratio: Optional[float]
    max_drawdown: float
    max_gain: float
    win_rate: float
    profit_factor: float
    annualized_return: float
    annualized_volatility: float
    observations: int

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.__dict__)


def _safe_ratio(numerator: float, denominator: float) -> Optional[float]:
    if denominator is None or not np.isfinite(denominator) or abs(denominator) <= ZERO_TOLERANCE:
        return None
    return float(numerator / denominator)


def _std(returns: pd.Series) -> float:
    """Sample standard deviation; zero when fewer than two observations"""
    if len(returns) < 2:
        return 0.0
    return float(returns.std(ddof=1))


class PerformanceMetricsCalculator:
    """
    Performance statistics from aligned daily return series
    """

    def __init__(
        self,
        risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
        periods_per_year: int = TRADING_DAYS_PER_YEAR
    ):
        self.risk_free_rate = risk_free_rate
        self.periods_per_year = periods_per_year
        self.logger = logging.getLogger(self.__class__.__name__)

    def _align_series(
        self,
        portfolio: ReturnsInput,
        benchmark: ReturnsInput
    ) -> Tuple[pd.Series, pd.Series]:
        """Align on the common index for Series input, require equal length otherwise"""
        if isinstance(portfolio, pd.Series) and isinstance(benchmark, pd.Series):
            common_idx = portfolio.index.intersection(benchmark.index)
            p = portfolio.loc[common_idx].astype(float)
            b = benchmark.loc[common_idx].astype(float)
        else:
            p_values = np.asarray(portfolio, dtype=float)
            b_values = np.asarray(benchmark, dtype=float)
            if p_values.shape != b_values.shape:
                raise InvalidParameterError(
                    f"portfolio and benchmark returns differ in length "
                    f"({p_values.size} vs {b_values.size})"
                )
            p = pd.Series(p_values)
            b = pd.Series(b_values)

        if not (np.all(np.isfinite(p.values)) and np.all(np.isfinite(b.values))):
            raise DegenerateInputError("return series contain non-finite values")
        if len(p) < 2:
            raise InsufficientDataError(
                f"at least 2 aligned observations required, got {len(p)}"
            )
        return p.reset_index(drop=True), b.reset_index(drop=True)

    def calculate(
        self,
        portfolio_returns: ReturnsInput,
        benchmark_returns: ReturnsInput
    ) -> PerformanceMetrics:
        """
        Calculate performance metrics

        Args:
            portfolio_returns: Daily portfolio returns (fractions)
            benchmark_returns: Daily benchmark returns aligned with the portfolio
        """
        p, b = self._align_series(portfolio_returns, benchmark_returns)
        n = self.periods_per_year
        rf = self.risk_free_rate
        sqrt_n = np.sqrt(n)

        portfolio_mean = float(p.mean())
        benchmark_mean = float(b.mean())
        portfolio_std = _std(p)
        annual_return = portfolio_mean * n
        annual_vol = portfolio_std * sqrt_n

        # Beta / CAPM alpha
        benchmark_var = float(b.var(ddof=1))
        beta = _safe_ratio(float(p.cov(b)), benchmark_var)
        if beta is None:
            alpha = None
        else:
            alpha = (annual_return - (rf + beta * (benchmark_mean * n - rf))) * 100

        sharpe = _safe_ratio(annual_return - rf, annual_vol)

        # Active return
        active = p - b
        tracking_error = _std(active) * sqrt_n
        information_ratio = _safe_ratio(float(active.mean()) * n, tracking_error)

        # Wealth curve
        wealth = np.concatenate(([1.0], np.cumprod(1 + p.values)))
        mdd = max_drawdown(wealth)
        mgain = max_gain(wealth)
        calmar = _safe_ratio(annual_return, mdd / 100)

        # Downside deviation
        downside = p[p < 0]
        # a single negative return has no sample std
        downside_std = _std(downside) if len(downside) >= 2 else portfolio_std
        sortino = _safe_ratio(annual_return - rf, downside_std * sqrt_n)

        # Win/Loss
        win_rate = float((p > 0).sum()) / len(p) * 100
        profits = float(p[p > 0].sum())
        losses = abs(float(p[p < 0].sum()))
        if losses > 0:
            profit_factor = profits / losses
        else:
            profit_factor = PROFIT_FACTOR_CAP if profits > 0 else 1.0

        self.logger.debug(f"Performance metrics over {len(p)} observations")
        return PerformanceMetrics(
            sharpe_ratio=sharpe,
            sortino_ratio=sortino,
            alpha=alpha,
            beta=beta,
            information_ratio=information_ratio,
            tracking_error=tracking_error * 100,
            calmar_ratio=calmar,
            max_drawdown=mdd,
            max_gain=mgain,
            win_rate=win_rate,
            profit_factor=profit_factor,
            annualized_return=annual_return * 100,
            annualized_volatility=annual_vol * 100,
            observations=len(p),
        )


@dataclass
class SeriesSummary:
    """Headline statistics of a value series (percent figures)"""
    total_return: float
    annualized_return: float
    volatility: float
    max_drawdown: float
    observations: int

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.__dict__)


def daily_returns(series: Sequence[ValuePoint]) -> pd.Series:
    """
    Returns between consecutive points, indexed by date.

    Contributions recorded between two points are removed from the later
    value before the ratio is taken, so top-ups do not count as gains.
    Points before the first recorded contribution take that first figure,
    so only changes after it are treated as flows.
    """
    points = sorted_series(series)
    index = pd.DatetimeIndex([pd.Timestamp(p.date) for p in points])
    values = pd.Series([p.value for p in points], index=index, dtype=float)
    contributed = pd.Series(
        [p.cumulative_contributed for p in points], index=index, dtype=float
    ).ffill().bfill().fillna(0.0)
    flows = contributed.diff().fillna(0.0)
    return ((values - flows) / values.shift(1) - 1).iloc[1:]


def summarize_value_series(
    series: Sequence[ValuePoint],
    periods_per_year: int = TRADING_DAYS_PER_YEAR
) -> SeriesSummary:
    """
    Total and annualized return, volatility and max drawdown of a value series.

    Total return is measured against the capital contributed by the last
    point (or the first value when no contributions are recorded).
    """
    points = sorted_series(series)
    if len(points) < 2:
        raise InsufficientDataError("at least 2 points required to summarize a series")

    first, last = points[0], points[-1]
    invested = last.cumulative_contributed or first.value
    if invested <= 0:
        raise DegenerateInputError("invested capital must be positive")

    total = (last.value - invested) / invested
    returns = daily_returns(points)
    if np.any(~np.isfinite(returns.values)):
        raise DegenerateInputError("value series produces non-finite returns")

    growth = 1 + total
    if growth > 0:
        annualized = growth ** (periods_per_year / len(returns)) - 1
    else:
        annualized = -1.0

    return SeriesSummary(
        total_return=total * 100,
        annualized_return=annualized * 100,
        volatility=_std(returns) * np.sqrt(periods_per_year) * 100,
        max_drawdown=max_drawdown([p.value for p in points]),
        observations=len(points),
    )
