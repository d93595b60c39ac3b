"""
Drawdown Analysis
Peak-to-trough measures and drawdown episode segmentation
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Sequence

import numpy as np

from ..config import DEFAULT_DRAWDOWN_THRESHOLD_PCT
from ..exceptions import InvalidParameterError
from ..models import ValuePoint, sorted_series

logger = logging.getLogger(__name__)


def max_drawdown(values: Sequence[float]) -> float:
    """Largest peak-to-current decline, in percent"""
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return 0.0
    running_peak = np.maximum.accumulate(arr)
    with np.errstate(divide="ignore", invalid="ignore"):
        drawdown = np.where(running_peak > 0, (running_peak - arr) / running_peak, 0.0)
    return float(drawdown.max() * 100)


def max_gain(values: Sequence[float]) -> float:
    """Largest trough-to-current rise, in percent"""
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return 0.0
    running_trough = np.minimum.accumulate(arr)
    with np.errstate(divide="ignore", invalid="ignore"):
        gain = np.where(running_trough > 0, (arr - running_trough) / running_trough, 0.0)
    return float(gain.max() * 100)


def days_between(start: date, end: date) -> int:
    return abs((end - start).days)


@dataclass
class DrawdownEpisode:
    start_date: date
    end_date: date
    duration_days: int
    max_drawdown_pct: float
    recovered: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "duration_days": self.duration_days,
            "max_drawdown_pct": self.max_drawdown_pct,
            "recovered": self.recovered,
        }


class DrawdownSegmenter:
    """
    Extracts drawdown episodes from a value series in a single pass

    An episode opens when the value sits more than threshold_pct below the
    running peak and is anchored at the peak's date. It closes on the next
    new high, ending at the last observation below that peak.
    """

    def __init__(self, threshold_pct: float = DEFAULT_DRAWDOWN_THRESHOLD_PCT):
        if threshold_pct < 0:
            raise InvalidParameterError("threshold_pct cannot be negative")
        self.threshold_pct = threshold_pct
        self.logger = logging.getLogger(self.__class__.__name__)

    def segment(self, series: Sequence[ValuePoint]) -> List[DrawdownEpisode]:
        points = sorted_series(series)
        if len(points) < 2:
            return []

        episodes: List[DrawdownEpisode] = []
        peak = points[0].value
        peak_date = points[0].date
        in_drawdown = False
        start_date = peak_date
        deepest = 0.0

        for i in range(1, len(points)):
            current = points[i]

            if current.value > peak:
                if in_drawdown:
                    end_date = points[i - 1].date
                    episodes.append(DrawdownEpisode(
                        start_date=start_date,
                        end_date=end_date,
                        duration_days=days_between(start_date, end_date),
                        max_drawdown_pct=deepest,
                        recovered=True,
                    ))
                    in_drawdown = False
                peak = current.value
                peak_date = current.date
                deepest = 0.0
                continue

            if peak <= 0:
                continue
            drawdown = (peak - current.value) / peak * 100

            if not in_drawdown and drawdown > self.threshold_pct:
                in_drawdown = True
                start_date = peak_date
                deepest = drawdown
            elif in_drawdown:
                deepest = max(deepest, drawdown)

        if in_drawdown:
            end_date = points[-1].date
            episodes.append(DrawdownEpisode(
                start_date=start_date,
                end_date=end_date,
                duration_days=days_between(start_date, end_date),
                max_drawdown_pct=deepest,
                recovered=False,
            ))

        episodes.sort(key=lambda e: e.max_drawdown_pct, reverse=True)
        self.logger.debug(f"Found {len(episodes)} drawdown episodes in {len(points)} points")
        return episodes
