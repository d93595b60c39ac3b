"""
Analytics Configuration
Engine defaults, environment overrides and random source construction
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np

from .exceptions import InvalidParameterError

TRADING_DAYS_PER_YEAR = 252

DEFAULT_RISK_FREE_RATE = 0.025
DEFAULT_SIMULATIONS = 10_000
DEFAULT_CONFIDENCE_LEVELS = (0.95, 0.99)
DEFAULT_RANDOM_SEED = 42
DEFAULT_COUPLING_DAMPING = 0.3
DEFAULT_DRAWDOWN_THRESHOLD_PCT = 1.0
DEFAULT_BATCH_SIZE = 50_000

COUPLING_METHODS = ("additive", "cholesky")


@dataclass
class AnalyticsConfig:
    """Analytics engine configuration"""
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE
    simulations: int = DEFAULT_SIMULATIONS
    confidence_levels: Tuple[float, ...] = field(default_factory=lambda: DEFAULT_CONFIDENCE_LEVELS)
    random_seed: Optional[int] = DEFAULT_RANDOM_SEED  # None -> fresh entropy
    coupling: str = "additive"
    coupling_damping: float = DEFAULT_COUPLING_DAMPING
    drawdown_threshold_pct: float = DEFAULT_DRAWDOWN_THRESHOLD_PCT
    batch_size: int = DEFAULT_BATCH_SIZE
    log_level: str = "INFO"

    def __post_init__(self):
        if self.simulations <= 0:
            raise InvalidParameterError(f"simulations must be positive, got {self.simulations}")
        if self.batch_size <= 0:
            raise InvalidParameterError(f"batch_size must be positive, got {self.batch_size}")
        if self.coupling not in COUPLING_METHODS:
            raise InvalidParameterError(
                f"coupling must be one of {COUPLING_METHODS}, got {self.coupling!r}"
            )
        for level in self.confidence_levels:
            if not 0 < level < 1:
                raise InvalidParameterError(f"confidence level must be in (0, 1), got {level}")
        if self.drawdown_threshold_pct < 0:
            raise InvalidParameterError("drawdown_threshold_pct cannot be negative")

    def create_rng(self, seed: Optional[int] = None) -> np.random.Generator:
        """New generator for one invocation; an explicit seed wins over the configured one"""
        return create_rng(seed if seed is not None else self.random_seed)


def create_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Seeded generator, or fresh OS entropy when seed is None"""
    return np.random.default_rng(seed)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise InvalidParameterError(f"{name} must be a number, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise InvalidParameterError(f"{name} must be an integer, got {raw!r}")


def _env_seed(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None:
        return default
    if raw.strip().lower() in ("", "none", "random"):
        return None
    try:
        return int(raw)
    except ValueError:
        raise InvalidParameterError(f"{name} must be an integer or 'none', got {raw!r}")


def _env_levels(name: str, default: Tuple[float, ...]) -> Tuple[float, ...]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return tuple(float(part) for part in raw.split(",") if part.strip())
    except ValueError:
        raise InvalidParameterError(f"{name} must be comma-separated numbers, got {raw!r}")


def load_config() -> AnalyticsConfig:
    """Build configuration from ANALYTICS_* environment variables"""
    return AnalyticsConfig(
        risk_free_rate=_env_float("ANALYTICS_RISK_FREE_RATE", DEFAULT_RISK_FREE_RATE),
        simulations=_env_int("ANALYTICS_MC_SIMULATIONS", DEFAULT_SIMULATIONS),
        confidence_levels=_env_levels("ANALYTICS_CONFIDENCE_LEVELS", DEFAULT_CONFIDENCE_LEVELS),
        random_seed=_env_seed("ANALYTICS_RANDOM_SEED", DEFAULT_RANDOM_SEED),
        coupling=os.getenv("ANALYTICS_COUPLING", "additive").strip().lower(),
        coupling_damping=_env_float("ANALYTICS_COUPLING_DAMPING", DEFAULT_COUPLING_DAMPING),
        drawdown_threshold_pct=_env_float(
            "ANALYTICS_DRAWDOWN_THRESHOLD_PCT", DEFAULT_DRAWDOWN_THRESHOLD_PCT
        ),
        batch_size=_env_int("ANALYTICS_MC_BATCH_SIZE", DEFAULT_BATCH_SIZE),
        log_level=os.getenv("ANALYTICS_LOG_LEVEL", "INFO").upper(),
    )
