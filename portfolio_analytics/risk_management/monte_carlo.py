"""
Monte Carlo Value at Risk
Correlated daily-return sampling and empirical VaR / Expected Shortfall
"""

import math
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
from scipy.stats import norm

from ..config import (
    COUPLING_METHODS,
    DEFAULT_BATCH_SIZE,
    DEFAULT_CONFIDENCE_LEVELS,
    DEFAULT_COUPLING_DAMPING,
    DEFAULT_SIMULATIONS,
    create_rng,
)
from ..exceptions import InvalidParameterError
from ..models import AllocationWeights, Asset, weight_vector
from .correlation import CorrelationMatrix

logger = logging.getLogger(__name__)

WEEK_SCALE = math.sqrt(7)
MONTH_SCALE = math.sqrt(30)


@dataclass(frozen=True)
class ReturnProfile:
    """Expected daily return and daily volatility of an asset"""
    expected_return: float
    volatility: float


CRYPTO_PROFILE = ReturnProfile(0.001, 0.06)
SECTOR_PROFILES: Tuple[Tuple[str, ReturnProfile], ...] = (
    ("Technology", ReturnProfile(0.0008, 0.025)),
    ("Bonds", ReturnProfile(0.0002, 0.005)),
)
DEFAULT_PROFILE = ReturnProfile(0.0005, 0.02)


def return_profile(asset: Asset) -> ReturnProfile:
    if asset.is_crypto:
        return CRYPTO_PROFILE
    for keyword, profile in SECTOR_PROFILES:
        if keyword in (asset.sector or ""):
            return profile
    return DEFAULT_PROFILE


def box_muller(rng: np.random.Generator, size) -> np.ndarray:
    """Standard normal draws from pairs of uniforms"""
    u1 = 1.0 - rng.random(size)  # (0, 1], keeps log finite
    u2 = rng.random(size)
    return np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)


def nearest_correlation(matrix: np.ndarray, eps: float = 1e-8) -> np.ndarray:
    """Project onto the PSD cone by eigenvalue clipping, then restore the unit diagonal"""
    sym = 0.5 * (matrix + matrix.T)
    eigenvalues, eigenvectors = np.linalg.eigh(sym)
    clipped = (eigenvectors * np.clip(eigenvalues, eps, None)) @ eigenvectors.T
    d = np.sqrt(np.diag(clipped))
    projected = clipped / np.outer(d, d)
    np.fill_diagonal(projected, 1.0)
    return projected


class ReturnSimulator:
    """
    Correlated multi-asset daily-return sampler

    Every draw is linear in a vector of independent standard normals:
    r = mean + M z. The additive method couples asset i to the independent
    returns of assets j < i with strength rho_ij * damping; the Cholesky
    method uses the lower Cholesky factor of the correlation matrix and
    produces exactly correlated normals.
    """

    def __init__(
        self,
        assets: Sequence[Asset],
        correlation: CorrelationMatrix,
        rng: Optional[np.random.Generator] = None,
        coupling: str = "additive",
        damping: float = DEFAULT_COUPLING_DAMPING,
        profile_overrides: Optional[Dict[str, ReturnProfile]] = None
    ):
        if coupling not in COUPLING_METHODS:
            raise InvalidParameterError(
                f"coupling must be one of {COUPLING_METHODS}, got {coupling!r}"
            )
        correlation.validate(assets)
        overrides = profile_overrides or {}

        self.assets = list(assets)
        self.coupling = coupling
        self.damping = damping
        self.rng = rng if rng is not None else create_rng()
        self.logger = logging.getLogger(self.__class__.__name__)

        profiles = [overrides.get(a.symbol, return_profile(a)) for a in self.assets]
        self.expected_returns = np.array([p.expected_return for p in profiles], dtype=float)
        self.volatilities = np.array([p.volatility for p in profiles], dtype=float)
        if np.any(self.volatilities < 0):
            raise InvalidParameterError("daily volatility cannot be negative")

        self.mean, self.mixing = self._linear_model(correlation.values)

    @property
    def n_assets(self) -> int:
        return len(self.assets)

    def _linear_model(self, rho: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        n = self.n_assets
        if n == 0:
            return np.zeros(0), np.zeros((0, 0))

        if self.coupling == "additive":
            # Coupling acts on the full independent return (mean included)
            coupling = np.eye(n) + self.damping * np.tril(rho, k=-1)
            return coupling @ self.expected_returns, coupling * self.volatilities[np.newaxis, :]

        try:
            chol = np.linalg.cholesky(rho)
        except np.linalg.LinAlgError:
            self.logger.warning("Correlation matrix not positive definite; using nearest PSD projection")
            chol = np.linalg.cholesky(nearest_correlation(rho))
        return self.expected_returns.copy(), self.volatilities[:, np.newaxis] * chol

    def simulate(self, n_draws: int) -> np.ndarray:
        """Array of shape (n_draws, n_assets) of correlated daily returns"""
        z = box_muller(self.rng, (n_draws, self.n_assets))
        return self.mean + z @ self.mixing.T

    def draw(self) -> np.ndarray:
        """One correlated daily-return vector"""
        return self.simulate(1)[0]

    def portfolio_moments(self, weights: np.ndarray) -> Tuple[float, float]:
        """Exact mean and standard deviation of w . r under the sampling model"""
        mean = float(weights @ self.mean)
        std = float(np.linalg.norm(self.mixing.T @ weights))
        return mean, std


@dataclass
class VaRResult:
    """Value at Risk at one confidence level; currency amounts, positive = loss"""
    confidence: float
    var_1day: float
    var_1week: float
    var_1month: float
    expected_shortfall: float
    worst_case: float
    best_case: float
    parametric_var_1day: float
    simulations: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "confidence": self.confidence,
            "var_1day": self.var_1day,
            "var_1week": self.var_1week,
            "var_1month": self.var_1month,
            "expected_shortfall": self.expected_shortfall,
            "worst_case": self.worst_case,
            "best_case": self.best_case,
            "parametric_var_1day": self.parametric_var_1day,
            "simulations": self.simulations,
        }


def tail_index(confidence: float, simulations: int) -> int:
    """floor((1 - c) * n), guarded against binary round-off and capped at n - 1"""
    index = int(math.floor((1.0 - confidence) * simulations + 1e-9))
    return min(max(index, 0), simulations - 1)


class MonteCarloVaR:
    """
    Monte Carlo VaR engine

    Each confidence level gets its own independent set of draws. Draws are
    generated in batches of at most batch_size vectors.
    """

    def __init__(
        self,
        simulations: int = DEFAULT_SIMULATIONS,
        confidence_levels: Sequence[float] = DEFAULT_CONFIDENCE_LEVELS,
        rng: Optional[np.random.Generator] = None,
        coupling: str = "additive",
        coupling_damping: float = DEFAULT_COUPLING_DAMPING,
        batch_size: int = DEFAULT_BATCH_SIZE
    ):
        if simulations <= 0:
            raise InvalidParameterError(f"simulations must be positive, got {simulations}")
        if batch_size <= 0:
            raise InvalidParameterError(f"batch_size must be positive, got {batch_size}")
        for level in confidence_levels:
            if not 0 < level < 1:
                raise InvalidParameterError(f"confidence level must be in (0, 1), got {level}")

        self.simulations = int(simulations)
        self.confidence_levels = tuple(confidence_levels)
        self.rng = rng if rng is not None else create_rng()
        self.coupling = coupling
        self.coupling_damping = coupling_damping
        self.batch_size = int(batch_size)
        self.logger = logging.getLogger(self.__class__.__name__)

    def simulate_portfolio_returns(
        self,
        simulator: ReturnSimulator,
        weights: np.ndarray
    ) -> np.ndarray:
        """Sorted empirical distribution of one-day portfolio returns"""
        chunks = []
        remaining = self.simulations
        while remaining > 0:
            size = min(remaining, self.batch_size)
            chunks.append(simulator.simulate(size) @ weights)
            remaining -= size
        return np.sort(np.concatenate(chunks))

    def calculate(
        self,
        assets: Sequence[Asset],
        allocations: AllocationWeights,
        portfolio_value: float,
        correlation: CorrelationMatrix,
        profile_overrides: Optional[Dict[str, ReturnProfile]] = None
    ) -> List[VaRResult]:
        """
        Calculate VaR for every configured confidence level

        Args:
            assets: Portfolio assets
            allocations: Weight percentages per symbol
            portfolio_value: Portfolio notional in base currency
            correlation: Correlation matrix aligned with assets
            profile_overrides: Optional daily return profile per symbol
        """
        if portfolio_value < 0 or not np.isfinite(portfolio_value):
            raise InvalidParameterError(f"portfolio value must be nonnegative, got {portfolio_value}")

        if not assets:
            return [self._empty_result(c) for c in self.confidence_levels]

        weights = weight_vector(assets, allocations)
        simulator = ReturnSimulator(
            assets,
            correlation,
            rng=self.rng,
            coupling=self.coupling,
            damping=self.coupling_damping,
            profile_overrides=profile_overrides,
        )
        mean, std = simulator.portfolio_moments(weights)

        results = []
        for confidence in self.confidence_levels:
            returns = self.simulate_portfolio_returns(simulator, weights)
            index = tail_index(confidence, self.simulations)

            var_1day = -returns[index] * portfolio_value
            tail = returns[:index]
            if len(tail) > 0:
                expected_shortfall = -tail.mean() * portfolio_value
            else:
                expected_shortfall = var_1day

            parametric = -(mean + std * norm.ppf(1 - confidence)) * portfolio_value

            results.append(VaRResult(
                confidence=confidence,
                var_1day=float(var_1day),
                var_1week=float(var_1day * WEEK_SCALE),
                var_1month=float(var_1day * MONTH_SCALE),
                expected_shortfall=float(expected_shortfall),
                worst_case=float(-returns[0] * portfolio_value),
                best_case=float(-returns[-1] * portfolio_value),
                parametric_var_1day=float(parametric),
                simulations=self.simulations,
            ))

        self.logger.info(
            f"Monte Carlo VaR: {len(assets)} assets, {self.simulations} simulations, "
            f"levels {list(self.confidence_levels)}"
        )
        return results

    def _empty_result(self, confidence: float) -> VaRResult:
        return VaRResult(
            confidence=confidence,
            var_1day=0.0,
            var_1week=0.0,
            var_1month=0.0,
            expected_shortfall=0.0,
            worst_case=0.0,
            best_case=0.0,
            parametric_var_1day=0.0,
            simulations=self.simulations,
        )
