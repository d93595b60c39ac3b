"""
Stress Testing
Named macro scenarios applied to portfolio allocations
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..exceptions import InvalidParameterError
from ..models import AllocationWeights, Asset, AssetClass

logger = logging.getLogger(__name__)


class RiskRating(Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    VERY_HIGH = "Very High"


# Shock keys used for class-level overrides
CLASS_SHOCK_KEYS = {
    AssetClass.CRYPTO: "Crypto",
}


@dataclass(frozen=True)
class StressScenario:
    """Static scenario definition"""
    key: str
    name: str
    description: str
    market_shock: float
    sector_shocks: Mapping[str, float]
    probability: float

    def shock_for(self, asset: Asset) -> float:
        """Class override, then sector override, then the market-wide shock"""
        class_key = CLASS_SHOCK_KEYS.get(asset.asset_class)
        if class_key is not None and class_key in self.sector_shocks:
            return self.sector_shocks[class_key]
        if asset.sector in self.sector_shocks:
            return self.sector_shocks[asset.sector]
        return self.market_shock

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "description": self.description,
            "market_shock": self.market_shock,
            "sector_shocks": dict(self.sector_shocks),
            "probability": self.probability,
        }


def _scenario(key, name, description, market_shock, sector_shocks, probability) -> StressScenario:
    return StressScenario(
        key=key,
        name=name,
        description=description,
        market_shock=market_shock,
        sector_shocks=MappingProxyType(dict(sector_shocks)),
        probability=probability,
    )


STRESS_SCENARIOS: Tuple[StressScenario, ...] = (
    _scenario(
        "global_financial_crisis",
        "2008 Global Financial Crisis",
        "Equities -37%, bonds +5%, gold +5%, crypto -80%",
        -0.20,
        {
            "Technology": -0.45,
            "Healthcare": -0.25,
            "Financial": -0.55,
            "Bonds": 0.05,
            "Precious Metals": 0.05,
            "Crypto": -0.80,
        },
        0.02,
    ),
    _scenario(
        "pandemic_shock",
        "2020 COVID-19 Pandemic",
        "Equities -34%, technology +15%, crypto -50%",
        -0.15,
        {
            "Technology": 0.15,
            "Healthcare": -0.10,
            "Travel": -0.70,
            "Energy": -0.50,
            "Bonds": 0.08,
            "Crypto": -0.50,
        },
        0.05,
    ),
    _scenario(
        "rate_hike_shock",
        "Sharp Rate Hike",
        "Rates +3pp, bonds -15%, growth stocks -25%",
        -0.10,
        {
            "Technology": -0.25,
            "Real Estate": -0.30,
            "Bonds": -0.15,
            "Precious Metals": -0.10,
            "Financial": 0.10,
        },
        0.15,
    ),
    _scenario(
        "inflation_spike",
        "Inflation Spike",
        "Inflation 8%, gold +20%, bonds -10%",
        -0.05,
        {
            "Precious Metals": 0.20,
            "Energy": 0.15,
            "Bonds": -0.10,
            "Technology": -0.15,
            "Consumer": -0.08,
        },
        0.10,
    ),
    _scenario(
        "crypto_crash",
        "Crypto Crash",
        "Major cryptocurrencies -90%, related technology -20%",
        -0.02,
        {
            "Crypto": -0.90,
            "Technology": -0.20,
            "Financial": -0.10,
        },
        0.08,
    ),
)

SCENARIOS_BY_KEY: Mapping[str, StressScenario] = MappingProxyType(
    {s.key: s for s in STRESS_SCENARIOS}
)


def get_scenario(key: str) -> StressScenario:
    if key not in SCENARIOS_BY_KEY:
        raise InvalidParameterError(f"Unknown scenario: {key}")
    return SCENARIOS_BY_KEY[key]


def rate_resilience(resilience: float) -> RiskRating:
    if resilience > 80:
        return RiskRating.LOW
    elif resilience > 60:
        return RiskRating.MEDIUM
    elif resilience > 40:
        return RiskRating.HIGH
    return RiskRating.VERY_HIGH


@dataclass
class AssetImpact:
    symbol: str
    allocation: float
    shock: float
    impact: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "asset": self.symbol,
            "allocation": self.allocation,
            "shock": self.shock,
            "impact": self.impact,
        }


@dataclass
class ScenarioResult:
    """Outcome of one scenario; result in currency (negative = loss)"""
    scenario: StressScenario
    result: float
    asset_impacts: List[AssetImpact] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = self.scenario.to_dict()
        data["result"] = self.result
        data["asset_impacts"] = [i.to_dict() for i in self.asset_impacts]
        return data


@dataclass
class StressTestResult:
    scenarios: List[ScenarioResult]
    portfolio_resilience: float
    risk_rating: RiskRating
    average_loss: float

    @property
    def worst(self) -> Optional[ScenarioResult]:
        return self.scenarios[0] if self.scenarios else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scenarios": [s.to_dict() for s in self.scenarios],
            "portfolio_resilience": self.portfolio_resilience,
            "risk_rating": self.risk_rating.value,
            "average_loss": self.average_loss,
        }


class StressTestEngine:
    """
    Stress testing and scenario analysis
    """

    def __init__(self, scenarios: Sequence[StressScenario] = STRESS_SCENARIOS):
        self.scenarios = tuple(scenarios)
        self.logger = logging.getLogger(self.__class__.__name__)

    def run_scenario(
        self,
        assets: Sequence[Asset],
        allocations: AllocationWeights,
        portfolio_value: float,
        scenario: StressScenario
    ) -> ScenarioResult:
        """Apply one scenario to the portfolio"""
        total = 0.0
        impacts = []
        for asset in assets:
            allocation = float(allocations.get(asset.symbol, 0.0)) / 100
            shock = scenario.shock_for(asset)
            impact = allocation * portfolio_value * shock
            total += impact
            impacts.append(AssetImpact(asset.symbol, allocation * 100, shock, impact))

        return ScenarioResult(scenario=scenario, result=total, asset_impacts=impacts)

    def run_stress_test(
        self,
        assets: Sequence[Asset],
        allocations: AllocationWeights,
        portfolio_value: float,
        scenario_keys: Optional[Sequence[str]] = None
    ) -> StressTestResult:
        """
        Run the scenario catalog (or a subset of it) against the portfolio

        Args:
            assets: Portfolio assets
            allocations: Weight percentages per symbol
            portfolio_value: Portfolio notional in base currency
            scenario_keys: Optional subset of scenario keys

        Returns:
            Scenario results sorted most negative first, with resilience score
        """
        if portfolio_value <= 0:
            raise InvalidParameterError(f"portfolio value must be positive, got {portfolio_value}")

        if scenario_keys is None:
            scenarios = self.scenarios
        else:
            known = {s.key: s for s in self.scenarios}
            missing = [k for k in scenario_keys if k not in known]
            if missing:
                raise InvalidParameterError(f"Unknown scenario: {', '.join(missing)}")
            scenarios = tuple(known[k] for k in scenario_keys)

        results = [
            self.run_scenario(assets, allocations, portfolio_value, s)
            for s in scenarios
        ]
        results.sort(key=lambda r: r.result)

        if results:
            worst = results[0].result
            average_loss = sum(abs(r.result) for r in results) / len(results)
        else:
            worst = 0.0
            average_loss = 0.0

        resilience = max(0.0, 100 - abs(worst) / portfolio_value * 100)
        rating = rate_resilience(resilience)

        if results:
            self.logger.info(
                f"Stress test: worst scenario {results[0].scenario.key} "
                f"({results[0].result:,.2f}), resilience {resilience:.1f}"
            )
        return StressTestResult(
            scenarios=results,
            portfolio_resilience=resilience,
            risk_rating=rating,
            average_loss=average_loss,
        )
