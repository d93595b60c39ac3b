"""
Portfolio Analytics - Main API
FastAPI-based REST API over the risk and performance engines
"""

from fastapi import FastAPI, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import date, datetime
from enum import Enum
import datetime as dt
import logging

from portfolio_analytics import __version__
from portfolio_analytics.config import load_config
from portfolio_analytics.exceptions import AnalyticsError
from portfolio_analytics.models import Asset, AssetClass, ValuePoint
from portfolio_analytics.performance import (
    DrawdownSegmenter,
    PerformanceAnalyzer,
    PerformanceMetricsCalculator,
    PeriodPerformanceBucketing,
    summarize_value_series,
)
from portfolio_analytics.risk_management import STRESS_SCENARIOS, ReturnProfile, RiskEngine

config = load_config()

# Configure logging
logging.basicConfig(level=config.log_level)
logger = logging.getLogger(__name__)

# Initialize FastAPI
app = FastAPI(
    title="Portfolio Analytics API",
    description="Risk and performance analytics for multi-asset portfolios",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize engines
risk_engine = RiskEngine(config)


# Pydantic Models
class AssetClassType(str, Enum):
    STOCK = "stock"
    CRYPTO = "crypto"
    ETF = "etf"
    INDEX = "index"


class CouplingType(str, Enum):
    ADDITIVE = "additive"
    CHOLESKY = "cholesky"


class AssetModel(BaseModel):
    symbol: str
    name: str = ""
    asset_class: AssetClassType = AssetClassType.STOCK
    sector: str = ""
    currency: str = "USD"

    def to_asset(self) -> Asset:
        return Asset(
            symbol=self.symbol,
            name=self.name or self.symbol,
            asset_class=AssetClass(self.asset_class.value),
            sector=self.sector,
            currency=self.currency,
        )


class PortfolioRequest(BaseModel):
    assets: List[AssetModel]
    allocations: Dict[str, float] = Field(..., description="Weight percentage per symbol")

    def to_assets(self) -> List[Asset]:
        return [a.to_asset() for a in self.assets]


class ValuedPortfolioRequest(PortfolioRequest):
    portfolio_value: float = Field(..., gt=0)


class VolatilityRequest(PortfolioRequest):
    volatility_overrides: Optional[Dict[str, float]] = None


class ReturnProfileModel(BaseModel):
    expected_return: float
    volatility: float = Field(..., ge=0)


class VaRRequest(ValuedPortfolioRequest):
    simulations: Optional[int] = None
    confidence_levels: Optional[List[float]] = None
    seed: Optional[int] = None
    coupling: Optional[CouplingType] = None
    return_profiles: Optional[Dict[str, ReturnProfileModel]] = None


class StressTestRequest(ValuedPortfolioRequest):
    scenarios: Optional[List[str]] = None


class ReportRequest(ValuedPortfolioRequest):
    simulations: Optional[int] = None
    seed: Optional[int] = None


class ValuePointModel(BaseModel):
    date: dt.date
    value: float
    cumulative_contributed: Optional[float] = None

    def to_point(self) -> ValuePoint:
        return ValuePoint(self.date, self.value, self.cumulative_contributed)


class MetricsRequest(BaseModel):
    portfolio_returns: List[float]
    benchmark_returns: List[float]
    risk_free_rate: Optional[float] = None


class SeriesRequest(BaseModel):
    series: List[ValuePointModel]


class PeriodsRequest(BaseModel):
    portfolio: List[ValuePointModel]
    benchmark: List[ValuePointModel]
    as_of: Optional[date] = None
    net_benchmark_contributions: bool = False


class DrawdownRequest(SeriesRequest):
    threshold_pct: Optional[float] = None


def _points(models: List[ValuePointModel]) -> List[ValuePoint]:
    return [m.to_point() for m in models]


def _analytics_error(e: AnalyticsError) -> HTTPException:
    logger.warning(f"Analytics request rejected ({e.kind}): {e.message}")
    return HTTPException(status_code=422, detail=e.to_dict())


@app.get("/health")
async def health():
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now().isoformat()
    }


@app.get("/api/risk/scenarios")
async def list_scenarios():
    """Stress scenario catalog"""
    return {"scenarios": [s.to_dict() for s in STRESS_SCENARIOS]}


@app.post("/api/risk/correlation")
async def correlation_matrix(request: PortfolioRequest):
    """Heuristic correlation matrix for the portfolio assets"""
    try:
        return risk_engine.correlation_matrix(request.to_assets()).to_dict()
    except AnalyticsError as e:
        raise _analytics_error(e)
    except Exception as e:
        logger.error(f"Correlation error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/api/risk/volatility")
async def portfolio_volatility(request: VolatilityRequest):
    """Volatility decomposition and diversification benefit"""
    try:
        analysis = risk_engine.analyze_volatility(
            request.to_assets(),
            request.allocations,
            volatility_overrides=request.volatility_overrides
        )
        return analysis.to_dict()
    except AnalyticsError as e:
        raise _analytics_error(e)
    except Exception as e:
        logger.error(f"Volatility analysis error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/api/risk/var")
async def value_at_risk(request: VaRRequest):
    """Monte Carlo Value at Risk"""
    profiles = None
    if request.return_profiles:
        profiles = {
            symbol: ReturnProfile(p.expected_return, p.volatility)
            for symbol, p in request.return_profiles.items()
        }

    try:
        results = await run_in_threadpool(
            risk_engine.calculate_var,
            request.to_assets(),
            request.allocations,
            request.portfolio_value,
            simulations=request.simulations,
            confidence_levels=request.confidence_levels,
            seed=request.seed,
            coupling=request.coupling.value if request.coupling else None,
            profile_overrides=profiles,
        )
        return {"results": [r.to_dict() for r in results]}
    except AnalyticsError as e:
        raise _analytics_error(e)
    except Exception as e:
        logger.error(f"VaR calculation error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/api/risk/stress-test")
async def run_stress_test(request: StressTestRequest):
    """Run stress scenarios on the portfolio"""
    try:
        result = risk_engine.run_stress_test(
            request.to_assets(),
            request.allocations,
            request.portfolio_value,
            scenario_keys=request.scenarios
        )
        return result.to_dict()
    except AnalyticsError as e:
        raise _analytics_error(e)
    except Exception as e:
        logger.error(f"Stress test error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/api/risk/diversification")
async def diversification(request: PortfolioRequest):
    """Concentration (HHI) analysis"""
    try:
        report = risk_engine.analyze_diversification(request.to_assets(), request.allocations)
        return report.to_dict()
    except AnalyticsError as e:
        raise _analytics_error(e)
    except Exception as e:
        logger.error(f"Diversification error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/api/risk/report")
async def risk_report(request: ReportRequest):
    """Full risk report"""
    try:
        report = await run_in_threadpool(
            risk_engine.calculate_all_metrics,
            request.to_assets(),
            request.allocations,
            request.portfolio_value,
            simulations=request.simulations,
            seed=request.seed,
        )
        return report.to_dict()
    except AnalyticsError as e:
        raise _analytics_error(e)
    except Exception as e:
        logger.error(f"Risk report error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/api/performance/metrics")
async def performance_metrics(request: MetricsRequest):
    """Sharpe, Sortino, Alpha, Beta and related statistics"""
    rf = request.risk_free_rate if request.risk_free_rate is not None else config.risk_free_rate
    try:
        calculator = PerformanceMetricsCalculator(risk_free_rate=rf)
        metrics = calculator.calculate(request.portfolio_returns, request.benchmark_returns)
        return metrics.to_dict()
    except AnalyticsError as e:
        raise _analytics_error(e)
    except Exception as e:
        logger.error(f"Performance metrics error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/api/performance/periods")
async def period_performance(request: PeriodsRequest):
    """Calendar year and quarter returns vs benchmark"""
    try:
        bucketing = PeriodPerformanceBucketing(
            net_benchmark_contributions=request.net_benchmark_contributions
        )
        periods = bucketing.calculate(
            _points(request.portfolio),
            _points(request.benchmark),
            as_of=request.as_of
        )
        return {"periods": [p.to_dict() for p in periods]}
    except AnalyticsError as e:
        raise _analytics_error(e)
    except Exception as e:
        logger.error(f"Period performance error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/api/performance/drawdowns")
async def drawdown_episodes(request: DrawdownRequest):
    """Drawdown episodes, most severe first"""
    threshold = (
        request.threshold_pct if request.threshold_pct is not None
        else config.drawdown_threshold_pct
    )
    try:
        episodes = DrawdownSegmenter(threshold_pct=threshold).segment(_points(request.series))
        return {"drawdowns": [e.to_dict() for e in episodes]}
    except AnalyticsError as e:
        raise _analytics_error(e)
    except Exception as e:
        logger.error(f"Drawdown analysis error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/api/performance/summary")
async def series_summary(request: SeriesRequest):
    """Total / annualized return, volatility and max drawdown of a value series"""
    try:
        return summarize_value_series(_points(request.series)).to_dict()
    except AnalyticsError as e:
        raise _analytics_error(e)
    except Exception as e:
        logger.error(f"Series summary error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/api/performance/report")
async def performance_report(request: PeriodsRequest):
    """Full performance report"""
    try:
        analyzer = PerformanceAnalyzer(
            config, net_benchmark_contributions=request.net_benchmark_contributions
        )
        report = analyzer.analyze(
            _points(request.portfolio),
            _points(request.benchmark),
            as_of=request.as_of
        )
        return report.to_dict()
    except AnalyticsError as e:
        raise _analytics_error(e)
    except Exception as e:
        logger.error(f"Performance report error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


# Startup event
@app.on_event("startup")
async def startup_event():
    logger.info("Portfolio Analytics API starting up...")
    logger.info(
        f"Monte Carlo: {config.simulations} simulations, coupling {config.coupling}, "
        f"seed {config.random_seed}"
    )


# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Portfolio Analytics API shutting down...")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
