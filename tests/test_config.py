import pytest

from portfolio_analytics.config import AnalyticsConfig, create_rng, load_config
from portfolio_analytics.exceptions import InvalidParameterError


def test_defaults(monkeypatch) -> None:
    for name in (
        "ANALYTICS_RISK_FREE_RATE",
        "ANALYTICS_MC_SIMULATIONS",
        "ANALYTICS_CONFIDENCE_LEVELS",
        "ANALYTICS_RANDOM_SEED",
        "ANALYTICS_COUPLING",
    ):
        monkeypatch.delenv(name, raising=False)

    config = load_config()
    assert config.risk_free_rate == 0.025
    assert config.simulations == 10_000
    assert config.confidence_levels == (0.95, 0.99)
    assert config.random_seed == 42
    assert config.coupling == "additive"


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("ANALYTICS_RISK_FREE_RATE", "0.04")
    monkeypatch.setenv("ANALYTICS_MC_SIMULATIONS", "5000")
    monkeypatch.setenv("ANALYTICS_CONFIDENCE_LEVELS", "0.9, 0.975")
    monkeypatch.setenv("ANALYTICS_RANDOM_SEED", "none")
    monkeypatch.setenv("ANALYTICS_COUPLING", "Cholesky")
    monkeypatch.setenv("ANALYTICS_LOG_LEVEL", "debug")

    config = load_config()
    assert config.risk_free_rate == 0.04
    assert config.simulations == 5000
    assert config.confidence_levels == (0.9, 0.975)
    assert config.random_seed is None
    assert config.coupling == "cholesky"
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize("name,value", [
    ("ANALYTICS_MC_SIMULATIONS", "many"),
    ("ANALYTICS_MC_SIMULATIONS", "0"),
    ("ANALYTICS_CONFIDENCE_LEVELS", "0.95,1.5"),
    ("ANALYTICS_COUPLING", "copula"),
    ("ANALYTICS_RANDOM_SEED", "abc"),
])
def test_bad_environment_values(monkeypatch, name, value) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(InvalidParameterError):
        load_config()


def test_seeded_generators_repeat() -> None:
    config = AnalyticsConfig(random_seed=123)

    assert config.create_rng().random() == config.create_rng().random()
    assert config.create_rng(7).random() == create_rng(7).random()
    assert config.create_rng(7).random() != config.create_rng().random()


def test_invalid_config_values() -> None:
    with pytest.raises(InvalidParameterError):
        AnalyticsConfig(simulations=-5)
    with pytest.raises(InvalidParameterError):
        AnalyticsConfig(drawdown_threshold_pct=-1.0)
