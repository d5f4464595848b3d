import pytest

from checkout.config import Config, load_config
from checkout.main import build_opensea_provider
from checkout.promos.strategies import StrategyType
from checkout.services.opensea import OpenSeaClient


def test_defaults():
    cfg = load_config()

    assert cfg == Config()
    assert cfg.port == 3001
    assert cfg.promotion_strategy is StrategyType.MIN
    assert cfg.opensea_enabled is False


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("PROMOTION_STRATEGY", " stack ")
    monkeypatch.setenv("PRICE_CACHE_TTL_SECONDS", "2.5")
    monkeypatch.setenv("PRICE_MAX_RETRIES", "0")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    cfg = load_config()

    assert cfg.port == 8080
    assert cfg.promotion_strategy is StrategyType.STACK
    assert cfg.price_cache_ttl == 2.5
    assert cfg.price_max_retries == 0
    assert cfg.log_level == "DEBUG"


def test_opensea_enabled_by_api_key(monkeypatch):
    monkeypatch.setenv("OPENSEA_API_KEY", "secret")
    assert load_config().opensea_enabled is True

    monkeypatch.setenv("ENABLE_OPENSEA", "false")
    assert load_config().opensea_enabled is False


@pytest.mark.parametrize(
    "name, value",
    [
        ("PROMOTION_STRATEGY", "CHEAPEST"),
        ("PORT", "http"),
        ("PORT", "70000"),
        ("PRICE_MAX_RETRIES", "-1"),
        ("PRICE_FETCH_TIMEOUT_SECONDS", "soon"),
        ("BREAKER_RESET_SECONDS", "-3"),
        ("BREAKER_FAILURE_THRESHOLD", "0"),
        ("LOG_LEVEL", "FOO"),
    ],
)
def test_invalid_values_fail_at_startup(monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(RuntimeError, match=name):
        load_config()


def test_opensea_provider_uses_configured_resilience():
    cfg = Config(breaker_failure_threshold=2, breaker_reset_timeout=7.0)
    provider = build_opensea_provider(cfg, OpenSeaClient("key"))

    assert provider.circuit_breaker.failure_threshold == 2
    assert provider.circuit_breaker.reset_timeout == 7.0
