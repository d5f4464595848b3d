"""Pytest fixtures for checkout quote tests."""

import pytest

from checkout.pricing.money import Money
from checkout.promos.model import CartItem
from checkout.promos.storage import DEFAULT_PROMOTIONS


class FakeClock:
    """Manually advanced replacement for time.monotonic."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def eth(value) -> Money:
    if isinstance(value, int):
        return Money.from_major_units(value)
    return Money.from_decimal_string(value)


@pytest.fixture(autouse=True)
def clear_checkout_env(monkeypatch):
    for key in [
        "APP_ENV",
        "HOST",
        "PORT",
        "OPENSEA_API_KEY",
        "OPENSEA_BASE_URL",
        "ENABLE_OPENSEA",
        "PROMOTION_STRATEGY",
        "PRICE_CACHE_TTL_SECONDS",
        "PRICE_FETCH_TIMEOUT_SECONDS",
        "PRICE_MAX_RETRIES",
        "PRICE_RETRY_BASE_SECONDS",
        "BREAKER_FAILURE_THRESHOLD",
        "BREAKER_RESET_SECONDS",
        "QUOTE_VALIDITY_SECONDS",
        "PROMOTIONS_PATH",
        "LOG_LEVEL",
    ]:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def promotions():
    return list(DEFAULT_PROMOTIONS)


@pytest.fixture
def azuki_x3() -> CartItem:
    # the worked example: 3 Azuki at 5 ETH, both default promotions eligible
    return CartItem(product_code="AZUKI", unit_price=eth(5), quantity=3)
