from datetime import datetime, timezone
from typing import Mapping, Optional

from checkout.errors import UnknownProduct
from checkout.pricing.money import Money
from checkout.prices.provider import PriceSnapshot

DEFAULT_PRICES: Mapping[str, Money] = {
    "APE": Money.from_major_units(75),
    "PUNK": Money.from_major_units(60),
    "AZUKI": Money.from_major_units(30),
    "MEEBIT": Money.from_major_units(4),
}


class MockPriceProvider:
    """Fixed prices, always fresh. Used when no upstream API key is configured."""

    def __init__(self, prices: Optional[Mapping[str, Money]] = None):
        self._prices = dict(prices if prices is not None else DEFAULT_PRICES)

    async def get_price(self, code: str) -> Money:
        price = self._prices.get(code)
        if price is None:
            raise UnknownProduct(code)
        return price

    async def get_all_prices(self) -> PriceSnapshot:
        return PriceSnapshot.create(self._prices, datetime.now(timezone.utc))
