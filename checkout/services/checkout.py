from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Sequence

from checkout.errors import UnknownProduct
from checkout.pricing.engine import PricingLineItem, calculate
from checkout.pricing.money import Money
from checkout.prices.provider import PriceProvider
from checkout.promos.model import CartItem, Promotion
from checkout.promos.strategies import PromotionStrategy

logger = logging.getLogger(__name__)

QUOTE_VALIDITY = timedelta(seconds=30)


@dataclass(frozen=True)
class CartLine:
    """Already validated request line: known product, positive bounded quantity."""

    product_code: str
    quantity: int


def isoformat_utc(value: datetime) -> str:
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _line_to_dict(line: PricingLineItem) -> Dict[str, Any]:
    return {
        "productCode": line.product_code,
        "quantity": line.quantity,
        "unitPriceWei": str(line.unit_price.to_minor_units()),
        "totalPriceWei": str(line.total_price.to_minor_units()),
        "unitPriceEth": line.unit_price.to_display_string(),
        "totalPriceEth": line.total_price.to_display_string(),
        "promotionApplied": line.promotion_applied,
        "description": line.description,
    }


@dataclass(frozen=True)
class CheckoutQuote:
    line_items: tuple[PricingLineItem, ...]
    grand_total: Money
    strategy_used: str
    prices_fetched_at: datetime
    price_valid_until: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lineItems": [_line_to_dict(li) for li in self.line_items],
            "grandTotalWei": str(self.grand_total.to_minor_units()),
            "grandTotalEth": self.grand_total.to_display_string(),
            "strategyUsed": self.strategy_used,
            "pricesFetchedAt": isoformat_utc(self.prices_fetched_at),
            "priceValidUntil": isoformat_utc(self.price_valid_until),
        }


class CheckoutService:
    def __init__(
        self,
        price_provider: PriceProvider,
        promotions: Sequence[Promotion],
        strategy: PromotionStrategy,
        quote_validity: timedelta = QUOTE_VALIDITY,
    ):
        self.price_provider = price_provider
        self.promotions = tuple(promotions)
        self.strategy = strategy
        self.quote_validity = quote_validity

    async def calculate_checkout(self, lines: Sequence[CartLine]) -> CheckoutQuote:
        snapshot = await self.price_provider.get_all_prices()

        items = []
        for line in lines:
            price = snapshot.prices.get(line.product_code)
            if price is None:
                raise UnknownProduct(line.product_code)
            items.append(CartItem(product_code=line.product_code, unit_price=price, quantity=line.quantity))

        result = calculate(items, self.promotions, self.strategy)
        logger.debug(
            "Priced %d lines with %s: grand total %s",
            len(items),
            self.strategy.name,
            result.grand_total.to_decimal_string(),
        )

        return CheckoutQuote(
            line_items=result.line_items,
            grand_total=result.grand_total,
            strategy_used=self.strategy.name,
            prices_fetched_at=snapshot.fetched_at,
            price_valid_until=snapshot.fetched_at + self.quote_validity,
        )
