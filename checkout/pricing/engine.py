from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from checkout.pricing.money import Money
from checkout.promos.model import CartItem, Promotion, base_price_result
from checkout.promos.strategies import PromotionStrategy


@dataclass(frozen=True)
class PricingLineItem:
    product_code: str
    quantity: int
    unit_price: Money
    total_price: Money
    promotion_applied: str
    description: str


@dataclass(frozen=True)
class PricingResult:
    line_items: tuple[PricingLineItem, ...]
    grand_total: Money


def calculate(
    items: Sequence[CartItem],
    promotions: Sequence[Promotion],
    strategy: PromotionStrategy,
) -> PricingResult:
    line_items = []
    grand_total = Money.zero()

    for item in items:
        applicable = [p for p in promotions if p.is_applicable(item)]
        if applicable:
            result = strategy.resolve(item, applicable)
        else:
            result = base_price_result(item)

        line_items.append(
            PricingLineItem(
                product_code=item.product_code,
                quantity=item.quantity,
                unit_price=item.unit_price,
                total_price=result.total_price,
                promotion_applied=result.promotion_id,
                description=result.description,
            )
        )
        grand_total = grand_total.add(result.total_price)

    return PricingResult(line_items=tuple(line_items), grand_total=grand_total)
