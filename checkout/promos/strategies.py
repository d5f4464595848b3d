"""
Conflict resolution when several promotions match one cart line.

The caller passes only promotions whose ``is_applicable`` is already true.
"""
from __future__ import annotations

from enum import Enum
from typing import Protocol, Sequence

from checkout.pricing.money import Money
from checkout.promos.model import CartItem, Promotion, PromotionResult, base_price_result


class StrategyType(str, Enum):
    MIN = "MIN"
    PRIORITY = "PRIORITY"
    STACK = "STACK"


class PromotionStrategy(Protocol):
    name: str

    def resolve(self, item: CartItem, promotions: Sequence[Promotion]) -> PromotionResult:
        ...


class MinStrategy:
    """Cheapest result wins; on equal totals the earlier candidate (base price first) is kept."""

    name = StrategyType.MIN.value

    def resolve(self, item: CartItem, promotions: Sequence[Promotion]) -> PromotionResult:
        best = base_price_result(item)

        for promo in promotions:
            result = promo.apply(item)
            if result is not None and result.total_price < best.total_price:
                best = result

        return best


class PriorityStrategy:
    name = StrategyType.PRIORITY.value

    def resolve(self, item: CartItem, promotions: Sequence[Promotion]) -> PromotionResult:
        # sorted() is stable: equal priorities keep input order
        for promo in sorted(promotions, key=lambda p: p.priority):
            result = promo.apply(item)
            if result is not None:
                return result

        return base_price_result(item)


class StackStrategy:
    """
    Applies every matching promotion multiplicatively.

    The first result seeds the running total; each later one scales it by
    ``result / base`` in integer arithmetic, so 2/3 then 4/5 of the base
    gives 8/15 of it rather than a sum of discounts. Order is priority,
    then id, independent of input order.
    """

    name = StrategyType.STACK.value

    def resolve(self, item: CartItem, promotions: Sequence[Promotion]) -> PromotionResult:
        base_total = item.base_total
        current = base_total
        descriptions: list[str] = []
        applied_ids: list[str] = []

        for promo in sorted(promotions, key=lambda p: (p.priority, p.id)):
            result = promo.apply(item)
            if result is None:
                continue

            if not applied_ids:
                current = result.total_price
            elif not base_total.is_zero():
                current = Money(
                    current.to_minor_units() * result.total_price.to_minor_units()
                    // base_total.to_minor_units()
                )

            descriptions.append(result.description)
            applied_ids.append(result.promotion_id)

        if not applied_ids:
            return base_price_result(item)

        return PromotionResult(
            total_price=current,
            description="Stacked: " + " + ".join(descriptions),
            promotion_id="+".join(applied_ids),
        )


_STRATEGIES = {
    StrategyType.MIN: MinStrategy,
    StrategyType.PRIORITY: PriorityStrategy,
    StrategyType.STACK: StackStrategy,
}


def parse_strategy(value) -> StrategyType:
    if isinstance(value, StrategyType):
        return value
    try:
        return StrategyType(str(value).strip().upper())
    except ValueError:
        raise ValueError(
            f'Invalid strategy: "{value}". Must be MIN, PRIORITY, or STACK.'
        ) from None


def create_strategy(strategy_type: StrategyType | str) -> PromotionStrategy:
    return _STRATEGIES[parse_strategy(strategy_type)]()
