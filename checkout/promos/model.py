from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, FrozenSet, Optional, Union

from checkout.errors import PromotionError
from checkout.pricing.money import Money

NO_PROMOTION = "none"


class PromoType(str, Enum):
    BULK_DISCOUNT = "bulk_discount"        # -N% per unit from min quantity
    BUY_X_GET_Y_FREE = "buy_x_get_y_free"  # every (x + y) units, y are free


@dataclass(frozen=True)
class CartItem:
    product_code: str
    unit_price: Money
    quantity: int

    @property
    def base_total(self) -> Money:
        return self.unit_price.multiply(self.quantity)


@dataclass(frozen=True)
class PromotionResult:
    total_price: Money
    description: str
    promotion_id: str


def base_price_result(item: CartItem) -> PromotionResult:
    return PromotionResult(
        total_price=item.base_total,
        description=f"Base price: {item.quantity} × {item.unit_price.to_display_string()}",
        promotion_id=NO_PROMOTION,
    )


@dataclass(frozen=True)
class BulkDiscount:
    min_quantity: int
    discount_percent: int
    eligible_products: FrozenSet[str] = field(default_factory=frozenset)
    id: str = ""
    name: str = ""
    priority: int = 2

    type: ClassVar[PromoType] = PromoType.BULK_DISCOUNT

    def __post_init__(self) -> None:
        if self.discount_percent < 0 or self.discount_percent > 100:
            raise PromotionError("Discount percent must be between 0 and 100")
        if self.min_quantity < 1:
            raise PromotionError("Minimum quantity must be positive")

        object.__setattr__(self, "eligible_products", frozenset(self.eligible_products))
        if not self.id:
            object.__setattr__(self, "id", f"bulk{self.discount_percent}off")
        if not self.name:
            object.__setattr__(
                self, "name", f"{self.discount_percent}% Bulk Discount (min {self.min_quantity})"
            )

    def is_applicable(self, item: CartItem) -> bool:
        return item.product_code in self.eligible_products

    def apply(self, item: CartItem) -> Optional[PromotionResult]:
        if not self.is_applicable(item) or item.quantity < self.min_quantity:
            return None

        keep_percent = 100 - self.discount_percent
        unit_price = item.unit_price.apply_percentage(keep_percent)

        return PromotionResult(
            total_price=unit_price.multiply(item.quantity),
            description=f"{self.name}: {item.quantity} × {unit_price.to_display_string()}",
            promotion_id=self.id,
        )


@dataclass(frozen=True)
class BuyXGetYFree:
    buy_count: int
    free_count: int
    eligible_products: FrozenSet[str] = field(default_factory=frozenset)
    id: str = ""
    name: str = ""
    priority: int = 1

    type: ClassVar[PromoType] = PromoType.BUY_X_GET_Y_FREE

    def __post_init__(self) -> None:
        if self.buy_count < 1 or self.free_count < 1:
            raise PromotionError("Buy and free counts must be positive")

        object.__setattr__(self, "eligible_products", frozenset(self.eligible_products))
        if not self.id:
            object.__setattr__(self, "id", f"buy{self.buy_count}get{self.free_count}free")
        if not self.name:
            object.__setattr__(self, "name", f"Buy {self.buy_count} Get {self.free_count} Free")

    @property
    def group_size(self) -> int:
        return self.buy_count + self.free_count

    def is_applicable(self, item: CartItem) -> bool:
        return item.product_code in self.eligible_products

    def apply(self, item: CartItem) -> Optional[PromotionResult]:
        if not self.is_applicable(item) or item.quantity < self.group_size:
            return None

        full_groups, remainder = divmod(item.quantity, self.group_size)
        paid_units = full_groups * self.buy_count + remainder

        return PromotionResult(
            total_price=item.unit_price.multiply(paid_units),
            description=f"{self.name}: {item.quantity} items, pay for {paid_units}",
            promotion_id=self.id,
        )


Promotion = Union[BulkDiscount, BuyXGetYFree]
