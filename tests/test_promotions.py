"""Tests for bulk discount and buy-x-get-y-free rules."""
import pytest

from checkout.errors import PromotionError
from checkout.pricing.money import Money
from checkout.promos.model import BulkDiscount, BuyXGetYFree, CartItem, base_price_result
from conftest import eth


def _item(code: str, quantity: int, unit_price: Money = None) -> CartItem:
    return CartItem(product_code=code, unit_price=unit_price or eth(5), quantity=quantity)


@pytest.mark.parametrize("quantity", [1, 2])
def test_buy_two_get_one_below_group_size_does_not_apply(quantity):
    promo = BuyXGetYFree(2, 1, {"AZUKI"})
    assert promo.apply(_item("AZUKI", quantity)) is None


@pytest.mark.parametrize("quantity, paid", [(3, 2), (4, 3), (5, 4), (6, 4), (7, 5), (9, 6)])
def test_buy_two_get_one_paid_units(quantity, paid):
    promo = BuyXGetYFree(2, 1, {"AZUKI"})
    result = promo.apply(_item("AZUKI", quantity))

    assert result.total_price == eth(5).multiply(paid)
    assert result.promotion_id == "buy2get1free"
    assert result.description == f"Buy 2 Get 1 Free: {quantity} items, pay for {paid}"


def test_buy_x_get_y_ignores_ineligible_products():
    promo = BuyXGetYFree(2, 1, {"AZUKI"})
    item = _item("PUNK", 3)

    assert promo.is_applicable(item) is False
    assert promo.apply(item) is None


def test_buy_x_get_y_rejects_empty_groups():
    with pytest.raises(PromotionError):
        BuyXGetYFree(0, 1, {"AZUKI"})
    with pytest.raises(PromotionError):
        BuyXGetYFree(2, 0, {"AZUKI"})


def test_bulk_discount_below_threshold_does_not_apply():
    promo = BulkDiscount(3, 20, {"PUNK"})
    item = _item("PUNK", 2)

    assert promo.is_applicable(item) is True
    assert promo.apply(item) is None


def test_bulk_discount_discounts_every_unit():
    promo = BulkDiscount(3, 20, {"PUNK"})
    result = promo.apply(_item("PUNK", 3))

    assert result.total_price == eth(12)
    assert result.promotion_id == "bulk20off"
    assert result.description == "20% Bulk Discount (min 3): 3 × 4 ETH"


def test_bulk_discount_floors_the_unit_price():
    promo = BulkDiscount(3, 20, {"PUNK"})
    # 7 wei * 80% = 5.6 -> 5 wei per unit
    result = promo.apply(_item("PUNK", 3, Money(7)))
    assert result.total_price == Money(15)


@pytest.mark.parametrize("percent", [-1, 101])
def test_bulk_discount_rejects_out_of_range_percent(percent):
    with pytest.raises(PromotionError):
        BulkDiscount(3, percent, {"PUNK"})


def test_configured_ids_names_and_priorities_are_kept():
    promo = BulkDiscount(3, 20, ["PUNK", "AZUKI"], id="bulk20", name="20% Bulk Discount (3+)", priority=5)

    assert promo.id == "bulk20"
    assert promo.name == "20% Bulk Discount (3+)"
    assert promo.priority == 5
    assert promo.eligible_products == frozenset({"PUNK", "AZUKI"})


def test_default_priorities():
    assert BuyXGetYFree(2, 1, {"APE"}).priority == 1
    assert BulkDiscount(3, 20, {"APE"}).priority == 2


def test_base_price_result():
    result = base_price_result(_item("MEEBIT", 2, eth(4)))

    assert result.total_price == eth(8)
    assert result.promotion_id == "none"
    assert result.description == "Base price: 2 × 4 ETH"
