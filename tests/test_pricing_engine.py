"""Tests for cart-wide pricing."""
from checkout.pricing.engine import calculate
from checkout.pricing.money import Money
from checkout.promos.model import CartItem
from checkout.promos.strategies import MinStrategy, PriorityStrategy, StackStrategy
from conftest import eth


def test_worked_example_across_strategies(azuki_x3, promotions):
    assert calculate([azuki_x3], promotions, MinStrategy()).grand_total == eth(10)
    assert calculate([azuki_x3], promotions, StackStrategy()).grand_total == eth(8)

    result = calculate([azuki_x3], promotions, PriorityStrategy())
    assert result.grand_total == eth(10)
    assert result.line_items[0].promotion_applied == "buy2get1free"


def test_mixed_cart(promotions):
    items = [
        CartItem(product_code="APE", unit_price=eth(75), quantity=3),
        CartItem(product_code="PUNK", unit_price=eth(60), quantity=1),
        CartItem(product_code="MEEBIT", unit_price=eth(4), quantity=2),
    ]

    result = calculate(items, promotions, MinStrategy())
    ape, punk, meebit = result.line_items

    assert ape.total_price == eth(150)
    assert ape.promotion_applied == "buy2get1free"

    # bulk20 is eligible for PUNK but below its threshold
    assert punk.total_price == eth(60)
    assert punk.promotion_applied == "none"

    assert meebit.total_price == eth(8)
    assert meebit.promotion_applied == "none"
    assert meebit.description == "Base price: 2 × 4 ETH"

    assert result.grand_total == eth(218)


def test_line_items_keep_input_data(azuki_x3, promotions):
    line = calculate([azuki_x3], promotions, MinStrategy()).line_items[0]

    assert line.product_code == "AZUKI"
    assert line.quantity == 3
    assert line.unit_price == eth(5)
    assert line.description == "Buy 2 Get 1 Free: 3 items, pay for 2"


def test_grand_total_is_exact_sum():
    items = [
        CartItem(product_code="APE", unit_price=Money(1), quantity=1),
        CartItem(product_code="PUNK", unit_price=Money.from_decimal_string("0.000000000000000002"), quantity=1),
    ]
    assert calculate(items, [], MinStrategy()).grand_total == Money(3)


def test_empty_cart_totals_zero(promotions):
    result = calculate([], promotions, StackStrategy())

    assert result.line_items == ()
    assert result.grand_total == Money.zero()
