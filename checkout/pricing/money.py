from __future__ import annotations

import re
from dataclasses import dataclass

from checkout.errors import InvalidMoneyValue

DECIMALS = 18
MINOR_UNITS_PER_MAJOR = 10**DECIMALS
CURRENCY = "ETH"

_DISPLAY_DECIMALS = 5
# keeps every amount within the interpreter's int<->str digit limit (4300)
_MAX_DIGITS = 4000
_AMOUNT_LIMIT = 10**_MAX_DIGITS
_DECIMAL_PATTERN = re.compile(r"[0-9]+(?:\.[0-9]+)?")


@dataclass(frozen=True, order=True)
class Money:
    """
    Amount in wei (1 ETH = 10**18 wei).

    Never negative: every operation that would go below zero raises
    InvalidMoneyValue. All arithmetic is on ints, floats are never accepted.
    """

    amount: int

    def __post_init__(self) -> None:
        if not isinstance(self.amount, int) or isinstance(self.amount, bool):
            raise InvalidMoneyValue(f"Money amount must be an integer, got {self.amount!r}")
        if self.amount < 0:
            raise InvalidMoneyValue("Money cannot be negative")
        if self.amount >= _AMOUNT_LIMIT:
            raise InvalidMoneyValue(f"Money amount exceeds {_MAX_DIGITS} digits")

    @classmethod
    def zero(cls) -> Money:
        return cls(0)

    @classmethod
    def from_minor_units(cls, amount: int) -> Money:
        return cls(amount)

    @classmethod
    def from_major_units(cls, amount: int) -> Money:
        if not isinstance(amount, int) or isinstance(amount, bool):
            raise InvalidMoneyValue(f"Major amount must be an integer, got {amount!r}")
        if amount < 0:
            raise InvalidMoneyValue("Money cannot be negative")
        return cls(amount * MINOR_UNITS_PER_MAJOR)

    @classmethod
    def from_decimal_string(cls, value: str) -> Money:
        # digits beyond 18 decimals are truncated, never rounded
        if not isinstance(value, str) or not _DECIMAL_PATTERN.fullmatch(value):
            raise InvalidMoneyValue(f'Invalid ETH decimal string: "{value}"')

        whole, _, fraction = value.partition(".")
        if len(whole) > _MAX_DIGITS - DECIMALS:
            raise InvalidMoneyValue(f"ETH decimal string too long: {len(whole)} integer digits")
        amount = int(whole) * MINOR_UNITS_PER_MAJOR
        if fraction:
            amount += int(fraction[:DECIMALS].ljust(DECIMALS, "0"))
        return cls(amount)

    def add(self, other: Money) -> Money:
        return Money(self.amount + other.amount)

    def subtract(self, other: Money) -> Money:
        return Money(self.amount - other.amount)

    def multiply(self, quantity: int) -> Money:
        if not isinstance(quantity, int) or isinstance(quantity, bool):
            raise InvalidMoneyValue(f"Quantity must be an integer, got {quantity!r}")
        return Money(self.amount * quantity)

    def apply_percentage(self, percentage: int) -> Money:
        """Return ``percentage`` percent of this amount, floored to whole wei."""
        if not isinstance(percentage, int) or isinstance(percentage, bool):
            raise InvalidMoneyValue(f"Percentage must be an integer, got {percentage!r}")
        if percentage < 0 or percentage > 100:
            raise InvalidMoneyValue("Percentage must be 0-100")
        return Money(self.amount * percentage // 100)

    def is_zero(self) -> bool:
        return self.amount == 0

    @staticmethod
    def min(a: Money, b: Money) -> Money:
        return a if a.amount <= b.amount else b

    def to_minor_units(self) -> int:
        return self.amount

    def to_decimal_string(self) -> str:
        whole, remainder = divmod(self.amount, MINOR_UNITS_PER_MAJOR)
        if remainder == 0:
            return str(whole)
        fraction = str(remainder).rjust(DECIMALS, "0").rstrip("0")
        return f"{whole}.{fraction}"

    def to_display_string(self) -> str:
        whole, remainder = divmod(self.amount, MINOR_UNITS_PER_MAJOR)
        fraction = str(remainder).rjust(DECIMALS, "0")[:_DISPLAY_DECIMALS].rstrip("0")
        if not fraction:
            return f"{whole} {CURRENCY}"
        return f"{whole}.{fraction} {CURRENCY}"

    def __str__(self) -> str:
        return self.to_display_string()
