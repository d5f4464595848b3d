import json
import logging
import os
from typing import Any, Dict, List

from checkout.data.products import is_product_code
from checkout.errors import PromotionError
from checkout.promos.model import BulkDiscount, BuyXGetYFree, Promotion, PromoType

logger = logging.getLogger(__name__)


DEFAULT_PROMOTIONS: tuple[Promotion, ...] = (
    BuyXGetYFree(
        buy_count=2,
        free_count=1,
        eligible_products=frozenset({"APE", "AZUKI"}),
        id="buy2get1free",
        name="Buy 2 Get 1 Free",
        priority=1,
    ),
    BulkDiscount(
        min_quantity=3,
        discount_percent=20,
        eligible_products=frozenset({"PUNK", "AZUKI"}),
        id="bulk20",
        name="20% Bulk Discount (3+)",
        priority=2,
    ),
)


def _products(promo_id: str, raw: Any) -> frozenset:
    if not isinstance(raw, list) or not raw:
        raise PromotionError(f"Promotion {promo_id}: 'products' must be a non-empty list")
    unknown = [p for p in raw if not is_product_code(p)]
    if unknown:
        raise PromotionError(f"Promotion {promo_id}: unknown products {unknown}")
    return frozenset(raw)


def _int(promo_id: str, raw: Dict[str, Any], key: str, default: int | None = None) -> int:
    value = raw.get(key, default)
    if not isinstance(value, int) or isinstance(value, bool):
        raise PromotionError(f"Promotion {promo_id}: '{key}' must be an integer")
    return value


def parse_promotion(promo_id: str, raw: Dict[str, Any]) -> Promotion:
    if not isinstance(raw, dict):
        raise PromotionError(f"Promotion {promo_id}: definition must be an object")

    try:
        promo_type = PromoType(raw.get("type"))
    except ValueError:
        raise PromotionError(f"Promotion {promo_id}: unknown type {raw.get('type')!r}") from None

    products = _products(promo_id, raw.get("products"))
    name = str(raw.get("name") or "")

    if promo_type == PromoType.BULK_DISCOUNT:
        return BulkDiscount(
            min_quantity=_int(promo_id, raw, "min_quantity"),
            discount_percent=_int(promo_id, raw, "percent"),
            eligible_products=products,
            id=promo_id,
            name=name,
            priority=_int(promo_id, raw, "priority", 2),
        )

    return BuyXGetYFree(
        buy_count=_int(promo_id, raw, "buy"),
        free_count=_int(promo_id, raw, "free"),
        eligible_products=products,
        id=promo_id,
        name=name,
        priority=_int(promo_id, raw, "priority", 1),
    )


class JsonPromotionStorage:
    """
    Promotion definitions keyed by id:

        {"bulk20": {"type": "bulk_discount", "min_quantity": 3, "percent": 20,
                    "products": ["PUNK", "AZUKI"], "priority": 2}}

    No file means the built-in defaults.
    """

    def __init__(self, path: str):
        self.path = path

    def _read_json(self) -> dict | None:
        if not os.path.exists(self.path):
            return None
        with open(self.path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise PromotionError(f"Invalid promotions file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise PromotionError(f"Invalid promotions file {self.path}: expected an object")
        return data

    def load(self) -> List[Promotion]:
        data = self._read_json()
        if data is None:
            logger.info("No promotions file at %s, using defaults", self.path)
            return list(DEFAULT_PROMOTIONS)

        promotions = [parse_promotion(str(pid), raw) for pid, raw in data.items()]
        logger.info("Loaded %d promotions from %s", len(promotions), self.path)
        return promotions
