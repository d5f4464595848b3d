from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Product:
    code: str
    slug: str
    title: str


PRODUCTS: List[Product] = [
    Product(code="APE", slug="boredapeyachtclub", title="Bored Apes"),
    Product(code="PUNK", slug="cryptopunks", title="Crypto Punks"),
    Product(code="AZUKI", slug="azuki", title="Azuki"),
    Product(code="MEEBIT", slug="meebits", title="Meebits"),
]

ALL_PRODUCT_CODES: tuple[str, ...] = tuple(p.code for p in PRODUCTS)


def get_product(code: str) -> Product | None:
    return next((p for p in PRODUCTS if p.code == code), None)


def is_product_code(value) -> bool:
    return isinstance(value, str) and value in ALL_PRODUCT_CODES
