import functools
import json
from decimal import Decimal
from typing import Any, Dict, Optional

import aiohttp

from checkout.data.products import get_product
from checkout.errors import PriceFetchError
from checkout.pricing.money import CURRENCY, Money

_loads = functools.partial(json.loads, parse_float=Decimal)


def parse_floor_price(data: Any, slug: str) -> Money:
    """Extract ``total.floor_price`` from a collection stats payload."""
    total = data.get("total") if isinstance(data, dict) else None
    if not isinstance(total, dict):
        raise PriceFetchError(f"Invalid OpenSea response structure for {slug}")

    floor_price = total.get("floor_price")
    symbol = total.get("floor_price_symbol")

    if isinstance(floor_price, bool) or not isinstance(floor_price, (int, Decimal)):
        raise PriceFetchError(f"No floor price available for {slug}")

    if symbol != CURRENCY:
        raise PriceFetchError(f'Unexpected price symbol for {slug}: "{symbol}" (expected "{CURRENCY}")')

    # format(..., "f") never produces an exponent
    return Money.from_decimal_string(format(Decimal(floor_price), "f"))


class OpenSeaClient:
    """
    OpenSea API v2:
    - GET /collections/{slug}/stats -> {"total": {"floor_price": ..., "floor_price_symbol": "ETH"}}
    """

    BASE_URL = "https://api.opensea.io/api/v2"

    def __init__(self, api_key: str, base_url: str | None = None, timeout: float = 10.0):
        self.api_key = api_key
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self._session

    def _headers(self) -> Dict[str, str]:
        return {
            "X-Api-Key": self.api_key,
            "Accept": "application/json",
        }

    async def fetch_floor_price(self, code: str) -> Money:
        product = get_product(code)
        if product is None:
            raise PriceFetchError(f"Unknown product: {code}")

        s = await self._get_session()
        url = f"{self.base_url}/collections/{product.slug}/stats"
        async with s.get(url, headers=self._headers()) as r:
            if r.status == 429:
                retry_after = r.headers.get("Retry-After", "")
                wait = int(retry_after) if retry_after.isdigit() else 2
                raise PriceFetchError(f"OpenSea rate limited for {product.slug}, retry after {wait}s")
            if r.status >= 400:
                raise PriceFetchError(f"OpenSea API error for {product.slug}: HTTP {r.status}")

            try:
                data = await r.json(content_type=None, loads=_loads)
            except ValueError as e:
                raise PriceFetchError(f"Invalid OpenSea JSON for {product.slug}") from e

        return parse_floor_price(data, product.slug)

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
