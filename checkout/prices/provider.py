from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Awaitable, Callable, Dict, Mapping, Optional, Protocol, Sequence

from checkout.data.products import ALL_PRODUCT_CODES
from checkout.errors import (
    CircuitOpenFailure,
    InvalidMoneyValue,
    PriceAcquisitionFailure,
    PriceFetchError,
    UnknownProduct,
)
from checkout.pricing.money import Money

logger = logging.getLogger(__name__)

PriceFetcher = Callable[[str], Awaitable[Money]]


@dataclass(frozen=True)
class PriceSnapshot:
    prices: Mapping[str, Money]
    fetched_at: datetime

    @classmethod
    def create(cls, prices: Mapping[str, Money], fetched_at: datetime) -> PriceSnapshot:
        return cls(prices=MappingProxyType(dict(prices)), fetched_at=fetched_at)


class PriceProvider(Protocol):
    async def get_all_prices(self) -> PriceSnapshot:
        ...

    async def get_price(self, code: str) -> Money:
        ...


class CircuitBreaker:
    """
    Counts consecutive batch failures (every product failed).

    Opens at ``failure_threshold``; once ``reset_timeout`` seconds have passed
    since the last failure it lets a probe through again. Any success closes it.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        reset_timeout: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout
        self._clock = clock
        self.failures = 0
        self.last_failure_at = 0.0
        self.is_open = False

    def can_execute(self) -> bool:
        if not self.is_open:
            return True
        return self._clock() - self.last_failure_at >= self.reset_timeout

    def record_success(self) -> None:
        self.failures = 0
        self.is_open = False

    def record_failure(self) -> None:
        self.failures += 1
        self.last_failure_at = self._clock()
        if self.failures >= self.failure_threshold:
            self.is_open = True


@dataclass(frozen=True)
class _CacheEntry:
    snapshot: PriceSnapshot
    expires_at: float


class ResilientPriceProvider:
    """
    Whole-catalog price cache in front of an unreliable per-product fetcher.

    - one cached snapshot, served as-is until it expires
    - at most one batch fetch in flight; concurrent callers await the same one
    - each product retried with exponential backoff, bounded by a timeout
    - circuit breaker counting batches where every product failed
    - partial failures are filled from the stale snapshot when there is one
    """

    def __init__(
        self,
        fetch_price: PriceFetcher,
        *,
        product_codes: Sequence[str] = ALL_PRODUCT_CODES,
        cache_ttl: float = 60.0,
        fetch_timeout: float = 10.0,
        max_retries: int = 2,
        retry_base_delay: float = 0.5,
        failure_threshold: int = 5,
        reset_timeout: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._fetch_price = fetch_price
        self._product_codes = tuple(product_codes)
        self._cache_ttl = cache_ttl
        self._fetch_timeout = fetch_timeout
        self._max_retries = max_retries
        self._retry_base_delay = retry_base_delay
        self._clock = clock
        self._wall_clock = wall_clock
        self._sleep = sleep

        self.circuit_breaker = CircuitBreaker(failure_threshold, reset_timeout, clock)
        self._cache: Optional[_CacheEntry] = None
        self._inflight: Optional[asyncio.Task] = None

    async def get_price(self, code: str) -> Money:
        snapshot = await self.get_all_prices()
        price = snapshot.prices.get(code)
        if price is None:
            raise UnknownProduct(code)
        return price

    async def get_all_prices(self) -> PriceSnapshot:
        cache = self._cache
        if cache is not None and self._clock() < cache.expires_at:
            return cache.snapshot

        # check-and-start has no await in between, so only one batch can be created
        if self._inflight is None:
            task = asyncio.ensure_future(self._fetch_all())
            task.add_done_callback(self._clear_inflight)
            self._inflight = task

        # a caller giving up must not cancel the batch other callers wait on
        return await asyncio.shield(self._inflight)

    def _clear_inflight(self, task: asyncio.Task) -> None:
        if self._inflight is task:
            self._inflight = None

    def _stale_snapshot(self) -> Optional[PriceSnapshot]:
        return self._cache.snapshot if self._cache is not None else None

    async def _fetch_all(self) -> PriceSnapshot:
        stale = self._stale_snapshot()

        if not self.circuit_breaker.can_execute():
            if stale is not None:
                logger.warning("Circuit breaker open, returning stale prices")
                return stale
            raise CircuitOpenFailure("Price source circuit breaker is open and no cached prices available")

        results = await asyncio.gather(
            *(self._fetch_with_retry(code) for code in self._product_codes),
            return_exceptions=True,
        )

        prices: Dict[str, Money] = {}
        errors: list[str] = []
        for code, result in zip(self._product_codes, results):
            if isinstance(result, BaseException):
                errors.append(f"{code}: {result}")
            else:
                prices[code] = result

        if not prices:
            self.circuit_breaker.record_failure()
            if stale is not None:
                logger.warning("All price fetches failed, returning stale prices: %s", "; ".join(errors))
                return stale
            raise PriceAcquisitionFailure(f"All price fetches failed: {'; '.join(errors)}")

        if errors and stale is not None:
            logger.warning(
                "Partial price fetch failure (%d ok, %d failed), merging with cached prices",
                len(prices),
                len(errors),
            )
            for code in self._product_codes:
                if code not in prices and code in stale.prices:
                    prices[code] = stale.prices[code]
        elif errors:
            logger.warning(
                "Partial price fetch failure (%d ok, %d failed), no cache to merge",
                len(prices),
                len(errors),
            )

        self.circuit_breaker.record_success()
        snapshot = PriceSnapshot.create(prices, self._wall_clock())
        self._cache = _CacheEntry(snapshot=snapshot, expires_at=self._clock() + self._cache_ttl)
        return snapshot

    async def _fetch_with_retry(self, code: str) -> Money:
        last_error: Exception | None = None

        for attempt in range(self._max_retries + 1):
            try:
                return await asyncio.wait_for(self._fetch_price(code), timeout=self._fetch_timeout)
            except InvalidMoneyValue:
                raise
            except asyncio.TimeoutError:
                last_error = PriceFetchError(f"Price fetch for {code} timed out after {self._fetch_timeout}s")
            except Exception as e:
                last_error = e

            if attempt < self._max_retries:
                delay = self._retry_base_delay * 2**attempt
                logger.debug("Retrying price fetch for %s (attempt %d, delay %.2fs): %s", code, attempt, delay, last_error)
                await self._sleep(delay)

        raise last_error
