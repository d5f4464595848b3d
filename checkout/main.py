import asyncio
import logging
import signal

from checkout.config import APP_ENV, Config, load_config
from checkout.prices.mock import MockPriceProvider
from checkout.prices.provider import ResilientPriceProvider
from checkout.promos import load_promotions
from checkout.server import create_app, start_server
from checkout.services.opensea import OpenSeaClient

logger = logging.getLogger(__name__)


def build_opensea_provider(cfg: Config, client: OpenSeaClient) -> ResilientPriceProvider:
    return ResilientPriceProvider(
        client.fetch_floor_price,
        cache_ttl=cfg.price_cache_ttl,
        fetch_timeout=cfg.price_fetch_timeout,
        max_retries=cfg.price_max_retries,
        retry_base_delay=cfg.price_retry_base_delay,
        failure_threshold=cfg.breaker_failure_threshold,
        reset_timeout=cfg.breaker_reset_timeout,
    )


async def main():
    cfg = load_config()
    logging.basicConfig(
        level=cfg.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    promotions = load_promotions(cfg.promotions_path)
    providers = {"mock": MockPriceProvider()}

    # --- OpenSea (только если задан ключ) ---
    client = None
    if cfg.opensea_enabled:
        client = OpenSeaClient(cfg.opensea_api_key, cfg.opensea_base_url, timeout=cfg.price_fetch_timeout)
        providers["opensea"] = build_opensea_provider(cfg, client)

    app = create_app(cfg, providers=providers, promotions=promotions)
    runner = await start_server(app, host=cfg.host, port=cfg.port)
    logger.info(
        "Server started on %s:%d (APP_ENV=%s, opensea=%s, strategy=%s)",
        cfg.host,
        cfg.port,
        APP_ENV,
        "ON" if client else "OFF",
        cfg.promotion_strategy.value,
    )

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    try:
        await stop.wait()
        logger.info("Shutting down...")
    finally:
        await runner.cleanup()
        if client is not None:
            await client.close()
        logger.info("HTTP server closed")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
