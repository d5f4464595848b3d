from datetime import timedelta
from typing import Dict, Optional, Sequence

from aiohttp import web

from checkout.config import Config
from checkout.handlers import health, prices
from checkout.handlers.checkout import routes as checkout_routes
from checkout.middlewares.requests import request_id_middleware, request_logger_middleware
from checkout.prices.provider import PriceProvider
from checkout.promos.model import Promotion
from checkout.utils.metrics import MetricsCollector


def create_app(
    cfg: Config,
    *,
    providers: Dict[str, PriceProvider],
    promotions: Sequence[Promotion],
    metrics: Optional[MetricsCollector] = None,
) -> web.Application:
    app = web.Application(middlewares=[request_id_middleware, request_logger_middleware])
    app["config"] = cfg
    app["providers"] = providers
    app["promotions"] = tuple(promotions)
    app["quote_validity"] = timedelta(seconds=cfg.quote_validity)
    app["metrics"] = metrics or MetricsCollector()

    app.router.add_routes(health.routes)
    app.router.add_routes(prices.routes)
    app.router.add_routes(checkout_routes)
    return app


async def start_server(app: web.Application, host: str = "0.0.0.0", port: int = 3001) -> web.AppRunner:
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host=host, port=port)
    await site.start()
    return runner
