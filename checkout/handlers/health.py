from datetime import datetime, timezone

from aiohttp import web

from checkout.config import APP_ENV
from checkout.services.checkout import isoformat_utc

routes = web.RouteTableDef()


@routes.get("/api/health/live")
async def live(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok"})


@routes.get("/api/health")
async def health(request: web.Request) -> web.Response:
    return web.json_response(
        {
            "status": "ok",
            "env": APP_ENV,
            "openSeaAvailable": "opensea" in request.app["providers"],
            "defaultStrategy": request.app["config"].promotion_strategy.value,
            "timestamp": isoformat_utc(datetime.now(timezone.utc)),
        }
    )


@routes.get("/api/metrics")
async def metrics(request: web.Request) -> web.Response:
    return web.json_response(request.app["metrics"].snapshot())
