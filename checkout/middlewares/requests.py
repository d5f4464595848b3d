import logging
import time
import uuid
from typing import Awaitable, Callable

from aiohttp import web

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-Id"

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def get_request_id(request: web.Request) -> str:
    return request.get("request_id", "unknown")


@web.middleware
async def request_id_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    request["request_id"] = request_id

    response = await handler(request)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


@web.middleware
async def request_logger_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    metrics = request.app["metrics"]
    metrics.track_request()
    started = time.monotonic()

    try:
        response = await handler(request)
    except web.HTTPException as e:
        # 404/405 from the router arrive as exceptions
        response = web.json_response({"error": e.reason}, status=e.status)
    except Exception:
        logger.exception("Unhandled error [request_id=%s]", get_request_id(request))
        response = web.json_response({"error": "Internal server error"}, status=500)

    if response.status >= 500:
        metrics.track_error()

    duration_ms = (time.monotonic() - started) * 1000
    if response.status >= 500:
        log = logger.error
    elif response.status >= 400:
        log = logger.warning
    else:
        log = logger.info
    log(
        "request completed: %s %s -> %d in %.1fms [request_id=%s]",
        request.method,
        request.path_qs,
        response.status,
        duration_ms,
        get_request_id(request),
    )
    return response
