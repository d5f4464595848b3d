import logging

from aiohttp import web

from checkout.data.products import PRODUCTS
from checkout.errors import (
    CheckoutRequestError,
    CircuitOpenFailure,
    PriceAcquisitionFailure,
    ProviderUnavailable,
)
from checkout.handlers.deps import error_response, get_provider, parse_provider_name
from checkout.middlewares.requests import get_request_id
from checkout.services.checkout import isoformat_utc

logger = logging.getLogger(__name__)

routes = web.RouteTableDef()


@routes.get("/api/prices")
async def prices(request: web.Request) -> web.Response:
    try:
        provider_name = parse_provider_name(request.query.get("provider"))
        snapshot = await get_provider(request.app, provider_name).get_all_prices()
    except CheckoutRequestError as e:
        return error_response(str(e), 400)
    except (ProviderUnavailable, PriceAcquisitionFailure, CircuitOpenFailure) as e:
        logger.error("Failed to fetch prices [request_id=%s]: %s", get_request_id(request), e)
        return error_response("Failed to fetch prices", 503)

    promotions = request.app["promotions"]
    products = []
    for product in PRODUCTS:
        price = snapshot.prices.get(product.code)
        if price is None:
            continue
        products.append(
            {
                "code": product.code,
                "name": product.title,
                "priceWei": str(price.to_minor_units()),
                "priceEth": price.to_display_string(),
                "promotions": [p.name for p in promotions if product.code in p.eligible_products],
            }
        )

    return web.json_response(
        {
            "products": products,
            "provider": provider_name,
            "fetchedAt": isoformat_utc(snapshot.fetched_at),
        }
    )
