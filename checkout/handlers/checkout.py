import logging
from typing import Any, List

from aiohttp import web

from checkout.data.products import is_product_code
from checkout.errors import (
    CheckoutRequestError,
    CircuitOpenFailure,
    PriceAcquisitionFailure,
    ProviderUnavailable,
    UnknownProduct,
)
from checkout.handlers.deps import error_response, get_provider, parse_provider_name
from checkout.middlewares.requests import get_request_id
from checkout.promos.strategies import create_strategy, parse_strategy
from checkout.services.checkout import CartLine, CheckoutService

logger = logging.getLogger(__name__)

MAX_ITEMS = 50
MAX_QUANTITY_PER_ITEM = 1000

_BODY_FIELDS = {"items", "provider", "strategy"}
_ITEM_FIELDS = {"productCode", "quantity"}

routes = web.RouteTableDef()


def parse_items(items: Any) -> List[CartLine]:
    if not isinstance(items, list) or not items:
        raise CheckoutRequestError("Cart is empty")
    if len(items) > MAX_ITEMS:
        raise CheckoutRequestError(f"Too many items (max {MAX_ITEMS})")

    lines = []
    for item in items:
        if not isinstance(item, dict):
            raise CheckoutRequestError("Invalid cart item")
        unknown = set(item) - _ITEM_FIELDS
        if unknown:
            raise CheckoutRequestError(f"Unknown item fields: {', '.join(sorted(unknown))}")

        code = item.get("productCode")
        if not code or not isinstance(code, str):
            raise CheckoutRequestError("Invalid product code")
        if not is_product_code(code):
            raise CheckoutRequestError(f"Unknown product: {code}")

        quantity = item.get("quantity")
        # JSON has one number type: 3.0 is the integer 3
        if isinstance(quantity, float) and quantity.is_integer():
            quantity = int(quantity)
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            raise CheckoutRequestError(f"Invalid quantity for {code}: {quantity}")
        if quantity > MAX_QUANTITY_PER_ITEM:
            raise CheckoutRequestError(f"Quantity too large for {code} (max {MAX_QUANTITY_PER_ITEM})")

        lines.append(CartLine(product_code=code, quantity=quantity))
    return lines


@routes.post("/api/checkout")
async def checkout(request: web.Request) -> web.Response:
    request_id = get_request_id(request)

    try:
        body = await request.json()
    except ValueError:
        return error_response("Invalid JSON body", 400)
    if not isinstance(body, dict):
        return error_response("Request body must be an object", 400)

    try:
        unknown = set(body) - _BODY_FIELDS
        if unknown:
            raise CheckoutRequestError(f"Unknown fields: {', '.join(sorted(unknown))}")

        provider_name = parse_provider_name(body.get("provider"))
        try:
            strategy_type = parse_strategy(body.get("strategy") or request.app["config"].promotion_strategy)
        except ValueError:
            raise CheckoutRequestError('Invalid strategy. Must be "MIN", "PRIORITY", or "STACK".') from None
        lines = parse_items(body.get("items"))

        service = CheckoutService(
            get_provider(request.app, provider_name),
            request.app["promotions"],
            create_strategy(strategy_type),
            quote_validity=request.app["quote_validity"],
        )
        quote = await service.calculate_checkout(lines)
    except (CheckoutRequestError, UnknownProduct) as e:
        logger.warning("Checkout rejected [request_id=%s]: %s", request_id, e)
        return error_response(str(e), 400)
    except ProviderUnavailable as e:
        logger.error("Checkout failed [request_id=%s]: %s", request_id, e)
        return error_response("Price provider unavailable", 503)
    except (PriceAcquisitionFailure, CircuitOpenFailure) as e:
        logger.error("Checkout failed [request_id=%s]: %s", request_id, e)
        return error_response("Prices temporarily unavailable, try again later", 503)

    logger.info(
        "Checkout calculated [request_id=%s] strategy=%s items=%d",
        request_id,
        strategy_type.value,
        len(lines),
    )
    return web.json_response(quote.to_dict())
