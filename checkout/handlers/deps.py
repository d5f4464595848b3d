from aiohttp import web

from checkout.errors import CheckoutRequestError, ProviderUnavailable
from checkout.prices.provider import PriceProvider

VALID_PROVIDERS = ("mock", "opensea")
DEFAULT_PROVIDER = "mock"


def parse_provider_name(value) -> str:
    if value is None:
        return DEFAULT_PROVIDER
    if value not in VALID_PROVIDERS:
        raise CheckoutRequestError('Invalid provider. Must be "mock" or "opensea".')
    return value


def get_provider(app: web.Application, name: str) -> PriceProvider:
    provider = app["providers"].get(name)
    if provider is None:
        raise ProviderUnavailable(f"{name} provider not available, set OPENSEA_API_KEY")
    return provider


def error_response(message: str, status: int) -> web.Response:
    return web.json_response({"error": message}, status=status)
