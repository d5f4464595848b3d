class CheckoutError(Exception):
    pass


class InvalidMoneyValue(CheckoutError, ValueError):
    """Malformed decimal string, negative amount or out-of-range percentage."""


class PromotionError(CheckoutError, ValueError):
    pass


class UnknownProduct(CheckoutError):
    """Requested product has no resolvable price."""

    def __init__(self, product_code: str):
        self.product_code = product_code
        super().__init__(f"Price unavailable for product: {product_code}")


class PriceFetchError(CheckoutError):
    """A single product could not be priced by the upstream source."""


class PriceAcquisitionFailure(CheckoutError):
    """Every product fetch failed and there was no cached snapshot to fall back to."""


class CircuitOpenFailure(CheckoutError):
    """Circuit breaker is open and there is no cached snapshot."""


class ProviderUnavailable(CheckoutError):
    pass


class CheckoutRequestError(CheckoutError):
    pass
