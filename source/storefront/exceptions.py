"""Domain errors raised outside the engine's own constraint checks."""


class StorefrontError(Exception):
    """Base class for storefront errors."""


class ProductNotFoundError(StorefrontError):
    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product {product_id} does not exist")


class InsufficientStockError(StorefrontError):
    def __init__(self, product_id, requested: int, available: int):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for product {product_id}. "
            f"Available: {available}, Required: {requested}"
        )
