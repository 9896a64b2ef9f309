"""Error types raised by gymkeep services.

Each error carries the HTTP status the web layer answers with. Not-found
errors are also used for rows that belong to another gym so callers cannot
probe for the existence of other tenants' data.
"""


class GymKeepError(Exception):
    """Base class for expected, user-facing failures."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(GymKeepError):
    status_code = 400


class UnauthorizedError(GymKeepError):
    status_code = 401


class ForbiddenError(GymKeepError):
    status_code = 403


class NotFoundError(GymKeepError):
    status_code = 404


class ConflictError(GymKeepError):
    status_code = 409


class InsufficientStockError(ValidationError):
    """Requested quantity exceeds what a product has in stock."""

    def __init__(self, product_name: str, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for {product_name}. "
            f"Requested: {requested}, Available: {available}"
        )
        self.product_name = product_name
        self.requested = requested
        self.available = available
