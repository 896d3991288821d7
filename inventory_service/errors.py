"""Error kinds raised by the stock and purchase services.

Every error carries the HTTP status the API layer answers with, so routes
never have to string-match messages to pick a response code.
"""


class InventoryError(Exception):
    status_code = 400

    def __init__(self, message: str, details: dict[str, str] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidArgumentError(InventoryError):
    status_code = 400


class NotFoundError(InventoryError):
    status_code = 404


class ConflictError(InventoryError):
    status_code = 409


class InsufficientStockError(InventoryError):
    status_code = 409


class ExceedsMaximumError(InventoryError):
    status_code = 409


class AlreadyCancelledError(InventoryError):
    status_code = 409


class ProductUnavailableError(InventoryError):
    """The products service could not be reached or did not return the product."""

    status_code = 503


class ProductNotFoundError(ProductUnavailableError):
    status_code = 404


class ProductServiceError(ProductUnavailableError):
    status_code = 503
