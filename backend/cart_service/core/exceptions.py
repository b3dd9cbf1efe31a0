"""
Typed errors raised by the cart engine and the store adapter.

Every error carries a human-readable message and an HTTP status code. The
status tag is derived from the code: "fail" for client faults, "error" for
server faults.
"""
from fastapi import status


class CartServiceError(Exception):
    """Base class for all cart service errors."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Something went wrong"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def status(self) -> str:
        return "fail" if self.status_code < 500 else "error"


class NotFoundError(CartServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "No cart found for this user"


class EmptyCartError(CartServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Empty cart"


class ValidationError(CartServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class ConstraintViolation(CartServiceError):
    """A uniqueness rule rejected a write (one cart per user, one item per product)."""
    status_code = status.HTTP_409_CONFLICT
    default_message = "Concurrent update conflict, please retry"


class PersistenceError(CartServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Cart storage is unavailable"


class PersistenceTimeout(PersistenceError):
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    default_message = "Cart storage did not respond in time"
