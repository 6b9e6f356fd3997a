"""
Application Error Taxonomy

Every failure the API reports to a caller is one of these. The HTTP layer maps
them to status codes; services and repositories never build responses.

    ValidationError   -> 400, malformed or missing input, never retried
    NotFoundError     -> 404, referenced order does not exist
    PersistenceError  -> 500, store failure; detail is logged, not returned
"""

from typing import Optional


class OrderDeskError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(OrderDeskError):
    status_code = 400
    default_message = "Invalid request"


class NotFoundError(OrderDeskError):
    status_code = 404
    default_message = "Order not found"


class PersistenceError(OrderDeskError):
    """
    A store operation failed.

    The message is safe to show to a customer; the underlying driver
    exception is kept in ``__cause__`` for the server log.
    """
    status_code = 500
    default_message = "Unable to process request. Please try again."
