"""
Application error types.

Routers and utilities raise these; the handlers registered in ``app.main``
turn them into ``{"success": false, "message": ...}`` responses.
"""
from typing import Optional


class AppError(Exception):
    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class NotFoundError(AppError):
    status_code = 404
    message = "Resource not found"


class InsufficientDataError(AppError):
    """Raised when there are not enough monthly data points to fit a trend."""

    status_code = 400
    message = "Insufficient data for prediction. Need at least 2 months of expense data."


class DatabaseError(AppError):
    # Never expose the underlying boto error to the client
    status_code = 500
    message = "Database error while processing request"


class BadRequestError(AppError):
    status_code = 400
    message = "Bad request"
