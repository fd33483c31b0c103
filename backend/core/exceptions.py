"""
Application error hierarchy.

Every error raised from a route or service that should reach the client
derives from ``AppError``; the handlers in ``main`` turn it into the
``{status, message}`` envelope.
"""


class AppError(Exception):
    """Operational error with an HTTP status code."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    @property
    def status(self) -> str:
        return "fail" if 400 <= self.status_code < 500 else "error"


class BadRequest(AppError):
    status_code = 400


class Unauthorized(AppError):
    status_code = 401


class Forbidden(AppError):
    status_code = 403


class NotFound(AppError):
    status_code = 404


class PaymentGatewayError(AppError):
    """Gateway failure surfaced with the gateway's own status code."""

    status_code = 500
