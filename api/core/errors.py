"""
Error taxonomy shared by services and repositories.

Routers never build error responses themselves: `main.py` registers one
handler for `AppError` and turns it into the JSON envelope.
"""

from __future__ import annotations


class AppError(Exception):
    status_code = 500
    public_message = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class ValidationError(AppError):
    status_code = 400
    public_message = "Invalid request"


class PayloadTooLarge(ValidationError):
    status_code = 413
    public_message = "Payload too large"


class Conflict(AppError):
    status_code = 400
    public_message = "Resource already exists"


class NotFound(AppError):
    status_code = 404
    public_message = "Not found"


class StoreError(AppError):
    """
    Any persistence failure that is not a business rule.

    `message` keeps the internal detail for logs; clients only ever see
    `public_message`.
    """

    status_code = 500
    public_message = "Internal server error"
