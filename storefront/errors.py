"""
Error taxonomy for the storefront.

Every error carries the HTTP status and the public message returned in the
`{"success": false, "error": ...}` body. Handlers in storefront.main convert
them at the request boundary.
"""

from typing import Optional


class StorefrontError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        if message:
            self.message = message
        super().__init__(self.message)


class BadRequest(StorefrontError):
    status_code = 400
    message = "Bad request"


class Unauthorized(StorefrontError):
    status_code = 401
    message = "Authorization required"


class NotFound(StorefrontError):
    status_code = 404
    message = "Not found"


class ProfileNotFound(NotFound):
    message = "User profile not found"


class CourseNotFound(NotFound):
    message = "Course not found"


class PaymentNotFound(NotFound):
    message = "Payment not found"


class ConfigurationError(StorefrontError):
    status_code = 500
    message = "Payment gateway not configured properly"


class GatewayError(StorefrontError):
    """The payment gateway could not be reached or answered unusably."""

    status_code = 500
    message = "Payment gateway error"


class GatewayAuthError(GatewayError):
    message = "Failed to authenticate with payment gateway"


class GatewaySessionError(GatewayError):
    message = "Failed to create payment session"


class GatewayValidationError(GatewayError):
    message = "Payment gateway validation request failed"


class VerificationFailed(StorefrontError):
    """The gateway answered and the payment did not succeed."""

    status_code = 400
    message = "Payment verification failed"


class InvalidTransition(StorefrontError):
    status_code = 409
    message = "Payment is already finalized"


class PersistenceError(StorefrontError):
    status_code = 500
    message = "Failed to update payment status"
