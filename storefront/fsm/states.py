"""
Payment lifecycle state definitions.
"""

from enum import Enum


class PaymentStatus(str, Enum):
    """
    Status of a payment record.
    PENDING is the only non-terminal state.
    """

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not PaymentStatus.PENDING


class PaymentMethod(str, Enum):
    """
    How a payment was made.
    Gateway methods double as the URL segment of the payment endpoints.
    """

    BKASH = "bkash"
    SSLCOMMERZ = "sslcommerz"
    FREE = "free"

    @property
    def display_name(self) -> str:
        """Display name for the method."""
        names = {
            self.BKASH: "bKash",
            self.SSLCOMMERZ: "SSLCommerz",
            self.FREE: "Free enrollment",
        }
        return names.get(self, self.value)

    @property
    def settings_prefix(self) -> str:
        """Key prefix of this method's rows in site_settings."""
        prefixes = {
            self.BKASH: "bkash_",
            self.SSLCOMMERZ: "ssl_",
        }
        return prefixes.get(self, "")


class EnrollmentStatus(str, Enum):
    """Status of an enrollment record."""

    ACTIVE = "active"
    COMPLETED = "completed"
    SUSPENDED = "suspended"
