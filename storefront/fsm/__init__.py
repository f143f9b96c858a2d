"""FSM package for payment lifecycle management."""

from storefront.fsm.states import PaymentStatus, PaymentMethod, EnrollmentStatus

__all__ = ["PaymentStatus", "PaymentMethod", "EnrollmentStatus"]
