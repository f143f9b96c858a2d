"""Services package."""

from storefront.services.auth_service import AuthService
from storefront.services.user_service import UserService
from storefront.services.course_service import CourseService
from storefront.services.enrollment_service import EnrollmentService
from storefront.services.payment_initiator import PaymentInitiator
from storefront.services.payment_verifier import PaymentVerifier
from storefront.services.settings_provider import (
    SettingsProvider,
    SiteSettingsProvider,
    StaticSettingsProvider,
)

__all__ = [
    "AuthService",
    "UserService",
    "CourseService",
    "EnrollmentService",
    "PaymentInitiator",
    "PaymentVerifier",
    "SettingsProvider",
    "SiteSettingsProvider",
    "StaticSettingsProvider",
]
