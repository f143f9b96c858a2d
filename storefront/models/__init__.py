"""Models package for database models."""

from storefront.models.profile import Profile
from storefront.models.course import Course, Lesson, CourseMaterial
from storefront.models.payment import Payment
from storefront.models.enrollment import Enrollment
from storefront.models.site_setting import SiteSetting

__all__ = [
    "Profile",
    "Course",
    "Lesson",
    "CourseMaterial",
    "Payment",
    "Enrollment",
    "SiteSetting",
]
