"""
Course Endpoints.
Direct enrollment in free courses.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import get_current_user_id
from storefront.database import get_db
from storefront.services.course_service import CourseService
from storefront.services.enrollment_service import EnrollmentService
from storefront.services.user_service import UserService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/{course_id}/enroll")
async def enroll_in_free_course(
    course_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Enroll the caller in a free course.

    Paid courses go through /payments/{method}/initiate instead.
    """
    profile = await UserService(db).get_profile(user_id)
    course = await CourseService(db).get_course(course_id)

    enrollment, created = await EnrollmentService(db).enroll_free(profile, course)

    logger.info(f"Free enrollment for {profile.id} in {course.id} (created={created})")

    return {
        "success": True,
        "enrollment_id": str(enrollment.id),
        "course_id": str(course.id),
        "status": enrollment.status,
        "created": created,
    }
