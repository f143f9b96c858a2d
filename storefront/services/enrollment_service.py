"""
Enrollment Service - grants course access.

Access is granted at most once per (student, course): an existing row is
returned as-is and a concurrent insert that loses the unique-key race falls
back to the row that won.
"""

import time
import uuid
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.config import settings
from storefront.errors import BadRequest
from storefront.fsm.states import EnrollmentStatus, PaymentMethod, PaymentStatus
from storefront.models.course import Course
from storefront.models.enrollment import Enrollment
from storefront.models.payment import Payment
from storefront.models.profile import Profile

logger = logging.getLogger(__name__)


class EnrollmentService:
    """Service for creating enrollments."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_enrollment(
        self,
        student_id: uuid.UUID,
        course_id: uuid.UUID,
    ) -> Optional[Enrollment]:
        result = await self.db.execute(
            select(Enrollment).where(
                Enrollment.student_id == student_id,
                Enrollment.course_id == course_id,
            )
        )
        return result.scalar_one_or_none()

    async def grant_access(
        self,
        student_id: uuid.UUID,
        course_id: uuid.UUID,
    ) -> Tuple[Enrollment, bool]:
        """
        Create an active enrollment unless one exists.

        Returns (enrollment, created).
        """
        existing = await self.get_enrollment(student_id, course_id)
        if existing:
            logger.info(f"Enrollment already exists for student {student_id} course {course_id}")
            return existing, False

        enrollment = Enrollment(
            student_id=student_id,
            course_id=course_id,
            status=EnrollmentStatus.ACTIVE.value,
        )

        try:
            async with self.db.begin_nested():
                self.db.add(enrollment)
                await self.db.flush()
        except IntegrityError:
            logger.info(f"Enrollment for student {student_id} course {course_id} created concurrently")
            existing = await self.get_enrollment(student_id, course_id)
            if existing is None:
                raise
            return existing, False

        logger.info(f"Enrollment created for student {student_id} course {course_id}")
        return enrollment, True

    async def enroll_free(self, profile: Profile, course: Course) -> Tuple[Enrollment, bool]:
        """
        Enroll a student in a free course.

        Records a completed zero-amount payment alongside the first enrollment.
        """
        if course.effective_price > 0:
            logger.warning(f"Free enrollment refused for paid course {course.id}")
            raise BadRequest("Course requires payment")

        enrollment, created = await self.grant_access(profile.id, course.id)

        if created:
            self.db.add(
                Payment(
                    user_id=profile.id,
                    course_id=course.id,
                    amount=Decimal("0"),
                    currency=settings.default_currency,
                    status=PaymentStatus.COMPLETED.value,
                    payment_method=PaymentMethod.FREE.value,
                    transaction_id=f"FREE_{course.id}_{time.time_ns()}",
                    payment_date=datetime.now(timezone.utc),
                )
            )

        await self.db.commit()
        return enrollment, created
