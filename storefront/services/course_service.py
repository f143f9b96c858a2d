"""
Course Service - catalog lookups used by checkout and course content.
"""

import uuid
import logging
from typing import Any, Dict, List, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.errors import CourseNotFound
from storefront.models.course import Course, CourseMaterial, Lesson
from storefront.services.lesson_tree import build_lesson_tree
from storefront.services.user_service import parse_uuid

logger = logging.getLogger(__name__)


class CourseService:
    """Service for course lookups."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_course(self, course_id: Union[str, uuid.UUID]) -> Course:
        """Course by id, or CourseNotFound."""
        course_uuid = parse_uuid(course_id)
        if not course_uuid:
            logger.error(f"Invalid course_id format: {course_id}")
            raise CourseNotFound()

        result = await self.db.execute(
            select(Course).where(Course.id == course_uuid)
        )
        course = result.scalar_one_or_none()

        if not course:
            logger.error(f"Course not found: {course_id}")
            raise CourseNotFound()

        return course

    async def get_lesson_tree(
        self,
        course_id: Union[str, uuid.UUID],
        published_only: bool = False,
    ) -> List[Dict[str, Any]]:
        """Lessons of a course nested into parent/child trees with materials."""
        course = await self.get_course(course_id)

        query = select(Lesson).where(Lesson.course_id == course.id)
        if published_only:
            query = query.where(Lesson.is_published.is_(True))
        lessons = (await self.db.execute(query.order_by(Lesson.order_index))).scalars().all()

        materials = (
            await self.db.execute(
                select(CourseMaterial)
                .where(CourseMaterial.course_id == course.id)
                .order_by(CourseMaterial.order_index)
            )
        ).scalars().all()

        return build_lesson_tree(lessons, materials)
