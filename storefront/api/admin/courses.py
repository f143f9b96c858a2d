"""
Admin Course Endpoints.
Lesson hierarchy for the lesson management screen.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import get_admin_user
from storefront.database import get_db
from storefront.services.course_service import CourseService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/courses/{course_id}/lessons")
async def get_course_lessons(
    course_id: str,
    published_only: bool = False,
    db: AsyncSession = Depends(get_db),
    _: str = Depends(get_admin_user),
):
    """Lessons of a course nested with sub-lessons and materials."""
    lessons = await CourseService(db).get_lesson_tree(course_id, published_only=published_only)
    return {"success": True, "course_id": course_id, "lessons": lessons}
