"""Enrollment model - course access granted to a student."""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, DateTime, Float, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from storefront.database import Base
from storefront.fsm.states import EnrollmentStatus


class Enrollment(Base):
    """
    One enrollment per (student, course).
    The unique constraint makes repeated grants collapse into one row.
    """

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_enrollments_student_course"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    # profiles.id of the student
    student_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        nullable=False,
        index=True,
    )

    course_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        nullable=False,
        index=True,
    )

    status: Mapped[Optional[str]] = mapped_column(
        String(20),
        default=EnrollmentStatus.ACTIVE.value,
        nullable=True,
    )

    progress: Mapped[Optional[float]] = mapped_column(
        Float,
        default=0.0,
        nullable=True,
    )

    enrolled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Enrollment student={self.student_id} course={self.course_id}>"
