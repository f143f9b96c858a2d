"""Course catalog models - courses, lessons and lesson materials."""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, DateTime, Numeric, Integer, Boolean, Text, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from storefront.database import Base


class Course(Base):
    """Course listed in the catalog."""

    __tablename__ = "courses"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    short_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    discounted_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)

    is_published: Mapped[Optional[bool]] = mapped_column(Boolean, default=False, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Course {self.slug}>"

    @property
    def effective_price(self) -> Decimal:
        """Price the student pays: a non-zero discount when set, else the list price."""
        # Admin form stores 0 for "no discount"
        if self.discounted_price:
            return Decimal(self.discounted_price)
        return Decimal(self.price or 0)


class Lesson(Base):
    """
    Lesson of a course.
    Lessons nest through parent_lesson_id; order_index orders siblings.
    """

    __tablename__ = "lessons"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    course_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    parent_lesson_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        nullable=True,
        index=True,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_published: Mapped[Optional[bool]] = mapped_column(Boolean, default=False, nullable=True)

    def __repr__(self) -> str:
        return f"<Lesson {self.title}>"


class CourseMaterial(Base):
    """Downloadable or viewable material attached to a lesson."""

    __tablename__ = "course_materials"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    course_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    lesson_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        nullable=True,
        index=True,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    file_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    material_type: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
