from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import Date, DateTime, Enum as SAEnum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.db.base import Base
from app.models.course import course_instructor

if TYPE_CHECKING:
    from app.models.course import Course
    from app.models.enrollment import Enrollment
    from app.models.office_assignment import OfficeAssignment


class PersonKind(str, Enum):
    student = "student"
    instructor = "instructor"


class Person(Base):
    """A student or an instructor, told apart by ``kind``.

    Student-only columns (email address, enrollment date) and instructor-only
    columns (hire date) are nullable and left empty for the other variant.
    """

    __tablename__ = "people"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    kind: Mapped[PersonKind] = mapped_column(SAEnum(PersonKind, name="person_kind"), index=True, nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    first_mid_name: Mapped[str] = mapped_column(String(50), nullable=False)
    email_address: Mapped[str | None] = mapped_column(String(128), nullable=True)
    enrollment_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    hire_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    courses: Mapped[list[Course]] = relationship(
        secondary=course_instructor,
        back_populates="instructors",
        order_by="Course.id",
    )
    office_assignment: Mapped[OfficeAssignment | None] = relationship(
        back_populates="instructor",
        uselist=False,
        cascade="all, delete-orphan",
    )
    enrollments: Mapped[list[Enrollment]] = relationship(
        back_populates="student",
        cascade="all, delete-orphan",
    )

    @property
    def full_name(self) -> str:
        return f"{self.last_name}, {self.first_mid_name}"

    @property
    def is_instructor(self) -> bool:
        return self.kind == PersonKind.instructor

    @property
    def is_student(self) -> bool:
        return self.kind == PersonKind.student

    @property
    def office_location(self) -> str | None:
        return self.office_assignment.location if self.office_assignment is not None else None

    @property
    def course_ids(self) -> list[int]:
        return sorted(course.id for course in self.courses)
