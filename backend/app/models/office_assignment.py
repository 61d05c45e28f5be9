from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base

if TYPE_CHECKING:
    from app.models.person import Person


class OfficeAssignment(Base):
    __tablename__ = "office_assignments"

    instructor_id: Mapped[int] = mapped_column(ForeignKey("people.id", ondelete="CASCADE"), primary_key=True)
    location: Mapped[str] = mapped_column(String(50), nullable=False)

    instructor: Mapped[Person] = relationship(back_populates="office_assignment")
