from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Date, DateTime, ForeignKey, Integer, LargeBinary, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.core.row_version import ROW_VERSION_LENGTH, new_row_version
from app.db.base import Base

if TYPE_CHECKING:
    from app.models.course import Course
    from app.models.person import Person


class Department(Base):
    __tablename__ = "departments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    budget: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False, default=Decimal("0"))
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    instructor_id: Mapped[int | None] = mapped_column(ForeignKey("people.id"), index=True, nullable=True)
    # Regenerated by every UPDATE statement, ORM flush or bulk, that does not set it explicitly.
    row_version: Mapped[bytes] = mapped_column(
        LargeBinary(ROW_VERSION_LENGTH),
        nullable=False,
        default=new_row_version,
        onupdate=new_row_version,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    administrator: Mapped[Person | None] = relationship()
    courses: Mapped[list[Course]] = relationship(
        back_populates="department",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Course.id",
    )

    @property
    def administrator_name(self) -> str | None:
        return self.administrator.full_name if self.administrator is not None else None
