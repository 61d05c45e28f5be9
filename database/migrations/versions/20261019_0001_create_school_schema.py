"""create school schema

Revision ID: 20261019_0001
Revises: None
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


person_kind_enum = sa.Enum("student", "instructor", name="person_kind")
grade_enum = sa.Enum("A", "B", "C", "D", "F", name="grade")


def upgrade() -> None:
    op.create_table(
        "people",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("kind", person_kind_enum, nullable=False),
        sa.Column("last_name", sa.String(length=50), nullable=False),
        sa.Column("first_mid_name", sa.String(length=50), nullable=False),
        sa.Column("email_address", sa.String(length=128), nullable=True),
        sa.Column("enrollment_date", sa.Date(), nullable=True),
        sa.Column("hire_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_people_kind", "people", ["kind"])

    op.create_table(
        "departments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("budget", sa.Numeric(19, 4), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column(
            "instructor_id",
            sa.Integer(),
            sa.ForeignKey("people.id"),
            nullable=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_departments_instructor_id", "departments", ["instructor_id"])

    op.create_table(
        "courses",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False, nullable=False),
        sa.Column("title", sa.String(length=50), nullable=False),
        sa.Column("credits", sa.Integer(), nullable=False),
        sa.Column(
            "department_id",
            sa.Integer(),
            sa.ForeignKey("departments.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_courses_department_id", "courses", ["department_id"])

    op.create_table(
        "course_instructor",
        sa.Column("course_id", sa.Integer(), sa.ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("instructor_id", sa.Integer(), sa.ForeignKey("people.id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "office_assignments",
        sa.Column(
            "instructor_id",
            sa.Integer(),
            sa.ForeignKey("people.id", ondelete="CASCADE"),
            primary_key=True,
            nullable=False,
        ),
        sa.Column("location", sa.String(length=50), nullable=False),
    )

    op.create_table(
        "enrollments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("course_id", sa.Integer(), sa.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("student_id", sa.Integer(), sa.ForeignKey("people.id", ondelete="CASCADE"), nullable=False),
        sa.Column("grade", grade_enum, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_enrollments_course_id", "enrollments", ["course_id"])
    op.create_index("ix_enrollments_student_id", "enrollments", ["student_id"])


def downgrade() -> None:
    op.drop_index("ix_enrollments_student_id", table_name="enrollments")
    op.drop_index("ix_enrollments_course_id", table_name="enrollments")
    op.drop_table("enrollments")
    op.drop_table("office_assignments")
    op.drop_table("course_instructor")
    op.drop_index("ix_courses_department_id", table_name="courses")
    op.drop_table("courses")
    op.drop_index("ix_departments_instructor_id", table_name="departments")
    op.drop_table("departments")
    op.drop_index("ix_people_kind", table_name="people")
    op.drop_table("people")
    grade_enum.drop(op.get_bind(), checkfirst=True)
    person_kind_enum.drop(op.get_bind(), checkfirst=True)
