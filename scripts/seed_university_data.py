"""Seed Contoso University sample data.

Run:
  PYTHONPATH=backend python scripts/seed_university_data.py

The script is idempotent: people, departments and courses are matched on their
natural keys and only created when missing.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import func, select

from app.db.bootstrap import ensure_runtime_schema_compatibility
from app.db.session import SessionLocal
from app.models.course import Course
from app.models.department import Department
from app.models.enrollment import Enrollment, Grade
from app.models.office_assignment import OfficeAssignment
from app.models.person import Person, PersonKind

MOCK_EMAIL_DOMAIN = os.getenv("SEED_MOCK_EMAIL_DOMAIN", "contoso.edu").strip().lower() or "contoso.edu"


@dataclass(frozen=True)
class InstructorSeed:
    last_name: str
    first_mid_name: str
    hire_date: date
    office: str | None = None


@dataclass(frozen=True)
class DepartmentSeed:
    name: str
    budget: Decimal
    start_date: date
    administrator: str


@dataclass(frozen=True)
class CourseSeed:
    id: int
    title: str
    credits: int
    department: str
    instructors: tuple[str, ...]


INSTRUCTORS: list[InstructorSeed] = [
    InstructorSeed("Abercrombie", "Kim", date(1995, 3, 11)),
    InstructorSeed("Fakhouri", "Fadi", date(2002, 7, 6), office="Smith 17"),
    InstructorSeed("Harui", "Roger", date(1998, 7, 1), office="Gowan 27"),
    InstructorSeed("Kapoor", "Candace", date(2001, 1, 15), office="Thompson 304"),
    InstructorSeed("Zheng", "Roger", date(2004, 2, 12)),
]

DEPARTMENTS: list[DepartmentSeed] = [
    DepartmentSeed("English", Decimal("350000"), date(2007, 9, 1), "Abercrombie"),
    DepartmentSeed("Mathematics", Decimal("100000"), date(2007, 9, 1), "Fakhouri"),
    DepartmentSeed("Engineering", Decimal("350000"), date(2007, 9, 1), "Harui"),
    DepartmentSeed("Economics", Decimal("100000"), date(2007, 9, 1), "Kapoor"),
]

COURSES: list[CourseSeed] = [
    CourseSeed(1050, "Chemistry", 3, "Engineering", ("Kapoor", "Harui")),
    CourseSeed(4022, "Microeconomics", 3, "Economics", ("Zheng",)),
    CourseSeed(4041, "Macroeconomics", 3, "Economics", ("Zheng",)),
    CourseSeed(1045, "Calculus", 4, "Mathematics", ("Fakhouri",)),
    CourseSeed(3141, "Trigonometry", 4, "Mathematics", ("Harui",)),
    CourseSeed(2021, "Composition", 3, "English", ("Abercrombie",)),
    CourseSeed(2042, "Literature", 4, "English", ("Abercrombie",)),
]

STUDENTS: list[tuple[str, str, date]] = [
    ("Alexander", "Carson", date(2010, 9, 1)),
    ("Alonso", "Meredith", date(2012, 9, 1)),
    ("Anand", "Arturo", date(2013, 9, 1)),
    ("Barzdukas", "Gytis", date(2012, 9, 1)),
    ("Li", "Yan", date(2012, 9, 1)),
    ("Justice", "Peggy", date(2011, 9, 1)),
    ("Norman", "Laura", date(2013, 9, 1)),
    ("Olivetto", "Nino", date(2005, 9, 1)),
]

# (student last name, course id, grade)
ENROLLMENTS: list[tuple[str, int, Grade | None]] = [
    ("Alexander", 1050, Grade.A),
    ("Alexander", 4022, Grade.C),
    ("Alexander", 4041, Grade.B),
    ("Alonso", 1045, Grade.B),
    ("Alonso", 3141, Grade.F),
    ("Alonso", 2021, Grade.F),
    ("Anand", 1050, None),
    ("Anand", 4022, Grade.B),
    ("Barzdukas", 1050, Grade.B),
    ("Li", 2021, Grade.B),
    ("Justice", 2042, Grade.B),
]


def mock_email(first_mid_name: str, last_name: str) -> str:
    return f"{first_mid_name}.{last_name}@{MOCK_EMAIL_DOMAIN}".lower()


def upsert_person(session, kind: PersonKind, last_name: str, first_mid_name: str) -> Person:
    existing = session.execute(
        select(Person).where(
            Person.kind == kind,
            Person.last_name == last_name,
            Person.first_mid_name == first_mid_name,
        )
    ).scalar_one_or_none()
    if existing is None:
        existing = Person(kind=kind, last_name=last_name, first_mid_name=first_mid_name)
        session.add(existing)
    return existing


def seed_instructors(session) -> dict[str, Person]:
    instructors: dict[str, Person] = {}
    for item in INSTRUCTORS:
        instructor = upsert_person(session, PersonKind.instructor, item.last_name, item.first_mid_name)
        instructor.hire_date = item.hire_date
        if item.office and instructor.office_assignment is None:
            instructor.office_assignment = OfficeAssignment(location=item.office)
        instructors[item.last_name] = instructor
    session.flush()
    return instructors


def seed_students(session) -> dict[str, Person]:
    students: dict[str, Person] = {}
    for last_name, first_mid_name, enrollment_date in STUDENTS:
        student = upsert_person(session, PersonKind.student, last_name, first_mid_name)
        student.enrollment_date = enrollment_date
        student.email_address = student.email_address or mock_email(first_mid_name, last_name)
        students[last_name] = student
    session.flush()
    return students


def seed_departments(session, instructors: dict[str, Person]) -> dict[str, Department]:
    departments: dict[str, Department] = {}
    for item in DEPARTMENTS:
        department = session.execute(select(Department).where(Department.name == item.name)).scalar_one_or_none()
        if department is None:
            department = Department(
                name=item.name,
                budget=item.budget,
                start_date=item.start_date,
                instructor_id=instructors[item.administrator].id,
            )
            session.add(department)
        departments[item.name] = department
    session.flush()
    return departments


def seed_courses(session, departments: dict[str, Department], instructors: dict[str, Person]) -> None:
    for item in COURSES:
        course = session.get(Course, item.id)
        if course is None:
            course = Course(
                id=item.id,
                title=item.title,
                credits=item.credits,
                department_id=departments[item.department].id,
            )
            session.add(course)
        for last_name in item.instructors:
            instructor = instructors[last_name]
            if course not in instructor.courses:
                instructor.courses.append(course)
    session.flush()


def seed_enrollments(session, students: dict[str, Person]) -> None:
    for last_name, course_id, grade in ENROLLMENTS:
        student = students[last_name]
        existing = session.execute(
            select(Enrollment).where(Enrollment.student_id == student.id, Enrollment.course_id == course_id)
        ).scalar_one_or_none()
        if existing is None:
            session.add(Enrollment(student_id=student.id, course_id=course_id, grade=grade))
    session.flush()


def count_people(session) -> dict[str, int]:
    rows = session.execute(select(Person.kind, func.count(Person.id)).group_by(Person.kind)).all()
    return {kind.value: count for kind, count in rows}


def main() -> None:
    ensure_runtime_schema_compatibility()
    with SessionLocal() as session:
        instructors = seed_instructors(session)
        students = seed_students(session)
        departments = seed_departments(session, instructors)
        seed_courses(session, departments, instructors)
        seed_enrollments(session, students)

        session.commit()

        people_counts = count_people(session)
        department_count = session.execute(select(func.count(Department.id))).scalar_one()
        course_count = session.execute(select(func.count(Course.id))).scalar_one()
        enrollment_count = session.execute(select(func.count(Enrollment.id))).scalar_one()

    print("Contoso University data seeded successfully.")
    print("")
    print(f"People by kind: {people_counts}")
    print(f"Departments: {department_count}")
    print(f"Courses: {course_count}")
    print(f"Enrollments: {enrollment_count}")


if __name__ == "__main__":
    main()
