"""Seed a small demo term: courses, teachers, subjects and combined offerings.

Run:
  PYTHONPATH=backend python scripts/seed_demo_data.py
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from sqlalchemy import func, select

from app.db.bootstrap import ensure_runtime_schema_compatibility
from app.db.session import SessionLocal
from app.models.course import Course
from app.models.subject import Subject, default_required_hours, default_units
from app.models.subject_offering import SubjectOffering
from app.models.user import EmploymentType, User, UserRole
from app.services.workload import recalculate_all_teacher_workloads

ACADEMIC_YEAR = os.getenv("SEED_ACADEMIC_YEAR", "2024-2025").strip() or "2024-2025"
SEMESTER = os.getenv("SEED_SEMESTER", "1").strip() or "1"
MOCK_EMAIL_DOMAIN = os.getenv("SEED_MOCK_EMAIL_DOMAIN", "school.edu").strip().lower() or "school.edu"

COURSES = [
    ("Bachelor of Science in Information Technology", "BSIT"),
    ("Bachelor of Science in Tourism Management", "BSTM"),
    ("Bachelor of Science in Hospitality Management", "BSHM"),
]


@dataclass(frozen=True)
class TeacherProfile:
    honorific: str
    first_name: str
    last_name: str
    employee_id: str
    employment_type: EmploymentType


@dataclass(frozen=True)
class SubjectItem:
    code: str
    name: str
    has_lab: bool
    course_abbreviations: tuple[str, ...]
    teacher_employee_id: str
    year_level: int = 1


TEACHERS = [
    TeacherProfile("Dr.", "Maria", "Santos", "EMP-0001", EmploymentType.full_time),
    TeacherProfile("Mr.", "Jose", "Reyes", "EMP-0002", EmploymentType.full_time),
    TeacherProfile("Ms.", "Ana", "Cruz", "EMP-0003", EmploymentType.part_time),
]

SUBJECTS = [
    SubjectItem("NSTP1", "National Service Training Program 1", False, ("BSIT", "BSTM", "BSHM"), "EMP-0001"),
    SubjectItem("GE1", "Understanding the Self", False, ("BSIT", "BSTM"), "EMP-0001"),
    SubjectItem("IT101", "Introduction to Computing", True, ("BSIT",), "EMP-0002"),
    SubjectItem("IT102", "Computer Programming 1", True, ("BSIT",), "EMP-0002"),
    SubjectItem("TM101", "Macro Perspective of Tourism", False, ("BSTM",), "EMP-0003"),
    SubjectItem("HM101", "Kitchen Essentials", True, ("BSHM",), "EMP-0003"),
]


def mock_email(profile: TeacherProfile) -> str:
    return f"{profile.first_name}.{profile.last_name}@{MOCK_EMAIL_DOMAIN}".lower()


def upsert_course(session, name: str, abbreviation: str) -> Course:
    course = session.execute(select(Course).where(Course.abbreviation == abbreviation)).scalar_one_or_none()
    if course is None:
        course = Course(name=name, abbreviation=abbreviation)
        session.add(course)
    else:
        course.name = name
    session.flush()
    return course


def upsert_teacher(session, profile: TeacherProfile) -> User:
    teacher = session.execute(
        select(User).where(User.employee_id == profile.employee_id)
    ).scalar_one_or_none()
    if teacher is None:
        teacher = User(employee_id=profile.employee_id, role=UserRole.teacher)
        session.add(teacher)
    teacher.honorific = profile.honorific
    teacher.first_name = profile.first_name
    teacher.last_name = profile.last_name
    teacher.email = mock_email(profile)
    teacher.employment_type = profile.employment_type
    teacher.is_overloaded = False
    session.flush()
    return teacher


def upsert_subject(session, item: SubjectItem) -> Subject:
    subject = session.execute(select(Subject).where(Subject.code == item.code)).scalar_one_or_none()
    lecture_units, lab_units = default_units(item.has_lab)
    if subject is None:
        subject = Subject(code=item.code)
        session.add(subject)
    subject.name = item.name
    subject.has_lab = item.has_lab
    subject.lecture_units = lecture_units
    subject.lab_units = lab_units
    subject.required_hours = default_required_hours(lecture_units, lab_units)
    subject.is_active = True
    session.flush()
    return subject


def upsert_offering(session, subject: Subject, course_ids: list[str], teacher: User, year_level: int) -> SubjectOffering:
    offering = session.execute(
        select(SubjectOffering).where(
            SubjectOffering.subject_id == subject.id,
            SubjectOffering.year_level == year_level,
            SubjectOffering.semester == SEMESTER,
            SubjectOffering.academic_year == ACADEMIC_YEAR,
        )
    ).scalars().first()
    if offering is None:
        offering = SubjectOffering(
            subject_id=subject.id,
            year_level=year_level,
            semester=SEMESTER,
            academic_year=ACADEMIC_YEAR,
        )
        session.add(offering)
    offering.course_ids = course_ids
    offering.assigned_teachers = [
        {"teacherId": teacher.id, "teacherName": teacher.display_name, "type": "lecture"}
    ]
    offering.is_active = True
    session.flush()
    return offering


def main() -> None:
    ensure_runtime_schema_compatibility()
    with SessionLocal() as session:
        courses = {abbreviation: upsert_course(session, name, abbreviation) for name, abbreviation in COURSES}
        teachers = {profile.employee_id: upsert_teacher(session, profile) for profile in TEACHERS}
        for item in SUBJECTS:
            subject = upsert_subject(session, item)
            upsert_offering(
                session,
                subject,
                [courses[abbreviation].id for abbreviation in item.course_abbreviations],
                teachers[item.teacher_employee_id],
                item.year_level,
            )
        session.commit()

        batch = recalculate_all_teacher_workloads(session, ACADEMIC_YEAR, SEMESTER, fail_fast=False)
        offering_count = session.execute(select(func.count(SubjectOffering.id))).scalar_one()

    print("Demo data seeded successfully.")
    print("")
    print(f"Term: {ACADEMIC_YEAR} semester {SEMESTER}")
    print(f"Courses: {len(courses)}")
    print(f"Offerings: {offering_count}")
    for workload in batch.recalculated:
        print(
            f"  {workload.teacher_name}: {workload.total_assignment_units}/"
            f"{workload.max_unit_limit} assignment units"
        )
    for failure in batch.failures:
        print(f"  failed {failure.teacher_id}: {failure.error}")


if __name__ == "__main__":
    main()
