import os

# Keep the app's own engine off disk; tests bind their own in-memory engine below.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient  # fake http client that calls the FastAPI routes without a server
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_db
from app.core.config import get_settings
from app.db.base import Base
from app.main import app
from app.models.course import Course
from app.models.subject import Subject, default_required_hours
from app.models.subject_offering import SubjectOffering
from app.models.user import EmploymentType, User, UserRole


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def settings():
    return get_settings()


@pytest.fixture()
def make_course(db_session):
    def factory(name="Bachelor of Science in Information Technology", abbreviation="BSIT"):
        course = Course(name=name, abbreviation=abbreviation, description="")
        db_session.add(course)
        db_session.commit()
        return course

    return factory


@pytest.fixture()
def make_subject(db_session):
    def factory(code="IT101", name="Intro to Computing", lecture_units=3, lab_units=0):
        subject = Subject(
            code=code,
            name=name,
            has_lab=lab_units > 0,
            lecture_units=lecture_units,
            lab_units=lab_units,
            required_hours=default_required_hours(lecture_units, lab_units),
        )
        db_session.add(subject)
        db_session.commit()
        return subject

    return factory


@pytest.fixture()
def make_teacher(db_session):
    counter = {"value": 0}

    def factory(
        first_name="Ada",
        last_name="Lovelace",
        employment_type=EmploymentType.full_time,
        is_overloaded=False,
        role=UserRole.teacher,
    ):
        counter["value"] += 1
        user = User(
            first_name=first_name,
            last_name=last_name,
            email=f"user{counter['value']}@school.edu",
            role=role,
            honorific="Prof." if role == UserRole.teacher else None,
            employee_id=f"EMP-{counter['value']:03d}",
            employment_type=employment_type if role == UserRole.teacher else None,
            is_overloaded=is_overloaded,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return factory


@pytest.fixture()
def make_offering(db_session):
    def factory(subject, courses, teachers=(), year_level=1, semester="1", academic_year="2024-2025"):
        offering = SubjectOffering(
            subject_id=subject.id,
            course_ids=[course.id for course in courses],
            year_level=year_level,
            semester=semester,
            academic_year=academic_year,
            assigned_teachers=[
                {"teacherId": teacher.id, "teacherName": teacher.full_name, "type": "lecture"}
                for teacher in teachers
            ],
            preferred_rooms=[],
        )
        db_session.add(offering)
        db_session.commit()
        return offering

    return factory
