from fastapi import APIRouter, Depends, status
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.exceptions import DuplicateError, NotFoundError
from app.models.course import Course
from app.schemas.course import CourseCreate, CourseOut

router = APIRouter()


@router.get("/", response_model=list[CourseOut])
def list_courses(db: Session = Depends(get_db)) -> list[CourseOut]:
    return list(db.execute(select(Course).order_by(Course.name)).scalars())


@router.post("/", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
def create_course(payload: CourseCreate, db: Session = Depends(get_db)) -> CourseOut:
    existing = db.execute(
        select(Course).where(or_(Course.name == payload.name, Course.abbreviation == payload.abbreviation))
    ).scalars().first()
    if existing:
        raise DuplicateError("Course name or abbreviation already exists", details={"course_id": existing.id})
    course = Course(**payload.model_dump())
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


@router.get("/{course_id}", response_model=CourseOut)
def get_course(course_id: str, db: Session = Depends(get_db)) -> CourseOut:
    course = db.get(Course, course_id)
    if course is None:
        raise NotFoundError("Course", course_id)
    return course
