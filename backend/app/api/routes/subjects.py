from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.exceptions import DuplicateError, NotFoundError
from app.models.subject import Subject, default_required_hours
from app.schemas.subject import SubjectCreate, SubjectOut, SubjectUpdate

router = APIRouter()


def _get_subject(db: Session, subject_id: str) -> Subject:
    subject = db.get(Subject, subject_id)
    if subject is None:
        raise NotFoundError("Subject", subject_id)
    return subject


@router.get("/", response_model=list[SubjectOut])
def list_subjects(
    search: str | None = Query(default=None, max_length=100),
    department: str | None = Query(default=None, max_length=200),
    include_inactive: bool = False,
    db: Session = Depends(get_db),
) -> list[SubjectOut]:
    query = select(Subject).order_by(Subject.code)
    if not include_inactive:
        query = query.where(Subject.is_active.is_(True))
    if department:
        query = query.where(Subject.department == department)
    if search:
        pattern = f"%{search.strip().lower()}%"
        query = query.where(or_(func.lower(Subject.code).like(pattern), func.lower(Subject.name).like(pattern)))
    return list(db.execute(query).scalars())


@router.post("/", response_model=SubjectOut, status_code=status.HTTP_201_CREATED)
def create_subject(payload: SubjectCreate, db: Session = Depends(get_db)) -> SubjectOut:
    existing = db.execute(select(Subject).where(Subject.code == payload.code)).scalar_one_or_none()
    if existing:
        raise DuplicateError("Subject code already exists", details={"subject_id": existing.id})
    subject = Subject(**payload.model_dump())
    db.add(subject)
    db.commit()
    db.refresh(subject)
    return subject


@router.put("/{subject_id}", response_model=SubjectOut)
def update_subject(subject_id: str, payload: SubjectUpdate, db: Session = Depends(get_db)) -> SubjectOut:
    subject = _get_subject(db, subject_id)
    data = {key: value for key, value in payload.model_dump(exclude_unset=True).items() if value is not None}

    if "code" in data:
        existing = db.execute(
            select(Subject).where(Subject.code == data["code"], Subject.id != subject_id)
        ).scalar_one_or_none()
        if existing:
            raise DuplicateError("Subject code already exists", details={"subject_id": existing.id})

    for key, value in data.items():
        setattr(subject, key, value)
    if "required_hours" not in data and {"lecture_units", "lab_units"}.intersection(data):
        subject.required_hours = default_required_hours(subject.lecture_units, subject.lab_units)

    db.commit()
    db.refresh(subject)
    return subject


@router.delete("/{subject_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_subject(subject_id: str, db: Session = Depends(get_db)) -> None:
    subject = _get_subject(db, subject_id)
    subject.is_active = False
    db.commit()
