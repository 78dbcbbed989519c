from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_actor_id, get_db
from app.schemas.offering import OfferingCreate, OfferingOut, OfferingUpdate, SemesterValue
from app.services import offerings as offering_service

router = APIRouter()


@router.get("/", response_model=list[OfferingOut])
def list_offerings(
    course_id: str | None = Query(default=None, alias="courseId"),
    year_level: int | None = Query(default=None, alias="yearLevel", ge=1, le=4),
    semester: SemesterValue | None = None,
    subject_id: str | None = Query(default=None, alias="subjectId"),
    academic_year: str | None = Query(default=None, alias="academicYear"),
    teacher_id: str | None = Query(default=None, alias="teacherId"),
    db: Session = Depends(get_db),
) -> list[OfferingOut]:
    return offering_service.list_offerings(
        db,
        course_id=course_id,
        year_level=year_level,
        semester=semester,
        subject_id=subject_id,
        academic_year=academic_year,
        teacher_id=teacher_id,
    )


@router.post("/", response_model=OfferingOut, status_code=status.HTTP_201_CREATED)
def create_offering(
    payload: OfferingCreate,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> OfferingOut:
    return offering_service.create_offering(db, payload, actor_id=actor_id)


@router.get("/{offering_id}", response_model=OfferingOut)
def get_offering(offering_id: str, db: Session = Depends(get_db)) -> OfferingOut:
    return offering_service.get_offering(db, offering_id)


@router.put("/{offering_id}", response_model=OfferingOut)
def update_offering(
    offering_id: str,
    payload: OfferingUpdate,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> OfferingOut:
    return offering_service.update_offering(db, offering_id, payload, actor_id=actor_id)


@router.delete("/{offering_id}", response_model=OfferingOut)
def deactivate_offering(
    offering_id: str,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> OfferingOut:
    return offering_service.deactivate_offering(db, offering_id, actor_id=actor_id)
