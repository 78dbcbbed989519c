from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_actor_id, get_db
from app.schemas.conflict import ScheduleValidationReport
from app.schemas.offering import SemesterValue
from app.schemas.schedule import (
    RecycleScheduleRequest,
    RecycleScheduleResult,
    ScheduleCreate,
    ScheduleOut,
    ScheduleUpdate,
    ScheduleValidateRequest,
)
from app.services import schedule_service
from app.services.conflict_service import ScheduleContext

router = APIRouter()


@router.get("/", response_model=list[ScheduleOut])
def list_schedules(
    course_id: str | None = Query(default=None, alias="courseId"),
    year_level: str | None = Query(default=None, alias="yearLevel"),
    semester: SemesterValue | None = None,
    academic_year: str | None = Query(default=None, alias="academicYear"),
    db: Session = Depends(get_db),
) -> list[ScheduleOut]:
    return schedule_service.list_schedules(
        db, course_id=course_id, year_level=year_level, semester=semester, academic_year=academic_year
    )


@router.post("/", response_model=ScheduleOut, status_code=status.HTTP_201_CREATED)
def create_schedule(
    payload: ScheduleCreate,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> ScheduleOut:
    return schedule_service.create_schedule(db, payload, actor_id=actor_id)


@router.post("/validate", response_model=ScheduleValidationReport)
def validate_schedule(payload: ScheduleValidateRequest, db: Session = Depends(get_db)) -> ScheduleValidationReport:
    context = ScheduleContext(
        course_id=payload.course_id,
        year_level=payload.year_level,
        semester=payload.semester,
        academic_year=payload.academic_year,
    )
    return schedule_service.validate_schedule_events(
        db, payload.events, context, exclude_schedule_id=payload.exclude_schedule_id
    )


@router.post("/recycle", response_model=RecycleScheduleResult, status_code=status.HTTP_201_CREATED)
def recycle_schedule(
    payload: RecycleScheduleRequest,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> RecycleScheduleResult:
    return schedule_service.recycle_schedule(db, payload, actor_id=actor_id)


@router.get("/by-teacher/{teacher_id}", response_model=list[ScheduleOut])
def schedules_by_teacher(teacher_id: str, db: Session = Depends(get_db)) -> list[ScheduleOut]:
    return schedule_service.schedules_for_teacher(db, teacher_id)


@router.get("/{schedule_id}", response_model=ScheduleOut)
def get_schedule(schedule_id: str, db: Session = Depends(get_db)) -> ScheduleOut:
    return schedule_service.get_schedule(db, schedule_id)


@router.put("/{schedule_id}", response_model=ScheduleOut)
def update_schedule(
    schedule_id: str,
    payload: ScheduleUpdate,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> ScheduleOut:
    return schedule_service.update_schedule(db, schedule_id, payload, actor_id=actor_id)


@router.delete("/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_schedule(
    schedule_id: str,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> None:
    schedule_service.delete_schedule(db, schedule_id, actor_id=actor_id)
