from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_actor_id, get_db
from app.core.config import get_settings
from app.core.exceptions import NotFoundError
from app.schemas.offering import SemesterValue
from app.schemas.workload import (
    ConstraintStatus,
    FleetConstraintStatus,
    FormattedWorkload,
    OverloadResult,
    OverloadUpdate,
    RecalculateRequest,
    SubjectUnitsOut,
    TeacherWorkloadOut,
    UnitLimitDecision,
    UnitLimitRequest,
    WorkloadBatchOut,
    WorkloadReport,
    WorkloadSummary,
)
from app.services import unit_limit, workload

router = APIRouter()

settings = get_settings()


class TermParams:
    def __init__(
        self,
        academic_year: str = Query(
            default=settings.default_academic_year, alias="academicYear", pattern=r"^\d{4}-\d{4}$"
        ),
        semester: SemesterValue = Query(default=settings.default_semester),
    ) -> None:
        self.academic_year = academic_year
        self.semester = semester


@router.get("/teacher/{teacher_id}", response_model=TeacherWorkloadOut)
def get_teacher_workload(
    teacher_id: str,
    term: TermParams = Depends(),
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> TeacherWorkloadOut:
    return workload.calculate_teacher_workload(
        db, teacher_id, term.academic_year, term.semester, actor_id=actor_id
    )


@router.get("/teacher/{teacher_id}/report", response_model=WorkloadReport)
def get_teacher_workload_report(
    teacher_id: str, term: TermParams = Depends(), db: Session = Depends(get_db)
) -> WorkloadReport:
    return workload.get_teacher_workload_report(db, teacher_id, term.academic_year, term.semester)


@router.get("/teacher/{teacher_id}/formatted", response_model=FormattedWorkload)
def get_formatted_workload(
    teacher_id: str, term: TermParams = Depends(), db: Session = Depends(get_db)
) -> FormattedWorkload:
    formatted = workload.format_workload_display(
        workload.get_stored_workload(db, teacher_id, term.academic_year, term.semester)
    )
    if formatted is None:
        raise NotFoundError("Workload", teacher_id)
    return formatted


@router.get("/teacher/{teacher_id}/constraints", response_model=ConstraintStatus)
def get_teacher_constraints(
    teacher_id: str,
    term: TermParams = Depends(),
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> ConstraintStatus:
    return workload.teacher_constraint_status(
        db, teacher_id, term.academic_year, term.semester, actor_id=actor_id
    )


@router.post("/teacher/{teacher_id}/overload", response_model=OverloadResult)
def set_overload(
    teacher_id: str,
    payload: OverloadUpdate,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> OverloadResult:
    return unit_limit.set_overload_status(db, teacher_id, payload.is_overloaded, actor_id=actor_id)


@router.get("/all-teachers/summary", response_model=WorkloadSummary)
def get_all_teachers_summary(term: TermParams = Depends(), db: Session = Depends(get_db)) -> WorkloadSummary:
    return workload.get_all_teachers_workload_summary(db, term.academic_year, term.semester)


@router.get("/all-teachers/constraints", response_model=FleetConstraintStatus)
def get_all_teachers_constraints(
    term: TermParams = Depends(), db: Session = Depends(get_db)
) -> FleetConstraintStatus:
    return workload.all_teachers_constraint_status(db, term.academic_year, term.semester)


@router.post("/recalculate-all", response_model=WorkloadBatchOut)
def recalculate_all(
    payload: RecalculateRequest,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> WorkloadBatchOut:
    return workload.recalculate_all_teacher_workloads(
        db, payload.academic_year, payload.semester, fail_fast=payload.fail_fast, actor_id=actor_id
    )


@router.post("/validate-assignment", response_model=UnitLimitDecision)
def validate_assignment(payload: UnitLimitRequest, db: Session = Depends(get_db)) -> UnitLimitDecision:
    return unit_limit.validate_teacher_unit_limit(
        db, payload.teacher_id, payload.subject_id, payload.academic_year, payload.semester
    )


@router.get("/subject/{schedule_id}/{ref_id}", response_model=SubjectUnitsOut)
def get_subject_units(schedule_id: str, ref_id: str, db: Session = Depends(get_db)) -> SubjectUnitsOut:
    return workload.calculate_subject_units_in_schedule(db, schedule_id, ref_id)
