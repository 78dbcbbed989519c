from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.exceptions import InvalidRoleError, NotFoundError
from app.models.subject import Subject
from app.models.subject_offering import SubjectOffering
from app.models.teacher_workload import TeacherWorkload
from app.models.user import EmploymentType
from app.schemas.workload import OverloadResult, UnitLimitDecision
from app.services.audit import log_activity
from app.services.references import find_subject_reference, same_entity
from app.services.workload import assignment_unit_cap, load_teacher, teacher_offerings, unit_cap_for

logger = logging.getLogger(__name__)


def validate_teacher_unit_limit(
    db: Session,
    teacher_id: str,
    subject_id: str,
    academic_year: str,
    semester: str,
    settings: Settings | None = None,
) -> UnitLimitDecision:
    """Decide whether assigning ``subject_id`` keeps the teacher within the plain employment cap.

    Counts ``lecture_units + lab_units`` over the term's active offerings that
    already list the teacher. A subject the teacher already holds adds nothing.
    Part-time teachers have no overload path; a full-time teacher over the cap
    needs the overload flag, and once flagged no cap applies.
    """
    settings = settings or get_settings()
    teacher = load_teacher(db, teacher_id)

    reference = find_subject_reference(db, subject_id)
    if reference is None:
        raise NotFoundError("Subject", subject_id)
    subject = reference.subject

    employment_type = (teacher.employment_type or EmploymentType.full_time).value
    cap = assignment_unit_cap(employment_type, settings)
    subject_units = subject.total_units

    term_offerings = db.execute(
        select(SubjectOffering).where(
            SubjectOffering.is_active.is_(True),
            SubjectOffering.academic_year == academic_year,
            SubjectOffering.semester == semester,
        )
    ).scalars()
    current_units = 0
    already_assigned = False
    for offering in teacher_offerings(term_offerings, teacher.id):
        offered_subject = db.get(Subject, offering.subject_id)
        if offered_subject is None:
            continue
        current_units += offered_subject.total_units
        if same_entity(offered_subject.id, subject.id):
            already_assigned = True

    new_total = current_units if already_assigned else current_units + subject_units
    exceeds = new_total > cap
    is_overloaded = bool(teacher.is_overloaded)
    decision = {
        "current_assignment_units": current_units,
        "max_unit_limit": cap,
        "subject_units": subject_units,
        "new_total": new_total,
        "employment_type": employment_type,
        "is_overloaded": is_overloaded,
        "teacher_name": teacher.full_name,
    }

    if employment_type == EmploymentType.part_time.value:
        return UnitLimitDecision(
            valid=not exceeds,
            requires_overload=False,
            reason=(
                f"Cannot assign: would exceed part-time limit of {cap} units "
                f"(current: {current_units}, after adding {subject_units}: {new_total})"
                if exceeds
                else "Unit limit check passed"
            ),
            **decision,
        )

    if exceeds and not is_overloaded:
        return UnitLimitDecision(
            valid=False,
            requires_overload=True,
            reason=f"Teacher would exceed normal limit of {cap} units but can be overloaded with no upper limit",
            **decision,
        )

    return UnitLimitDecision(
        valid=True,
        requires_overload=False,
        reason="Teacher is overloaded - no upper limit applies" if exceeds else "Unit limit check passed",
        **decision,
    )


def set_overload_status(
    db: Session,
    teacher_id: str,
    is_overloaded: bool,
    *,
    actor_id: str | None = None,
    settings: Settings | None = None,
) -> OverloadResult:
    settings = settings or get_settings()
    teacher = load_teacher(db, teacher_id)
    if teacher.employment_type != EmploymentType.full_time:
        raise InvalidRoleError(
            "Only full-time teachers can be overloaded",
            details={"teacher_id": teacher_id, "employment_type": getattr(teacher.employment_type, "value", None)},
        )

    teacher.is_overloaded = is_overloaded
    max_unit_limit = unit_cap_for(EmploymentType.full_time, is_overloaded, settings)
    result = db.execute(
        update(TeacherWorkload)
        .where(TeacherWorkload.teacher_id == teacher.id)
        .values(is_overloaded=is_overloaded, max_unit_limit=max_unit_limit)
    )
    log_activity(
        db,
        user_id=actor_id,
        action="teacher.overload",
        entity_type="user",
        entity_id=teacher.id,
        details={"is_overloaded": is_overloaded},
    )
    db.commit()

    logger.info("Teacher %s overload status set to %s", teacher.id, is_overloaded)
    return OverloadResult(
        teacher_id=teacher.id,
        is_overloaded=is_overloaded,
        max_unit_limit=max_unit_limit,
        workloads_updated=result.rowcount or 0,
    )
