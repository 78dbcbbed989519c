"""Teacher workload: unit caps, per-term rebuild of the workload view and reports.

Two totals are tracked per teacher and term. Assignment units credit the
subject's ``lecture_units + lab_units`` once per course an offering targets;
schedule units scale the same figure by the number of weekly events placed
for that offering in the course's schedule. A subject combined across two
courses and taught in one shared event therefore costs fewer schedule units
than the same subject taught twice.
"""
from __future__ import annotations

import logging
from typing import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.exceptions import AppError, InvalidRoleError, NotFoundError
from app.models.course import Course
from app.models.schedule import Schedule
from app.models.subject import Subject
from app.models.subject_offering import SubjectOffering
from app.models.teacher_workload import TeacherWorkload
from app.models.user import EmploymentType, User, UserRole
from app.schemas.workload import (
    ConstraintStatus,
    FleetConstraintStatus,
    FormattedBreakdownLine,
    FormattedWorkload,
    SubjectUnitsOut,
    TeacherWorkloadOut,
    WorkloadBatchOut,
    WorkloadFailure,
    WorkloadReport,
    WorkloadReportLine,
    WorkloadSummary,
    WorkloadSummaryEntry,
)
from app.services.audit import log_activity
from app.services.references import entity_id, resolve_subject_reference, same_entity
from app.services.time_window import format_window

logger = logging.getLogger(__name__)

SEMESTER_LABELS = {"1": "1st", "2": "2nd"}


def _employment_value(employment_type) -> str:
    if isinstance(employment_type, EmploymentType):
        return employment_type.value
    return employment_type or EmploymentType.full_time.value


def assignment_unit_cap(employment_type, settings: Settings | None = None) -> int:
    """Plain employment cap; never grants the overload allowance."""
    settings = settings or get_settings()
    if _employment_value(employment_type) == EmploymentType.part_time.value:
        return settings.part_time_unit_cap
    return settings.full_time_unit_cap


def unit_cap_for(employment_type, is_overloaded: bool, settings: Settings | None = None) -> int:
    settings = settings or get_settings()
    if _employment_value(employment_type) == EmploymentType.part_time.value:
        return settings.part_time_unit_cap
    if is_overloaded:
        return settings.overload_unit_limit
    return settings.full_time_unit_cap


def semester_label(semester: str, academic_year: str) -> str:
    return f"{SEMESTER_LABELS.get(semester, 'Summer')} Semester {academic_year}"


def _matching_events(schedule: Schedule | None, offering: SubjectOffering) -> list:
    if schedule is None:
        return []
    return [
        event
        for event in schedule.events
        if event.subject_id == offering.id or event.subject_id == offering.subject_id
    ]


def _locate_schedule(schedules: Sequence[Schedule], course_id: str, offering: SubjectOffering) -> Schedule | None:
    for schedule in schedules:
        if (
            same_entity(schedule.course_id, course_id)
            and schedule.year_level == str(offering.year_level)
            and schedule.semester == offering.semester
        ):
            return schedule
    return None


def teacher_offerings(offerings: Iterable[SubjectOffering], teacher_id: str) -> list[SubjectOffering]:
    return [
        offering
        for offering in offerings
        if any(same_entity(entry, teacher_id) for entry in offering.assigned_teachers or [])
    ]


def build_teaching_assignments(
    offerings: Sequence[SubjectOffering],
    subjects: dict[str, Subject],
    courses: dict[str, Course],
    schedules: Sequence[Schedule],
    academic_year: str,
) -> tuple[list[dict], int, int]:
    """Expand offerings into one assignment per (offering, course) pair.

    Returns ``(assignments, total_assignment_units, total_schedule_units)``.
    Order follows ``offerings`` and then each offering's course list, so the
    result is stable for unchanged inputs.
    """
    assignments: list[dict] = []
    seen: set[tuple[str, str]] = set()
    total_assignment_units = 0
    total_schedule_units = 0

    for offering in offerings:
        subject = subjects.get(offering.subject_id)
        if subject is None:
            logger.warning("Offering %s references missing subject %s", offering.id, offering.subject_id)
            continue
        subject_total_units = subject.total_units

        for course_id in offering.course_ids or []:
            key = (offering.id, str(course_id))
            if key in seen:
                continue
            seen.add(key)

            schedule = _locate_schedule(schedules, course_id, offering)
            events = _matching_events(schedule, offering)
            event_count = len(events)
            assignment_units = subject_total_units
            schedule_units = subject_total_units * event_count
            total_assignment_units += assignment_units
            total_schedule_units += schedule_units

            course = courses.get(str(course_id))
            assignments.append(
                {
                    "offering_id": offering.id,
                    "subject_id": subject.id,
                    "subject_code": subject.code,
                    "subject_name": subject.name,
                    "course_id": str(course_id),
                    "course_name": course.name if course else (schedule.course_name if schedule else None),
                    "course_abbreviation": (
                        course.abbreviation if course else (schedule.course_abbreviation if schedule else None)
                    ),
                    "schedule_id": schedule.id if schedule else None,
                    "lecture_units": int(subject.lecture_units or 0),
                    "lab_units": int(subject.lab_units or 0),
                    "subject_total_units": subject_total_units,
                    "assignment_units": assignment_units,
                    "schedule_units": schedule_units,
                    "event_count": event_count,
                    "year_level": str(offering.year_level),
                    "semester": offering.semester,
                    "academic_year": academic_year,
                    "events": [
                        {
                            "day": event.day,
                            "start_time": event.start_time,
                            "end_time": event.end_time,
                            "room": event.room or "TBD",
                        }
                        for event in events
                    ],
                    "has_schedule": schedule is not None,
                }
            )

    return assignments, total_assignment_units, total_schedule_units


def _workload_summary(assignments: list[dict], total_assignment_units: int) -> dict:
    count = len(assignments)
    return {
        "total_assignments": count,
        "scheduled_assignments": sum(1 for item in assignments if item["has_schedule"]),
        "total_events": sum(item["event_count"] for item in assignments),
        "average_units_per_course": round(total_assignment_units / count, 2) if count else 0,
    }


def load_teacher(db: Session, teacher_id: str) -> User:
    teacher = db.get(User, teacher_id)
    if teacher is None:
        raise NotFoundError("Teacher", teacher_id)
    if teacher.role != UserRole.teacher:
        raise InvalidRoleError(
            f"User {teacher.full_name} is not a teacher",
            details={"user_id": teacher_id, "role": teacher.role.value},
        )
    return teacher


def get_stored_workload(db: Session, teacher_id: str, academic_year: str, semester: str) -> TeacherWorkload | None:
    return db.execute(
        select(TeacherWorkload).where(
            TeacherWorkload.teacher_id == teacher_id,
            TeacherWorkload.academic_year == academic_year,
            TeacherWorkload.semester == semester,
        )
    ).scalar_one_or_none()


def calculate_teacher_workload(
    db: Session,
    teacher_id: str,
    academic_year: str,
    semester: str,
    *,
    actor_id: str | None = None,
    settings: Settings | None = None,
) -> TeacherWorkload:
    """Rebuild and store the workload view for one teacher and term.

    The stored row is fully replaced in a single commit. An unknown teacher
    fails before anything is written.
    """
    settings = settings or get_settings()
    teacher = load_teacher(db, teacher_id)

    term_offerings = list(
        db.execute(
            select(SubjectOffering)
            .where(
                SubjectOffering.is_active.is_(True),
                SubjectOffering.academic_year == academic_year,
                SubjectOffering.semester == semester,
            )
            .order_by(SubjectOffering.created_at, SubjectOffering.id)
        ).scalars()
    )
    offerings = teacher_offerings(term_offerings, teacher.id)

    subject_ids = {offering.subject_id for offering in offerings}
    subjects = {}
    if subject_ids:
        subjects = {
            subject.id: subject
            for subject in db.execute(select(Subject).where(Subject.id.in_(subject_ids))).scalars()
        }
    course_ids = {str(course_id) for offering in offerings for course_id in offering.course_ids or []}
    courses = {}
    if course_ids:
        courses = {course.id: course for course in db.execute(select(Course).where(Course.id.in_(course_ids))).scalars()}

    schedules = list(
        db.execute(
            select(Schedule)
            .where(
                Schedule.is_active.is_(True),
                Schedule.semester == semester,
                Schedule.academic_year == academic_year,
            )
            .order_by(Schedule.created_at, Schedule.id)
        ).scalars()
    )

    assignments, total_assignment_units, total_schedule_units = build_teaching_assignments(
        offerings, subjects, courses, schedules, academic_year
    )

    employment_type = _employment_value(teacher.employment_type)
    is_overloaded = bool(teacher.is_overloaded)

    workload = get_stored_workload(db, teacher.id, academic_year, semester)
    if workload is None:
        workload = TeacherWorkload(teacher_id=teacher.id, academic_year=academic_year, semester=semester)
        db.add(workload)

    workload.teacher_name = teacher.full_name
    workload.first_name = teacher.first_name
    workload.last_name = teacher.last_name
    workload.email = teacher.email
    workload.employment_type = employment_type
    workload.is_overloaded = is_overloaded
    workload.max_unit_limit = unit_cap_for(employment_type, is_overloaded, settings)
    workload.teaching_assignments = assignments
    workload.total_assignment_units = total_assignment_units
    workload.total_schedule_units = total_schedule_units
    workload.total_courses = len(assignments)
    workload.summary = _workload_summary(assignments, total_assignment_units)
    workload.is_active = True

    log_activity(
        db,
        user_id=actor_id,
        action="workload.recalculate",
        entity_type="teacher_workload",
        entity_id=teacher.id,
        details={
            "academic_year": academic_year,
            "semester": semester,
            "total_assignment_units": total_assignment_units,
            "total_schedule_units": total_schedule_units,
        },
    )
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(workload)

    logger.info(
        "Workload recalculated for teacher %s (%s %s): %s assignment units, %s schedule units",
        teacher.id,
        academic_year,
        semester,
        total_assignment_units,
        total_schedule_units,
    )
    return workload


def assigned_teacher_ids(db: Session) -> list[str]:
    """Distinct teacher ids referenced by any active offering, sorted."""
    teacher_ids: set[str] = set()
    for assigned in db.execute(
        select(SubjectOffering.assigned_teachers).where(SubjectOffering.is_active.is_(True))
    ).scalars():
        for entry in assigned or []:
            teacher_id = entity_id(entry)
            if teacher_id:
                teacher_ids.add(teacher_id)
    return sorted(teacher_ids)


def recalculate_all_teacher_workloads(
    db: Session,
    academic_year: str,
    semester: str,
    *,
    fail_fast: bool | None = None,
    actor_id: str | None = None,
    settings: Settings | None = None,
) -> WorkloadBatchOut:
    """Recompute every referenced teacher, each in its own transaction.

    With ``fail_fast`` the first failure is re-raised; rows committed for
    earlier teachers stay. Otherwise failures are collected and returned.
    """
    settings = settings or get_settings()
    if fail_fast is None:
        fail_fast = settings.workload_batch_fail_fast

    recalculated: list[TeacherWorkloadOut] = []
    failures: list[WorkloadFailure] = []
    for teacher_id in assigned_teacher_ids(db):
        try:
            workload = calculate_teacher_workload(
                db, teacher_id, academic_year, semester, actor_id=actor_id, settings=settings
            )
        except AppError as exc:
            db.rollback()
            logger.warning("Workload recalculation failed for teacher %s: %s", teacher_id, exc.message)
            if fail_fast:
                raise
            failures.append(WorkloadFailure(teacher_id=teacher_id, error=exc.message))
            continue
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Storage error while recalculating workload for teacher %s", teacher_id)
            if fail_fast:
                raise
            failures.append(WorkloadFailure(teacher_id=teacher_id, error=str(exc)))
            continue
        recalculated.append(TeacherWorkloadOut.model_validate(workload))

    logger.info(
        "Recalculated %s workloads for %s %s (%s failed)",
        len(recalculated),
        academic_year,
        semester,
        len(failures),
    )
    return WorkloadBatchOut(
        academic_year=academic_year,
        semester=semester,
        fail_fast=fail_fast,
        recalculated=recalculated,
        failures=failures,
    )


def _assignment_policy(assignment: dict) -> str:
    return (
        f"{assignment['subject_total_units']} units x {assignment['event_count']} event(s) = "
        f"{assignment['schedule_units']} schedule units; {assignment['assignment_units']} assignment units"
    )


def get_teacher_workload_report(db: Session, teacher_id: str, academic_year: str, semester: str) -> WorkloadReport:
    workload = get_stored_workload(db, teacher_id, academic_year, semester)
    if workload is None:
        return WorkloadReport(
            teacher_id=teacher_id,
            academic_year=academic_year,
            semester=semester,
            message="No workload found for this teacher",
        )

    return WorkloadReport(
        teacher_id=workload.teacher_id,
        teacher_name=workload.teacher_name,
        email=workload.email,
        academic_year=workload.academic_year,
        semester=workload.semester,
        total_assignment_units=workload.total_assignment_units,
        total_schedule_units=workload.total_schedule_units,
        total_courses=workload.total_courses,
        summary=workload.summary or {},
        assignments=[
            WorkloadReportLine(
                subject=f"{item['subject_code']} - {item['subject_name']}",
                course=item.get("course_abbreviation"),
                subject_total_units=item["subject_total_units"],
                event_count=item["event_count"],
                assignment_units=item["assignment_units"],
                schedule_units=item["schedule_units"],
                events=item.get("events", []),
                policy=_assignment_policy(item),
            )
            for item in workload.teaching_assignments or []
        ],
    )


def format_workload_display(workload: TeacherWorkload | None) -> FormattedWorkload | None:
    if workload is None:
        return None

    breakdown = []
    for item in workload.teaching_assignments or []:
        windows = [format_window(event["day"], event["start_time"], event["end_time"]) for event in item.get("events", [])]
        breakdown.append(
            FormattedBreakdownLine(
                subject=item["subject_code"],
                course=item.get("course_abbreviation"),
                schedule=", ".join(windows) if windows else "Not scheduled",
                calculation=(
                    f"{item['subject_total_units']} units x {item['event_count']} event(s) = "
                    f"{item['schedule_units']} units"
                ),
            )
        )

    return FormattedWorkload(
        teacher=workload.teacher_name,
        email=workload.email,
        semester=semester_label(workload.semester, workload.academic_year),
        total_assignment_units=workload.total_assignment_units,
        total_schedule_units=workload.total_schedule_units,
        max_unit_limit=workload.max_unit_limit,
        breakdown=breakdown,
    )


def _stored_workloads(db: Session, academic_year: str, semester: str) -> list[TeacherWorkload]:
    return list(
        db.execute(
            select(TeacherWorkload)
            .where(
                TeacherWorkload.academic_year == academic_year,
                TeacherWorkload.semester == semester,
                TeacherWorkload.is_active.is_(True),
            )
            .order_by(TeacherWorkload.teacher_name, TeacherWorkload.teacher_id)
        ).scalars()
    )


def get_all_teachers_workload_summary(db: Session, academic_year: str, semester: str) -> WorkloadSummary:
    workloads = _stored_workloads(db, academic_year, semester)
    entries = [
        WorkloadSummaryEntry(
            teacher_id=workload.teacher_id,
            teacher_name=workload.teacher_name,
            email=workload.email,
            employment_type=workload.employment_type,
            total_assignment_units=workload.total_assignment_units,
            total_schedule_units=workload.total_schedule_units,
            total_courses=workload.total_courses,
            average_units_per_course=(workload.summary or {}).get("average_units_per_course", 0),
            assignment_count=len(workload.teaching_assignments or []),
        )
        for workload in workloads
    ]
    total_units = sum(entry.total_assignment_units for entry in entries)
    return WorkloadSummary(
        academic_year=academic_year,
        semester=semester,
        total_teachers=len(entries),
        summary=entries,
        total_units_assigned=total_units,
        average_units_per_teacher=round(total_units / len(entries), 2) if entries else 0,
    )


def _constraint_status(workload: TeacherWorkload, settings: Settings) -> ConstraintStatus:
    cap = assignment_unit_cap(workload.employment_type, settings)
    total = workload.total_assignment_units
    exceeds = total > cap
    remaining = max(0, cap - total)
    return ConstraintStatus(
        teacher_id=workload.teacher_id,
        teacher_name=workload.teacher_name,
        email=workload.email,
        employment_type=workload.employment_type,
        is_overloaded=workload.is_overloaded,
        max_unit_limit=cap,
        total_assignment_units=total,
        total_schedule_units=workload.total_schedule_units,
        remaining_units=remaining,
        exceeds_limit=exceeds,
        overload_units=total - cap if exceeds else 0,
        status="OVERLOAD" if exceeds else "OK",
        message=(
            f"Teacher exceeds limit by {total - cap} units"
            if exceeds
            else f"Teacher can take {remaining} more units"
        ),
    )


def teacher_constraint_status(
    db: Session,
    teacher_id: str,
    academic_year: str,
    semester: str,
    *,
    actor_id: str | None = None,
    settings: Settings | None = None,
) -> ConstraintStatus:
    settings = settings or get_settings()
    workload = calculate_teacher_workload(
        db, teacher_id, academic_year, semester, actor_id=actor_id, settings=settings
    )
    return _constraint_status(workload, settings)


def all_teachers_constraint_status(
    db: Session, academic_year: str, semester: str, settings: Settings | None = None
) -> FleetConstraintStatus:
    settings = settings or get_settings()
    statuses = [_constraint_status(workload, settings) for workload in _stored_workloads(db, academic_year, semester)]
    overloaded = sum(1 for status in statuses if status.exceeds_limit)
    return FleetConstraintStatus(
        academic_year=academic_year,
        semester=semester,
        total_teachers=len(statuses),
        ok_teachers=len(statuses) - overloaded,
        overloaded_teachers=overloaded,
        constraint_limits={
            EmploymentType.part_time.value: settings.part_time_unit_cap,
            EmploymentType.full_time.value: settings.full_time_unit_cap,
        },
        teachers=statuses,
    )


def calculate_subject_units_in_schedule(db: Session, schedule_id: str, ref_id: str) -> SubjectUnitsOut:
    schedule = db.get(Schedule, schedule_id)
    if schedule is None:
        raise NotFoundError("Schedule", schedule_id)
    reference = resolve_subject_reference(db, ref_id)

    if reference.offering is not None:
        ids = {reference.offering.id, reference.subject_id}
    else:
        ids = {reference.subject_id}
    event_count = sum(1 for event in schedule.events if event.subject_id in ids)
    units = reference.subject.total_units
    return SubjectUnitsOut(
        schedule_id=schedule.id,
        ref_id=ref_id,
        subject_id=reference.subject_id,
        subject_total_units=units,
        event_count=event_count,
        unit_count=units * event_count,
        policy="Units = (lecture units + lab units) x event count",
    )
