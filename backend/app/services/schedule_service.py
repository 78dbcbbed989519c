"""Schedule writes: validate candidate events, then persist them atomically.

Every create and update runs the hours validator and both conflict checkers
against one snapshot of the other active schedules. The read-validate-write
sequence holds a process-wide lock and, where the database supports it, runs
in a SERIALIZABLE transaction so two concurrent writes cannot both pass
validation against a stale view.
"""
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.exceptions import DuplicateError, NotFoundError, ScheduleValidationError
from app.models.course import Course
from app.models.schedule import Schedule, ScheduleEvent
from app.models.subject_offering import SubjectOffering
from app.schemas.conflict import ScheduleValidationReport
from app.schemas.schedule import (
    EventTeacher,
    RecycleScheduleRequest,
    RecycleScheduleResult,
    ScheduleCreate,
    ScheduleEventIn,
    ScheduleOut,
    ScheduleUpdate,
)
from app.services.audit import log_activity
from app.services.conflict_service import ConflictService, ScheduleContext
from app.services.hours_validator import validate_subject_hours
from app.services.offerings import find_overlapping_offering
from app.services.references import SubjectResolver, same_entity

logger = logging.getLogger(__name__)

_write_lock = threading.Lock()


@contextmanager
def serialized_write(db: Session) -> Iterator[None]:
    with _write_lock:
        if db.get_bind().dialect.name != "sqlite" and not db.in_transaction():
            db.connection(execution_options={"isolation_level": "SERIALIZABLE"})
        try:
            yield
        except Exception:
            db.rollback()
            raise


def _active_schedules(db: Session, exclude_id: str | None = None) -> list[Schedule]:
    query = select(Schedule).where(Schedule.is_active.is_(True))
    if exclude_id is not None:
        query = query.where(Schedule.id != exclude_id)
    return list(db.execute(query.order_by(Schedule.created_at, Schedule.id)).scalars())


def _find_duplicate(db: Session, context: ScheduleContext, exclude_id: str | None = None) -> Schedule | None:
    query = select(Schedule).where(
        Schedule.is_active.is_(True),
        Schedule.course_id == context.course_id,
        Schedule.year_level == context.year_level,
        Schedule.semester == context.semester,
        Schedule.academic_year == context.academic_year,
    )
    if exclude_id is not None:
        query = query.where(Schedule.id != exclude_id)
    return db.execute(query).scalars().first()


def _raise_duplicate(existing: Schedule) -> None:
    raise DuplicateError(
        "A schedule for this course, year level, and semester already exists",
        details={"schedule_id": existing.id, "name": existing.name},
    )


def validate_schedule_events(
    db: Session,
    events: Sequence,
    context: ScheduleContext,
    *,
    exclude_schedule_id: str | None = None,
    resolver: SubjectResolver | None = None,
    settings: Settings | None = None,
) -> ScheduleValidationReport:
    """Run all three validators; unknown subject references fail before any of them."""
    settings = settings or get_settings()
    resolver = resolver or SubjectResolver(db)
    for event in events:
        if resolver(event.subject_id) is None:
            raise NotFoundError("Subject or offering", event.subject_id)

    checker = ConflictService(events)
    internal_conflicts = checker.internal_conflicts()
    conflicts = checker.cross_schedule_conflicts(_active_schedules(db, exclude_schedule_id), context)
    hours = validate_subject_hours(events, resolver, enforce_minimum=settings.enforce_minimum_hours)

    return ScheduleValidationReport(
        is_valid=not internal_conflicts and not conflicts and hours.is_valid,
        internal_conflicts=internal_conflicts,
        conflicts=conflicts,
        violations=hours.violations,
    )


def _raise_if_invalid(report: ScheduleValidationReport, context: ScheduleContext) -> None:
    if report.is_valid:
        return
    if report.internal_conflicts:
        message = "Time conflicts detected within this schedule"
    elif report.conflicts:
        message = "Schedule conflicts detected"
    else:
        message = "Subject hours validation failed"
    logger.warning(
        "Rejected schedule write for course %s year %s (%s %s): %s",
        context.course_id,
        context.year_level,
        context.academic_year,
        context.semester,
        message,
    )
    raise ScheduleValidationError(message, details=report.model_dump(exclude={"is_valid"}))


def _build_events(events: Sequence[ScheduleEventIn], resolver: SubjectResolver) -> list[ScheduleEvent]:
    rows = []
    for position, event in enumerate(events):
        subject = resolver(event.subject_id).subject
        rows.append(
            ScheduleEvent(
                position=position,
                day=event.day,
                start_time=event.start_time,
                end_time=event.end_time,
                subject_id=event.subject_id,
                subject_name=event.subject_name or subject.name,
                subject_code=event.subject_code or subject.code,
                session_type=event.session_type,
                room=event.room,
                teacher_id=event.teacher_id,
                teacher_name=event.teacher_name,
            )
        )
    return rows


def _load_course(db: Session, course_id: str) -> Course:
    course = db.get(Course, course_id)
    if course is None:
        raise NotFoundError("Course", course_id)
    return course


def get_schedule(db: Session, schedule_id: str) -> Schedule:
    schedule = db.get(Schedule, schedule_id)
    if schedule is None or not schedule.is_active:
        raise NotFoundError("Schedule", schedule_id)
    return schedule


def list_schedules(
    db: Session,
    *,
    course_id: str | None = None,
    year_level: str | None = None,
    semester: str | None = None,
    academic_year: str | None = None,
) -> list[Schedule]:
    query = select(Schedule).where(Schedule.is_active.is_(True))
    if course_id:
        query = query.where(Schedule.course_id == course_id)
    if year_level:
        query = query.where(Schedule.year_level == year_level)
    if semester:
        query = query.where(Schedule.semester == semester)
    if academic_year:
        query = query.where(Schedule.academic_year == academic_year)
    return list(db.execute(query.order_by(Schedule.created_at.desc(), Schedule.id)).scalars())


def schedules_for_teacher(db: Session, teacher_id: str) -> list[ScheduleOut]:
    """Active schedules reduced to the events assigned to ``teacher_id``; schedules without any are dropped."""
    results = []
    for schedule in list_schedules(db):
        out = ScheduleOut.model_validate(schedule)
        out.events = [event for event in out.events if same_entity(event.teacher_id, teacher_id)]
        if out.events:
            results.append(out)
    return results


def create_schedule(
    db: Session, payload: ScheduleCreate, *, actor_id: str | None = None, settings: Settings | None = None
) -> Schedule:
    context = ScheduleContext(
        course_id=payload.course_id,
        year_level=payload.year_level,
        semester=payload.semester,
        academic_year=payload.academic_year,
    )
    with serialized_write(db):
        course = _load_course(db, payload.course_id)
        existing = _find_duplicate(db, context)
        if existing is not None:
            _raise_duplicate(existing)

        resolver = SubjectResolver(db)
        report = validate_schedule_events(db, payload.events, context, resolver=resolver, settings=settings)
        _raise_if_invalid(report, context)

        schedule = Schedule(
            name=payload.name,
            academic_year=payload.academic_year,
            course_id=course.id,
            course_name=payload.course_name or course.name,
            course_abbreviation=payload.course_abbreviation or course.abbreviation,
            year_level=payload.year_level,
            semester=payload.semester,
            is_active=True,
            created_by=actor_id,
        )
        schedule.events = _build_events(payload.events, resolver)
        db.add(schedule)
        db.flush()
        log_activity(
            db,
            user_id=actor_id,
            action="schedule.create",
            entity_type="schedule",
            entity_id=schedule.id,
            details={"events": len(schedule.events)},
        )
        db.commit()

    db.refresh(schedule)
    logger.info("Created schedule %s (%s) with %s events", schedule.id, schedule.name, len(schedule.events))
    return schedule


def update_schedule(
    db: Session,
    schedule_id: str,
    payload: ScheduleUpdate,
    *,
    actor_id: str | None = None,
    settings: Settings | None = None,
) -> Schedule:
    changes = payload.model_dump(exclude_unset=True, exclude={"events"})
    changes = {field: value for field, value in changes.items() if value is not None}

    with serialized_write(db):
        schedule = get_schedule(db, schedule_id)
        context = ScheduleContext(
            course_id=changes.get("course_id", schedule.course_id),
            year_level=changes.get("year_level", schedule.year_level),
            semester=changes.get("semester", schedule.semester),
            academic_year=changes.get("academic_year", schedule.academic_year),
        )
        context_changed = context != ScheduleContext(
            course_id=schedule.course_id,
            year_level=schedule.year_level,
            semester=schedule.semester,
            academic_year=schedule.academic_year,
        )

        if "course_id" in changes and changes["course_id"] != schedule.course_id:
            course = _load_course(db, changes["course_id"])
            changes.setdefault("course_name", course.name)
            changes.setdefault("course_abbreviation", course.abbreviation)

        if context_changed:
            existing = _find_duplicate(db, context, exclude_id=schedule.id)
            if existing is not None:
                _raise_duplicate(existing)

        resolver = SubjectResolver(db)
        new_events = payload.events
        if new_events is not None or context_changed:
            candidates = new_events if new_events is not None else list(schedule.events)
            report = validate_schedule_events(
                db,
                candidates,
                context,
                exclude_schedule_id=schedule.id,
                resolver=resolver,
                settings=settings,
            )
            _raise_if_invalid(report, context)

        for field, value in changes.items():
            setattr(schedule, field, value)
        if new_events is not None:
            schedule.events = _build_events(new_events, resolver)

        log_activity(
            db,
            user_id=actor_id,
            action="schedule.update",
            entity_type="schedule",
            entity_id=schedule.id,
            details={"fields": sorted(changes), "events_replaced": new_events is not None},
        )
        db.commit()

    db.refresh(schedule)
    logger.info("Updated schedule %s", schedule.id)
    return schedule


def delete_schedule(db: Session, schedule_id: str, *, actor_id: str | None = None) -> Schedule:
    schedule = get_schedule(db, schedule_id)
    schedule.is_active = False
    log_activity(db, user_id=actor_id, action="schedule.delete", entity_type="schedule", entity_id=schedule.id)
    db.commit()
    logger.info("Soft-deleted schedule %s", schedule.id)
    return schedule


def _source_offerings(db: Session, schedule: Schedule) -> list[SubjectOffering]:
    offerings = db.execute(
        select(SubjectOffering)
        .where(
            SubjectOffering.is_active.is_(True),
            SubjectOffering.year_level == int(schedule.year_level),
            SubjectOffering.semester == schedule.semester,
            SubjectOffering.academic_year == schedule.academic_year,
        )
        .order_by(SubjectOffering.created_at, SubjectOffering.id)
    ).scalars()
    return [offering for offering in offerings if schedule.course_id in (offering.course_ids or [])]


def recycle_schedule(
    db: Session,
    payload: RecycleScheduleRequest,
    *,
    actor_id: str | None = None,
    settings: Settings | None = None,
) -> RecycleScheduleResult:
    """Copy a schedule and its course's offerings into another term.

    Teacher mappings replace ``assigned_teachers[assignment_index]`` of the
    copied offering; events realizing that offering follow the replacement.
    An offering that already exists in the target term is reused as-is.
    """
    with serialized_write(db):
        source = get_schedule(db, payload.source_schedule_id)
        context = ScheduleContext(
            course_id=source.course_id,
            year_level=source.year_level,
            semester=payload.target_semester,
            academic_year=payload.target_academic_year,
        )
        existing = _find_duplicate(db, context)
        if existing is not None:
            _raise_duplicate(existing)

        offering_map: dict[str, str] = {}
        teacher_map: dict[tuple[str, str], dict] = {}
        subjects_copied = 0
        teachers_updated = 0

        for offering in _source_offerings(db, source):
            target = find_overlapping_offering(
                db,
                subject_id=offering.subject_id,
                course_ids=offering.course_ids,
                year_level=offering.year_level,
                semester=payload.target_semester,
                academic_year=payload.target_academic_year,
            )
            if target is None:
                assigned = [dict(entry) for entry in offering.assigned_teachers or []]
                for mapping in payload.teacher_mappings:
                    if mapping.offering_id != offering.id or mapping.assignment_index >= len(assigned):
                        continue
                    previous = assigned[mapping.assignment_index]
                    replacement = {
                        "teacherId": mapping.new_teacher_id,
                        "teacherName": mapping.new_teacher_name,
                        "type": mapping.assignment_type or previous.get("type"),
                    }
                    assigned[mapping.assignment_index] = replacement
                    if previous.get("teacherId"):
                        # Events may reference the offering or its subject directly.
                        for ref_id in (offering.id, offering.subject_id):
                            teacher_map[(ref_id, str(previous["teacherId"]))] = replacement
                    teachers_updated += 1

                target = SubjectOffering(
                    subject_id=offering.subject_id,
                    course_ids=list(offering.course_ids or []),
                    year_level=offering.year_level,
                    semester=payload.target_semester,
                    academic_year=payload.target_academic_year,
                    assigned_teachers=assigned,
                    preferred_rooms=list(offering.preferred_rooms or []),
                    capacity=offering.capacity,
                    notes=offering.notes,
                    is_active=True,
                )
                db.add(target)
                db.flush()
                subjects_copied += 1
            offering_map[offering.id] = target.id

        candidates = []
        for event in source.events:
            teacher_id, teacher_name = event.teacher_id, event.teacher_name
            replacement = teacher_map.get((event.subject_id, str(teacher_id))) if teacher_id else None
            if replacement is not None:
                teacher_id, teacher_name = replacement["teacherId"], replacement["teacherName"]
            candidates.append(
                ScheduleEventIn(
                    day=event.day,
                    start_time=event.start_time,
                    end_time=event.end_time,
                    subject_id=offering_map.get(event.subject_id, event.subject_id),
                    subject_name=event.subject_name,
                    subject_code=event.subject_code,
                    session_type=event.session_type,
                    room=event.room,
                    assigned_teacher=EventTeacher(teacher_id=teacher_id, teacher_name=teacher_name)
                    if teacher_id
                    else None,
                )
            )

        resolver = SubjectResolver(db)
        report = validate_schedule_events(db, candidates, context, resolver=resolver, settings=settings)
        _raise_if_invalid(report, context)

        schedule = Schedule(
            name=(
                f"{source.course_abbreviation} Year {source.year_level} - "
                f"{payload.target_academic_year} Semester {payload.target_semester}"
            ),
            academic_year=payload.target_academic_year,
            course_id=source.course_id,
            course_name=source.course_name,
            course_abbreviation=source.course_abbreviation,
            year_level=source.year_level,
            semester=payload.target_semester,
            is_active=True,
            created_by=actor_id,
        )
        schedule.events = _build_events(candidates, resolver)
        db.add(schedule)
        db.flush()
        log_activity(
            db,
            user_id=actor_id,
            action="schedule.recycle",
            entity_type="schedule",
            entity_id=schedule.id,
            details={
                "source_schedule_id": source.id,
                "subjects_copied": subjects_copied,
                "teachers_updated": teachers_updated,
            },
        )
        db.commit()

    logger.info("Recycled schedule %s into %s", source.id, schedule.id)
    return RecycleScheduleResult(
        new_schedule_id=schedule.id,
        subjects_copied=subjects_copied,
        teachers_updated=teachers_updated,
    )
