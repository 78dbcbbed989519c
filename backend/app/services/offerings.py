from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import DuplicateError, NotFoundError
from app.models.course import Course
from app.models.subject import Subject
from app.models.subject_offering import SubjectOffering
from app.schemas.offering import OfferingCreate, OfferingUpdate
from app.services.audit import log_activity
from app.services.references import same_entity

logger = logging.getLogger(__name__)


def _ensure_courses_exist(db: Session, course_ids: list[str]) -> None:
    found = set(db.execute(select(Course.id).where(Course.id.in_(course_ids))).scalars())
    for course_id in course_ids:
        if course_id not in found:
            raise NotFoundError("Course", course_id)


def find_overlapping_offering(
    db: Session,
    *,
    subject_id: str,
    course_ids: list[str],
    year_level: int,
    semester: str,
    academic_year: str,
    exclude_id: str | None = None,
) -> SubjectOffering | None:
    """Active offering of the same subject and term whose course set shares any course."""
    candidates = db.execute(
        select(SubjectOffering).where(
            SubjectOffering.subject_id == subject_id,
            SubjectOffering.year_level == year_level,
            SubjectOffering.semester == semester,
            SubjectOffering.academic_year == academic_year,
            SubjectOffering.is_active.is_(True),
        )
    ).scalars()
    wanted = set(course_ids)
    for offering in candidates:
        if exclude_id is not None and offering.id == exclude_id:
            continue
        if wanted.intersection(offering.course_ids or []):
            return offering
    return None


def _overlap_error(existing: SubjectOffering) -> DuplicateError:
    return DuplicateError(
        "Offering already exists or overlaps with existing offering for this subject/course/semester combination",
        details={"offering_id": existing.id, "course_ids": existing.course_ids},
    )


def create_offering(db: Session, payload: OfferingCreate, *, actor_id: str | None = None) -> SubjectOffering:
    if db.get(Subject, payload.subject_id) is None:
        raise NotFoundError("Subject", payload.subject_id)
    _ensure_courses_exist(db, payload.course_ids)

    existing = find_overlapping_offering(
        db,
        subject_id=payload.subject_id,
        course_ids=payload.course_ids,
        year_level=payload.year_level,
        semester=payload.semester,
        academic_year=payload.academic_year,
    )
    if existing is not None:
        raise _overlap_error(existing)

    offering = SubjectOffering(
        subject_id=payload.subject_id,
        course_ids=payload.course_ids,
        year_level=payload.year_level,
        semester=payload.semester,
        academic_year=payload.academic_year,
        assigned_teachers=[item.model_dump(by_alias=True) for item in payload.assigned_teachers],
        preferred_rooms=[item.model_dump(by_alias=True) for item in payload.preferred_rooms],
        capacity=payload.capacity,
        notes=payload.notes,
        is_active=True,
    )
    db.add(offering)
    db.flush()
    log_activity(
        db,
        user_id=actor_id,
        action="offering.create",
        entity_type="subject_offering",
        entity_id=offering.id,
        details={"subject_id": offering.subject_id, "course_ids": offering.course_ids},
    )
    db.commit()
    db.refresh(offering)
    logger.info("Created offering %s for subject %s", offering.id, offering.subject_id)
    return offering


def list_offerings(
    db: Session,
    *,
    course_id: str | None = None,
    year_level: int | None = None,
    semester: str | None = None,
    subject_id: str | None = None,
    academic_year: str | None = None,
    teacher_id: str | None = None,
) -> list[SubjectOffering]:
    query = select(SubjectOffering).where(SubjectOffering.is_active.is_(True))
    if year_level is not None:
        query = query.where(SubjectOffering.year_level == year_level)
    if semester:
        query = query.where(SubjectOffering.semester == semester)
    if subject_id:
        query = query.where(SubjectOffering.subject_id == subject_id)
    if academic_year:
        query = query.where(SubjectOffering.academic_year == academic_year)
    offerings = list(db.execute(query.order_by(SubjectOffering.created_at, SubjectOffering.id)).scalars())

    # JSON list membership is filtered here to stay portable across backends.
    if course_id:
        offerings = [item for item in offerings if course_id in (item.course_ids or [])]
    if teacher_id:
        offerings = [
            item
            for item in offerings
            if any(same_entity(entry, teacher_id) for entry in item.assigned_teachers or [])
        ]
    return offerings


def get_offering(db: Session, offering_id: str) -> SubjectOffering:
    offering = db.get(SubjectOffering, offering_id)
    if offering is None:
        raise NotFoundError("Offering", offering_id)
    return offering


def update_offering(
    db: Session, offering_id: str, payload: OfferingUpdate, *, actor_id: str | None = None
) -> SubjectOffering:
    offering = get_offering(db, offering_id)
    context_keys = {"course_ids", "year_level", "semester", "academic_year"}
    changes = {
        field: value
        for field, value in payload.model_dump(exclude_unset=True).items()
        if not (value is None and field in context_keys)
    }

    if "course_ids" in changes:
        _ensure_courses_exist(db, changes["course_ids"])
    if "assigned_teachers" in changes:
        changes["assigned_teachers"] = [item.model_dump(by_alias=True) for item in payload.assigned_teachers or []]
    if "preferred_rooms" in changes:
        changes["preferred_rooms"] = [item.model_dump(by_alias=True) for item in payload.preferred_rooms or []]

    if offering.is_active and context_keys.intersection(changes):
        existing = find_overlapping_offering(
            db,
            subject_id=offering.subject_id,
            course_ids=changes.get("course_ids", offering.course_ids),
            year_level=changes.get("year_level", offering.year_level),
            semester=changes.get("semester", offering.semester),
            academic_year=changes.get("academic_year", offering.academic_year),
            exclude_id=offering.id,
        )
        if existing is not None:
            raise _overlap_error(existing)

    for field, value in changes.items():
        setattr(offering, field, value)

    log_activity(
        db,
        user_id=actor_id,
        action="offering.update",
        entity_type="subject_offering",
        entity_id=offering.id,
        details={"fields": sorted(changes)},
    )
    db.commit()
    db.refresh(offering)
    return offering


def deactivate_offering(db: Session, offering_id: str, *, actor_id: str | None = None) -> SubjectOffering:
    offering = get_offering(db, offering_id)
    offering.is_active = False
    log_activity(
        db,
        user_id=actor_id,
        action="offering.deactivate",
        entity_type="subject_offering",
        entity_id=offering.id,
    )
    db.commit()
    db.refresh(offering)
    logger.info("Deactivated offering %s", offering.id)
    return offering
