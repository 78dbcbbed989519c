"""Identity helpers shared by the conflict, hours and workload code.

Teacher references arrive either as a raw id or as a populated object
(``{"_id": ...}``, ``{"id": ...}``, ``{"teacherId": ...}`` or an ORM row), and
event subject references may point at a Subject or at a SubjectOffering.
Both shapes are normalized here, once.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.models.subject import Subject
from app.models.subject_offering import SubjectOffering

_ID_KEYS = ("_id", "id", "teacherId", "teacher_id")


def entity_id(ref: Any) -> str | None:
    if ref is None:
        return None
    if isinstance(ref, dict):
        for key in _ID_KEYS:
            if ref.get(key) is not None:
                return entity_id(ref[key])
        return None
    nested = getattr(ref, "id", None)
    if nested is not None and not isinstance(ref, (str, int)):
        return str(nested)
    text = str(ref).strip()
    return text or None


def same_entity(ref: Any, other: Any) -> bool:
    left = entity_id(ref)
    right = entity_id(other)
    return left is not None and left == right


@dataclass(frozen=True)
class SubjectReference:
    ref_id: str
    kind: Literal["subject", "offering"]
    subject: Subject
    offering: SubjectOffering | None = None

    @property
    def subject_id(self) -> str:
        return self.subject.id


def find_subject_reference(db: Session, ref_id: str) -> SubjectReference | None:
    subject = db.get(Subject, ref_id)
    if subject is not None:
        return SubjectReference(ref_id=ref_id, kind="subject", subject=subject)
    offering = db.get(SubjectOffering, ref_id)
    if offering is None:
        return None
    subject = db.get(Subject, offering.subject_id)
    if subject is None:
        return None
    return SubjectReference(ref_id=ref_id, kind="offering", subject=subject, offering=offering)


def resolve_subject_reference(db: Session, ref_id: str) -> SubjectReference:
    reference = find_subject_reference(db, ref_id)
    if reference is None:
        raise NotFoundError("Subject or offering", ref_id)
    return reference


class SubjectResolver:
    """Memoizing resolver for a batch of event references."""

    def __init__(self, db: Session) -> None:
        self._db = db
        self._cache: dict[str, SubjectReference | None] = {}

    def __call__(self, ref_id: str) -> SubjectReference | None:
        key = str(ref_id)
        if key not in self._cache:
            self._cache[key] = find_subject_reference(self._db, key)
        return self._cache[key]
