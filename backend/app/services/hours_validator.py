from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from app.schemas.conflict import HoursValidationResult, HoursViolation
from app.services.references import SubjectReference
from app.services.time_window import to_minutes

logger = logging.getLogger(__name__)

Resolver = Callable[[str], Optional[SubjectReference]]


def _hours(value: float) -> str:
    return f"{value:g}"


def scheduled_minutes_by_subject(events: Iterable, resolve: Resolver) -> dict[tuple[str, str], dict]:
    """Sum event minutes per (resolved subject, session type), in first-seen order.

    Events referencing an offering are grouped with events referencing the
    offering's subject directly.
    """
    groups: dict[tuple[str, str], dict] = {}
    for event in events:
        reference = resolve(event.subject_id)
        if reference is None:
            logger.debug("Skipping hours check for unknown subject reference %s", event.subject_id)
            continue
        session_type = event.session_type or "lecture"
        key = (reference.subject_id, session_type)
        group = groups.setdefault(key, {"subject": reference.subject, "minutes": 0})
        group["minutes"] += to_minutes(event.end_time) - to_minutes(event.start_time)
    return groups


def validate_subject_hours(events: Iterable, resolve: Resolver, enforce_minimum: bool = False) -> HoursValidationResult:
    violations: list[HoursViolation] = []
    for (subject_id, session_type), group in scheduled_minutes_by_subject(events, resolve).items():
        subject = group["subject"]
        minutes = group["minutes"]
        scheduled = minutes / 60
        requirement = subject.required_sessions().get(session_type)
        identity = {
            "subject_id": subject_id,
            "subject_name": subject.name,
            "subject_code": subject.code,
            "session_type": session_type,
            "scheduled_hours": scheduled,
        }

        if requirement is None:
            violations.append(
                HoursViolation(
                    kind="lab_not_offered",
                    message=f"{subject.name} does not have a lab component",
                    **identity,
                )
            )
            continue

        required_minutes = int(requirement["hours"]) * 60
        required = float(requirement["hours"])
        # Compare whole minutes; hours are for reporting only.
        if minutes > required_minutes:
            violations.append(
                HoursViolation(
                    kind="over_scheduled",
                    required_hours=required,
                    excess_hours=(minutes - required_minutes) / 60,
                    message=(
                        f"{subject.name} {session_type} is scheduled for {_hours(scheduled)}h "
                        f"but requires only {_hours(required)}h"
                    ),
                    **identity,
                )
            )
        elif enforce_minimum and minutes < required_minutes:
            violations.append(
                HoursViolation(
                    kind="under_scheduled",
                    required_hours=required,
                    excess_hours=(minutes - required_minutes) / 60,
                    message=(
                        f"{subject.name} {session_type} is scheduled for {_hours(scheduled)}h "
                        f"but requires {_hours(required)}h"
                    ),
                    **identity,
                )
            )

    return HoursValidationResult(is_valid=not violations, violations=violations)
