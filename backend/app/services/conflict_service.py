from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable, List, Sequence

from app.models.schedule import Schedule
from app.schemas.conflict import InternalConflict, ScheduleConflict
from app.services.references import same_entity
from app.services.time_window import format_window, overlaps, to_minutes


@dataclass(frozen=True)
class ScheduleContext:
    course_id: str
    year_level: str
    semester: str
    academic_year: str

    def matches(self, schedule: Schedule) -> bool:
        return (
            same_entity(schedule.course_id, self.course_id)
            and str(schedule.year_level) == str(self.year_level)
            and schedule.semester == self.semester
            and schedule.academic_year == self.academic_year
        )


def _normalized_room(room: str | None) -> str | None:
    if room is None:
        return None
    value = room.strip()
    return value.casefold() if value else None


def _window(event) -> str:
    return format_window(event.day, event.start_time, event.end_time)


class ConflictService:
    """Checks candidate events of one schedule, against each other and against other schedules.

    Events are read by attribute (``day``, ``start_time``, ``end_time``,
    ``room``, ``teacher_id``, ``teacher_name``), so both request payloads and
    persisted ``ScheduleEvent`` rows can be passed in.
    """

    def __init__(self, events: Sequence):
        self.events = list(events)

    def internal_conflicts(self) -> List[InternalConflict]:
        conflicts: List[InternalConflict] = []
        n = len(self.events)
        for i in range(n):
            first = self.events[i]
            start1, end1 = to_minutes(first.start_time), to_minutes(first.end_time)
            for j in range(i + 1, n):
                second = self.events[j]
                if first.day != second.day:
                    continue
                if overlaps(start1, end1, to_minutes(second.start_time), to_minutes(second.end_time)):
                    conflicts.append(InternalConflict(event1=_window(first), event2=_window(second)))
        return conflicts

    def cross_schedule_conflicts(
        self, existing_schedules: Iterable[Schedule], context: ScheduleContext
    ) -> List[ScheduleConflict]:
        conflicts: List[ScheduleConflict] = []

        # Bucket candidates by day; only same-day pairs can collide.
        candidates_by_day = defaultdict(list)
        for event in self.events:
            candidates_by_day[event.day].append((event, to_minutes(event.start_time), to_minutes(event.end_time)))

        for schedule in existing_schedules:
            same_students = context.matches(schedule)
            same_year = schedule.academic_year == context.academic_year
            for existing in schedule.events:
                day_candidates = candidates_by_day.get(existing.day)
                if not day_candidates:
                    continue
                existing_start = to_minutes(existing.start_time)
                existing_end = to_minutes(existing.end_time)
                for candidate, start, end in day_candidates:
                    if not overlaps(existing_start, existing_end, start, end):
                        continue
                    base = {
                        "existing_schedule": schedule.name,
                        "existing_schedule_id": schedule.id,
                        "existing_event": _window(existing),
                        "new_event": _window(candidate),
                    }

                    if same_students:
                        course_label = schedule.course_name or schedule.course_abbreviation
                        conflicts.append(
                            ScheduleConflict(
                                type="STUDENT",
                                message=(
                                    f"Students in {course_label} Year {schedule.year_level} "
                                    "cannot attend two classes at the same time"
                                ),
                                **base,
                            )
                        )

                    if same_year and same_entity(existing.teacher_id, candidate.teacher_id):
                        teacher_name = candidate.teacher_name or existing.teacher_name or "Unknown"
                        conflicts.append(
                            ScheduleConflict(
                                type="TEACHER",
                                teacher_name=teacher_name,
                                message=f'Teacher {teacher_name} is already assigned to "{schedule.name}" at this time',
                                **base,
                            )
                        )

                    new_room = _normalized_room(candidate.room)
                    if same_year and new_room is not None and new_room == _normalized_room(existing.room):
                        room = candidate.room.strip()
                        conflicts.append(
                            ScheduleConflict(
                                type="ROOM",
                                room=room,
                                message=f'Room "{room}" is already occupied by "{schedule.name}" at this time',
                                **base,
                            )
                        )
        return conflicts
