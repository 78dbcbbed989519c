from app.schemas.schedule import ScheduleEventIn
from app.services.hours_validator import validate_subject_hours
from app.services.references import SubjectResolver


def event(subject_id, day="Monday", start="09:00", end="10:00", session_type="lecture"):
    return ScheduleEventIn(
        day=day, start_time=start, end_time=end, subject_id=subject_id, session_type=session_type
    )


def test_over_scheduled_lecture_reports_excess(db_session, make_subject):
    subject = make_subject(lecture_units=3, lab_units=0)
    events = [
        event(subject.id, start="08:00", end="10:00"),
        event(subject.id, day="Wednesday", start="08:00", end="10:00"),
    ]
    result = validate_subject_hours(events, SubjectResolver(db_session))
    assert result.is_valid is False
    assert len(result.violations) == 1
    violation = result.violations[0]
    assert violation.kind == "over_scheduled"
    assert violation.scheduled_hours == 4
    assert violation.required_hours == 3
    assert violation.excess_hours == 1
    assert violation.message == "Intro to Computing lecture is scheduled for 4h but requires only 3h"


def test_exact_requirement_is_not_a_violation(db_session, make_subject):
    subject = make_subject(lecture_units=3, lab_units=0)
    events = [event(subject.id, start="08:00", end="09:30"), event(subject.id, day="Friday", start="08:00", end="09:30")]
    assert validate_subject_hours(events, SubjectResolver(db_session)).is_valid is True


def test_lab_on_lecture_only_subject_is_always_a_violation(db_session, make_subject):
    subject = make_subject(lecture_units=3, lab_units=0)
    result = validate_subject_hours(
        [event(subject.id, start="13:00", end="13:30", session_type="lab")], SubjectResolver(db_session)
    )
    assert [item.kind for item in result.violations] == ["lab_not_offered"]
    assert result.violations[0].message == "Intro to Computing does not have a lab component"


def test_offering_references_group_with_their_subject(db_session, make_subject, make_course, make_offering):
    subject = make_subject(code="IT102", name="Programming", lecture_units=2, lab_units=1)
    offering = make_offering(subject, [make_course()])
    events = [
        event(subject.id, start="08:00", end="09:00"),
        event(offering.id, day="Tuesday", start="08:00", end="09:30"),
        event(offering.id, day="Thursday", start="13:00", end="16:00", session_type="lab"),
    ]
    result = validate_subject_hours(events, SubjectResolver(db_session))
    assert len(result.violations) == 1
    assert result.violations[0].session_type == "lecture"
    assert result.violations[0].subject_id == subject.id
    assert result.violations[0].scheduled_hours == 2.5


def test_under_scheduling_only_flagged_when_enforced(db_session, make_subject):
    subject = make_subject(lecture_units=3, lab_units=0)
    events = [event(subject.id, start="08:00", end="09:00")]
    resolver = SubjectResolver(db_session)
    assert validate_subject_hours(events, resolver).is_valid is True

    result = validate_subject_hours(events, resolver, enforce_minimum=True)
    assert [item.kind for item in result.violations] == ["under_scheduled"]
    assert result.violations[0].excess_hours == -2


def test_unknown_references_are_skipped(db_session):
    assert validate_subject_hours([event("missing")], SubjectResolver(db_session)).is_valid is True


def test_uneven_sessions_summing_to_the_requirement_are_valid(db_session, make_subject):
    subject = make_subject(lecture_units=3, lab_units=0)
    events = [
        event(subject.id, day="Monday", start="08:00", end="09:00"),
        event(subject.id, day="Wednesday", start="08:00", end="09:10"),
        event(subject.id, day="Friday", start="08:00", end="08:50"),
    ]
    result = validate_subject_hours(events, SubjectResolver(db_session))
    assert result.is_valid is True
    assert result.violations == []


def test_one_extra_minute_is_over_scheduled(db_session, make_subject):
    subject = make_subject(lecture_units=3, lab_units=0)
    events = [
        event(subject.id, day="Monday", start="08:00", end="09:00"),
        event(subject.id, day="Wednesday", start="08:00", end="09:11"),
        event(subject.id, day="Friday", start="08:00", end="08:50"),
    ]
    result = validate_subject_hours(events, SubjectResolver(db_session))
    assert [item.kind for item in result.violations] == ["over_scheduled"]
    assert result.violations[0].excess_hours == 1 / 60
