import pytest
from sqlalchemy import select

from app.core.exceptions import InvalidRoleError, NotFoundError
from app.models.teacher_workload import TeacherWorkload
from app.models.user import EmploymentType, UserRole
from app.services import workload
from app.services.audit import activity_for_entity
from app.services.unit_limit import set_overload_status, validate_teacher_unit_limit


@pytest.fixture
def loaded_teacher(make_course, make_subject, make_teacher, make_offering):
    def factory(employment_type=EmploymentType.full_time, is_overloaded=False):
        course = make_course()
        teacher = make_teacher(employment_type=employment_type, is_overloaded=is_overloaded)
        for index in range(7):
            subject = make_subject(code=f"CORE{index}", name=f"Core {index}", lecture_units=3)
            make_offering(subject, [course], teachers=[teacher])
        return teacher

    return factory


def test_full_time_over_cap_requires_overload(db_session, loaded_teacher, make_subject):
    teacher = loaded_teacher()
    heavy = make_subject(code="CAP400", name="Capstone", lecture_units=3, lab_units=1)

    decision = validate_teacher_unit_limit(db_session, teacher.id, heavy.id, "2024-2025", "1")

    assert decision.current_assignment_units == 21
    assert decision.new_total == 25
    assert decision.max_unit_limit == 24
    assert decision.valid is False
    assert decision.requires_overload is True
    assert decision.reason == "Teacher would exceed normal limit of 24 units but can be overloaded with no upper limit"


def test_overloaded_full_time_teacher_has_no_cap(db_session, loaded_teacher, make_subject):
    teacher = loaded_teacher(is_overloaded=True)
    heavy = make_subject(code="CAP400", name="Capstone", lecture_units=3, lab_units=1)

    decision = validate_teacher_unit_limit(db_session, teacher.id, heavy.id, "2024-2025", "1")

    assert decision.valid is True
    assert decision.requires_overload is False
    assert decision.reason == "Teacher is overloaded - no upper limit applies"


def test_part_time_has_no_overload_path(db_session, make_course, make_subject, make_teacher, make_offering):
    course = make_course()
    teacher = make_teacher(employment_type=EmploymentType.part_time)
    for index in range(5):
        make_offering(make_subject(code=f"PT{index}", name=f"Part {index}"), [course], teachers=[teacher])
    extra = make_subject(code="PT9", name="Part 9", lecture_units=3, lab_units=1)

    decision = validate_teacher_unit_limit(db_session, teacher.id, extra.id, "2024-2025", "1")

    assert decision.valid is False
    assert decision.requires_overload is False
    assert decision.max_unit_limit == 18
    assert decision.reason == (
        "Cannot assign: would exceed part-time limit of 18 units (current: 15, after adding 4: 19)"
    )


def test_already_assigned_subject_is_not_counted_twice(db_session, make_course, make_subject, make_teacher, make_offering):
    course = make_course()
    teacher = make_teacher()
    subject = make_subject()
    make_offering(subject, [course], teachers=[teacher])

    decision = validate_teacher_unit_limit(db_session, teacher.id, subject.id, "2024-2025", "1")

    assert decision.current_assignment_units == 3
    assert decision.new_total == 3
    assert decision.valid is True
    assert decision.reason == "Unit limit check passed"


def test_missing_teacher_subject_and_wrong_role(db_session, make_teacher, make_subject):
    subject = make_subject()
    with pytest.raises(NotFoundError):
        validate_teacher_unit_limit(db_session, "nobody", subject.id, "2024-2025", "1")

    teacher = make_teacher()
    with pytest.raises(NotFoundError):
        validate_teacher_unit_limit(db_session, teacher.id, "no-subject", "2024-2025", "1")

    student = make_teacher(role=UserRole.student)
    with pytest.raises(InvalidRoleError):
        validate_teacher_unit_limit(db_session, student.id, subject.id, "2024-2025", "1")


def test_overload_flag_updates_stored_workloads(db_session, loaded_teacher):
    teacher = loaded_teacher()
    workload.calculate_teacher_workload(db_session, teacher.id, "2024-2025", "1")

    result = set_overload_status(db_session, teacher.id, True)

    assert result.max_unit_limit == 999
    assert result.workloads_updated == 1
    db_session.expire_all()
    stored = db_session.execute(select(TeacherWorkload).where(TeacherWorkload.teacher_id == teacher.id)).scalar_one()
    assert stored.is_overloaded is True
    assert stored.max_unit_limit == 999

    result = set_overload_status(db_session, teacher.id, False)
    assert result.max_unit_limit == 24


def test_overload_flag_rejected_for_part_time(db_session, make_teacher):
    teacher = make_teacher(employment_type=EmploymentType.part_time)
    with pytest.raises(InvalidRoleError):
        set_overload_status(db_session, teacher.id, True)


def test_overload_change_is_audited(db_session, make_teacher):
    teacher = make_teacher()
    set_overload_status(db_session, teacher.id, True, actor_id="admin-1")

    entries = activity_for_entity(db_session, "user", teacher.id)
    assert [(entry.action, entry.user_id, entry.details) for entry in entries] == [
        ("teacher.overload", "admin-1", {"is_overloaded": True})
    ]
