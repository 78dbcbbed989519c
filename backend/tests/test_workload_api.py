import pytest

TERM = {"academicYear": "2024-2025", "semester": "1"}


@pytest.fixture
def seeded(client):
    bsit = client.post("/api/courses/", json={"name": "Information Technology", "abbreviation": "BSIT"}).json()
    bstm = client.post("/api/courses/", json={"name": "Tourism Management", "abbreviation": "BSTM"}).json()
    teacher = client.post(
        "/api/users/",
        json={
            "first_name": "Katherine",
            "last_name": "Johnson",
            "email": "KJ@School.edu",
            "role": "teacher",
            "honorific": "Dr.",
            "employee_id": "EMP-001",
            "employment_type": "full-time",
        },
    ).json()
    subject = client.post("/api/subjects/", json={"code": "nstp1", "name": "NSTP 1", "has_lab": True}).json()
    offering = client.post(
        "/api/offerings/",
        json={
            "subject_id": subject["id"],
            "course_ids": [bsit["id"], bstm["id"]],
            "year_level": 1,
            "semester": "1",
            "academic_year": "2024-2025",
            "assigned_teachers": [{"teacherId": teacher["id"], "teacherName": teacher["display_name"]}],
        },
    ).json()
    schedule = client.post(
        "/api/schedules/",
        json={
            "name": "BSIT 1",
            "courseId": bsit["id"],
            "yearLevel": 1,
            "semester": "1",
            "academicYear": "2024-2025",
            "events": [
                {
                    "day": "Saturday",
                    "startTime": "08:00",
                    "endTime": "10:00",
                    "subjectId": offering["id"],
                    "assignedTeacher": {"teacherId": teacher["id"], "teacherName": teacher["display_name"]},
                }
            ],
        },
    )
    assert schedule.status_code == 201
    return {"teacher": teacher, "subject": subject, "offering": offering, "schedule": schedule.json()}


def test_user_creation_normalizes_fields(seeded):
    teacher = seeded["teacher"]
    assert teacher["email"] == "kj@school.edu"
    assert teacher["display_name"] == "Dr. Katherine Johnson"
    assert teacher["is_overloaded"] is False


def test_teacher_workload_endpoint(client, seeded):
    response = client.get(f"/api/workload/teacher/{seeded['teacher']['id']}", params=TERM)

    assert response.status_code == 200
    body = response.json()
    assert body["total_assignment_units"] == 6
    assert body["total_schedule_units"] == 3
    assert body["max_unit_limit"] == 24
    assert body["remaining_units"] == 18
    assert [item["course_abbreviation"] for item in body["teaching_assignments"]] == ["BSIT", "BSTM"]


def test_report_formatted_and_summary_use_stored_view(client, seeded):
    teacher_id = seeded["teacher"]["id"]
    assert client.get(f"/api/workload/teacher/{teacher_id}/formatted", params=TERM).status_code == 404

    client.get(f"/api/workload/teacher/{teacher_id}", params=TERM)

    report = client.get(f"/api/workload/teacher/{teacher_id}/report", params=TERM).json()
    assert report["total_schedule_units"] == 3
    assert report["assignments"][0]["subject"] == "NSTP1 - NSTP 1"

    formatted = client.get(f"/api/workload/teacher/{teacher_id}/formatted", params=TERM).json()
    assert formatted["semester"] == "1st Semester 2024-2025"
    assert formatted["breakdown"][0]["schedule"] == "Saturday 08:00-10:00"

    summary = client.get("/api/workload/all-teachers/summary", params=TERM).json()
    assert summary["total_teachers"] == 1
    assert summary["total_units_assigned"] == 6


def test_constraint_endpoints(client, seeded):
    teacher_id = seeded["teacher"]["id"]
    status = client.get(f"/api/workload/teacher/{teacher_id}/constraints", params=TERM).json()
    assert status["status"] == "OK"
    assert status["message"] == "Teacher can take 18 more units"

    fleet = client.get("/api/workload/all-teachers/constraints", params=TERM).json()
    assert fleet["ok_teachers"] == 1
    assert fleet["constraint_limits"] == {"part-time": 18, "full-time": 24}


def test_unknown_teacher_is_not_found(client):
    response = client.get("/api/workload/teacher/nobody", params=TERM)
    assert response.status_code == 404
    assert response.json()["details"]["resource_type"] == "Teacher"


def test_recalculate_all(client, seeded):
    response = client.post("/api/workload/recalculate-all", json={**TERM, "failFast": False})

    assert response.status_code == 200
    body = response.json()
    assert body["failures"] == []
    assert [item["teacher_id"] for item in body["recalculated"]] == [seeded["teacher"]["id"]]


def test_validate_assignment_and_overload(client, seeded):
    teacher_id = seeded["teacher"]["id"]
    decision = client.post(
        "/api/workload/validate-assignment",
        json={"teacherId": teacher_id, "subjectId": seeded["subject"]["id"], **TERM},
    ).json()
    assert decision["valid"] is True
    assert decision["new_total"] == 3

    response = client.post(f"/api/workload/teacher/{teacher_id}/overload", json={"isOverloaded": True})
    assert response.status_code == 200
    assert response.json()["max_unit_limit"] == 999

    invalid = client.post(f"/api/workload/teacher/{teacher_id}/overload", json={"isOverloaded": "yes"})
    assert invalid.status_code == 422


def test_subject_units_endpoint(client, seeded):
    response = client.get(f"/api/workload/subject/{seeded['schedule']['id']}/{seeded['offering']['id']}")

    assert response.status_code == 200
    body = response.json()
    assert body["subject_id"] == seeded["subject"]["id"]
    assert body["event_count"] == 1
    assert body["unit_count"] == 3
