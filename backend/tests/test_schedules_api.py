import pytest


def create_course(client, name="Bachelor of Science in Information Technology", abbreviation="BSIT"):
    response = client.post("/api/courses/", json={"name": name, "abbreviation": abbreviation})
    assert response.status_code == 201
    return response.json()


def create_teacher(client, first_name, email, employee_id, employment_type="full-time"):
    response = client.post(
        "/api/users/",
        json={
            "first_name": first_name,
            "last_name": "Teacher",
            "email": email,
            "role": "teacher",
            "honorific": "Prof.",
            "employee_id": employee_id,
            "employment_type": employment_type,
        },
    )
    assert response.status_code == 201
    return response.json()


def create_subject(client, code, name, has_lab=False):
    response = client.post("/api/subjects/", json={"code": code, "name": name, "has_lab": has_lab})
    assert response.status_code == 201
    return response.json()


def event(subject_id, day="Monday", start="09:00", end="10:30", session_type="lecture", room=None, teacher=None):
    payload = {
        "day": day,
        "startTime": start,
        "endTime": end,
        "subjectId": subject_id,
        "sessionType": session_type,
        "room": room,
    }
    if teacher is not None:
        payload["assignedTeacher"] = {"teacherId": teacher["id"], "teacherName": teacher["display_name"]}
    return payload


def schedule_payload(course, events, name="BSIT 1 - 1st Sem", year_level="1", semester="1", academic_year="2024-2025"):
    return {
        "name": name,
        "courseId": course["id"],
        "yearLevel": year_level,
        "semester": semester,
        "academicYear": academic_year,
        "events": events,
    }


@pytest.fixture
def catalog(client):
    bsit = create_course(client)
    bscs = create_course(client, name="Bachelor of Science in Computer Science", abbreviation="BSCS")
    teacher = create_teacher(client, "Grace", "grace@school.edu", "EMP-100")
    intro = create_subject(client, "IT101", "Intro to Computing")
    prog = create_subject(client, "IT102", "Programming", has_lab=True)
    return {"bsit": bsit, "bscs": bscs, "teacher": teacher, "intro": intro, "prog": prog}


def test_create_schedule_persists_ordered_events(client, catalog):
    events = [
        event(catalog["intro"]["id"], day="Wednesday", room="R101", teacher=catalog["teacher"]),
        event(catalog["intro"]["id"], day="Monday", room="R101", teacher=catalog["teacher"]),
    ]
    response = client.post(
        "/api/schedules/", json=schedule_payload(catalog["bsit"], events), headers={"X-User-Id": "admin-1"}
    )

    assert response.status_code == 201
    body = response.json()
    assert body["course_abbreviation"] == "BSIT"
    assert [item["day"] for item in body["events"]] == ["Wednesday", "Monday"]
    assert body["events"][0]["subject_code"] == "IT101"
    assert body["events"][0]["teacher_id"] == catalog["teacher"]["id"]

    fetched = client.get(f"/api/schedules/{body['id']}")
    assert fetched.status_code == 200
    assert len(fetched.json()["events"]) == 2
    assert fetched.json()["summary"] == {
        "total_events": 2,
        "lecture_events": 2,
        "lab_events": 0,
        "unique_subjects": 1,
    }


def test_internal_overlap_rejects_the_whole_write(client, catalog):
    events = [
        event(catalog["intro"]["id"], start="09:00", end="10:00", room="RoomA"),
        event(catalog["prog"]["id"], start="09:30", end="10:30", room="RoomB"),
    ]
    response = client.post("/api/schedules/", json=schedule_payload(catalog["bsit"], events))

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Time conflicts detected within this schedule"
    assert len(body["details"]["internal_conflicts"]) == 1
    assert client.get("/api/schedules/").json() == []


def test_teacher_double_booking_across_courses(client, catalog):
    first = [event(catalog["intro"]["id"], teacher=catalog["teacher"])]
    assert client.post("/api/schedules/", json=schedule_payload(catalog["bsit"], first)).status_code == 201

    second = [event(catalog["intro"]["id"], start="10:00", end="11:00", teacher=catalog["teacher"])]
    response = client.post(
        "/api/schedules/", json=schedule_payload(catalog["bscs"], second, name="BSCS 1 - 1st Sem")
    )

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Schedule conflicts detected"
    assert [item["type"] for item in body["details"]["conflicts"]] == ["TEACHER"]
    assert body["details"]["conflicts"][0]["existing_schedule"] == "BSIT 1 - 1st Sem"


def test_over_scheduled_hours_are_rejected(client, catalog):
    events = [
        event(catalog["intro"]["id"], day="Monday", start="08:00", end="10:00"),
        event(catalog["intro"]["id"], day="Thursday", start="08:00", end="10:00"),
    ]
    response = client.post("/api/schedules/", json=schedule_payload(catalog["bsit"], events))

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Subject hours validation failed"
    assert body["details"]["violations"][0]["excess_hours"] == 1


def test_lab_session_for_lecture_only_subject(client, catalog):
    events = [event(catalog["intro"]["id"], session_type="lab", start="13:00", end="14:00")]
    response = client.post("/api/schedules/", json=schedule_payload(catalog["bsit"], events))

    assert response.status_code == 400
    assert response.json()["details"]["violations"][0]["kind"] == "lab_not_offered"


def test_unknown_subject_reference_is_not_found(client, catalog):
    response = client.post("/api/schedules/", json=schedule_payload(catalog["bsit"], [event("missing")]))
    assert response.status_code == 404
    assert response.json()["details"]["resource_type"] == "Subject or offering"


def test_malformed_events_fail_request_validation(client, catalog):
    bad_time = [event(catalog["intro"]["id"], start="9.00")]
    assert client.post("/api/schedules/", json=schedule_payload(catalog["bsit"], bad_time)).status_code == 422

    reversed_window = [event(catalog["intro"]["id"], start="11:00", end="10:00")]
    assert client.post("/api/schedules/", json=schedule_payload(catalog["bsit"], reversed_window)).status_code == 422

    assert client.post("/api/schedules/", json=schedule_payload(catalog["bsit"], [])).status_code == 422


def test_second_schedule_for_same_context_is_duplicate(client, catalog):
    payload = schedule_payload(catalog["bsit"], [event(catalog["intro"]["id"])])
    assert client.post("/api/schedules/", json=payload).status_code == 201

    payload["events"] = [event(catalog["intro"]["id"], day="Friday")]
    response = client.post("/api/schedules/", json=payload)
    assert response.status_code == 409


def test_update_does_not_conflict_with_itself(client, catalog):
    events = [event(catalog["intro"]["id"], room="R1", teacher=catalog["teacher"])]
    created = client.post("/api/schedules/", json=schedule_payload(catalog["bsit"], events)).json()

    events.append(event(catalog["prog"]["id"], day="Tuesday", room="R1", teacher=catalog["teacher"]))
    response = client.put(f"/api/schedules/{created['id']}", json={"events": events, "name": "Renamed"})

    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Renamed"
    assert len(body["events"]) == 2


def test_delete_is_soft_and_hides_schedule(client, catalog):
    created = client.post(
        "/api/schedules/", json=schedule_payload(catalog["bsit"], [event(catalog["intro"]["id"])])
    ).json()

    assert client.delete(f"/api/schedules/{created['id']}").status_code == 204
    assert client.get(f"/api/schedules/{created['id']}").status_code == 404

    # The context is free again once the old schedule is inactive.
    recreated = client.post(
        "/api/schedules/", json=schedule_payload(catalog["bsit"], [event(catalog["intro"]["id"])])
    )
    assert recreated.status_code == 201


def test_schedules_by_teacher_only_keep_their_events(client, catalog):
    events = [
        event(catalog["intro"]["id"], teacher=catalog["teacher"]),
        event(catalog["prog"]["id"], day="Tuesday"),
    ]
    client.post("/api/schedules/", json=schedule_payload(catalog["bsit"], events))

    response = client.get(f"/api/schedules/by-teacher/{catalog['teacher']['id']}")

    assert response.status_code == 200
    schedules = response.json()
    assert len(schedules) == 1
    assert [item["day"] for item in schedules[0]["events"]] == ["Monday"]
    assert client.get("/api/schedules/by-teacher/someone-else").json() == []


def test_validate_endpoint_reports_without_writing(client, catalog):
    client.post(
        "/api/schedules/", json=schedule_payload(catalog["bsit"], [event(catalog["intro"]["id"], room="R1")])
    )
    payload = schedule_payload(catalog["bscs"], [event(catalog["intro"]["id"], room="r1 ")])
    payload.pop("name")

    response = client.post("/api/schedules/validate", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["is_valid"] is False
    assert [item["type"] for item in body["conflicts"]] == ["ROOM"]
    assert len(client.get("/api/schedules/").json()) == 1


def test_recycle_copies_offerings_and_remaps_teachers(client, catalog):
    substitute = create_teacher(client, "Alan", "alan@school.edu", "EMP-200")
    offering = client.post(
        "/api/offerings/",
        json={
            "subject_id": catalog["intro"]["id"],
            "course_ids": [catalog["bsit"]["id"]],
            "year_level": 1,
            "semester": "1",
            "academic_year": "2024-2025",
            "assigned_teachers": [{"teacherId": catalog["teacher"]["id"], "teacherName": "Prof. Grace Teacher"}],
        },
    ).json()
    source = client.post(
        "/api/schedules/",
        json=schedule_payload(catalog["bsit"], [event(offering["id"], room="R1", teacher=catalog["teacher"])]),
    ).json()

    response = client.post(
        "/api/schedules/recycle",
        json={
            "sourceScheduleId": source["id"],
            "targetAcademicYear": "2025-2026",
            "targetSemester": "1",
            "teacherMappings": [
                {
                    "offeringId": offering["id"],
                    "assignmentIndex": 0,
                    "newTeacherId": substitute["id"],
                    "newTeacherName": "Prof. Alan Teacher",
                }
            ],
        },
    )

    assert response.status_code == 201
    result = response.json()
    assert result["subjects_copied"] == 1
    assert result["teachers_updated"] == 1

    recycled = client.get(f"/api/schedules/{result['new_schedule_id']}").json()
    assert recycled["academic_year"] == "2025-2026"
    assert recycled["name"] == "BSIT Year 1 - 2025-2026 Semester 1"
    assert recycled["events"][0]["teacher_id"] == substitute["id"]
    assert recycled["events"][0]["subject_id"] != offering["id"]

    new_offerings = client.get("/api/offerings/", params={"academicYear": "2025-2026"}).json()
    assert [item["id"] for item in new_offerings] == [recycled["events"][0]["subject_id"]]

    again = client.post(
        "/api/schedules/recycle",
        json={"sourceScheduleId": source["id"], "targetAcademicYear": "2025-2026", "targetSemester": "1"},
    )
    assert again.status_code == 409
