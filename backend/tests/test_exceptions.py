from app.core.exceptions import (
    AppError,
    DuplicateError,
    FormatError,
    InvalidRoleError,
    NotFoundError,
    ScheduleValidationError,
)


def test_not_found_error_structure():
    err = NotFoundError("Teacher", "t-1")
    assert err.status_code == 404
    assert err.message == "Teacher with id t-1 not found"
    assert err.details == {"resource_type": "Teacher", "resource_id": "t-1"}
    assert isinstance(err, AppError)


def test_status_codes():
    assert FormatError("bad").status_code == 422
    assert InvalidRoleError("nope").status_code == 400
    assert DuplicateError("again").status_code == 409
    assert ScheduleValidationError("rejected", details={"conflicts": []}).details == {"conflicts": []}


def test_app_error_defaults():
    err = AppError("Generic error")
    assert err.status_code == 500
    assert err.details == {}


def test_app_errors_render_message_and_details(client):
    response = client.get("/api/courses/missing-id")
    assert response.status_code == 404
    assert response.json() == {
        "message": "Course with id missing-id not found",
        "details": {"resource_type": "Course", "resource_id": "missing-id"},
    }
