import pytest

from app.core.exceptions import FormatError
from app.services.time_window import duration_hours, format_window, overlaps, to_minutes, windows_overlap


def test_to_minutes_parses_wall_clock_values():
    assert to_minutes("00:00") == 0
    assert to_minutes("9:05") == 545
    assert to_minutes("23:59") == 1439


@pytest.mark.parametrize("value", ["24:00", "12:60", "0900", "9am", "", None])
def test_to_minutes_rejects_malformed_values(value):
    with pytest.raises(FormatError) as exc_info:
        to_minutes(value)
    assert exc_info.value.status_code == 422


def test_back_to_back_windows_do_not_overlap():
    assert windows_overlap("09:00", "10:00", "10:00", "11:00") is False
    assert windows_overlap("10:00", "11:00", "09:00", "10:00") is False


def test_overlap_is_symmetric():
    assert windows_overlap("09:00", "10:30", "10:00", "11:00") is True
    assert windows_overlap("10:00", "11:00", "09:00", "10:30") is True
    assert overlaps(540, 600, 560, 580) is overlaps(560, 580, 540, 600) is True


def test_duration_and_format():
    assert duration_hours("07:30", "10:00") == 2.5
    assert format_window("Monday", "09:00", "10:00") == "Monday 09:00-10:00"
