"""Input coercion and timestamp helpers."""

from datetime import datetime, timezone

from app.utils.helpers import (
    generate_verification_code, normalize_timestamps, timestamp_sort_key, to_datetime, validate_email
)
from app.utils.normalize import to_list, to_lower_list, to_number, to_text


def test_to_number_accepts_numbers_and_numeric_strings():
    assert to_number(3) == 3.0
    assert to_number(2.5) == 2.5
    assert to_number(" 3.2 ") == 3.2


def test_to_number_falls_back_on_unparseable_values():
    assert to_number(None) == 0.0
    assert to_number("") == 0.0
    assert to_number("three") == 0.0
    assert to_number(True) == 0.0
    assert to_number("nan") == 0.0
    assert to_number("abc", default=1.5) == 1.5


def test_to_list_splits_and_trims_strings():
    assert to_list("AWS, , Python ") == ["AWS", "Python"]
    assert to_list(["  Docker", "", None, "K8s"]) == ["Docker", "K8s"]


def test_to_list_empty_inputs():
    assert to_list(None) == []
    assert to_list("") == []
    assert to_list([]) == []
    assert to_list(42) == []


def test_to_lower_list():
    assert to_lower_list("AWS,Python") == ["aws", "python"]


def test_to_text():
    assert to_text(None) == ""
    assert to_text(5) == "5"


def test_to_datetime_shapes():
    expected = datetime(2024, 1, 1, tzinfo=timezone.utc)
    epoch = expected.timestamp()

    assert to_datetime(expected) == expected
    assert to_datetime(datetime(2024, 1, 1)) == expected
    assert to_datetime({"seconds": epoch, "nanoseconds": 0}) == expected
    assert to_datetime({"_seconds": epoch, "_nanoseconds": 0}) == expected
    assert to_datetime(epoch) == expected
    assert to_datetime("2024-01-01T00:00:00Z") == expected
    assert to_datetime("2024-01-01T00:00:00") == expected


def test_to_datetime_unrecognized():
    assert to_datetime(None) is None
    assert to_datetime("not a date") is None
    assert to_datetime({"foo": 1}) is None
    assert to_datetime(True) is None


def test_normalize_timestamps_only_touches_at_fields():
    record = {"createdAt": "2024-01-01T00:00:00Z", "name": "2024-01-01T00:00:00Z", "updatedAt": None}
    normalize_timestamps(record)
    assert isinstance(record["createdAt"], datetime)
    assert record["name"] == "2024-01-01T00:00:00Z"
    assert record["updatedAt"] is None


def test_timestamp_sort_key_orders_mixed_shapes():
    older = {"seconds": 1_000}
    newer = "2024-01-01T00:00:00Z"
    values = [newer, None, older]
    assert sorted(values, key=timestamp_sort_key) == [None, older, newer]


def test_verification_code_is_six_digits():
    code = generate_verification_code()
    assert len(code) == 6
    assert code.isdigit()


def test_validate_email():
    assert validate_email("student@example.com")
    assert not validate_email("not-an-email")
    assert not validate_email("")
