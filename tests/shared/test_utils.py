import pytest
from datetime import date, datetime, timezone

from study_server.shared.utils import daterange, format_duration, js_weekday, to_local_day


def test_js_weekday_starts_on_sunday():
    assert js_weekday(date(2024, 1, 7)) == 0  # Sunday
    assert js_weekday(date(2024, 1, 1)) == 1  # Monday
    assert js_weekday(date(2024, 1, 6)) == 6  # Saturday


def test_to_local_day_accepts_common_inputs():
    assert to_local_day(date(2024, 3, 5)) == date(2024, 3, 5)
    assert to_local_day(datetime(2024, 3, 5, 23, 59)) == date(2024, 3, 5)
    assert to_local_day("2024-03-05") == date(2024, 3, 5)
    assert to_local_day("2024-03-05T10:30:00") == date(2024, 3, 5)


def test_to_local_day_epoch_millis_uses_local_time():
    millis = int(datetime(2024, 3, 5, 12, 0, tzinfo=timezone.utc).timestamp() * 1000)
    expected = datetime.fromtimestamp(millis / 1000).date()
    assert to_local_day(millis) == expected
    assert to_local_day(str(millis)) == expected


@pytest.mark.parametrize("value", [True, None, [2024, 3, 5], "not a date"])
def test_to_local_day_rejects_garbage(value):
    with pytest.raises(ValueError):
        to_local_day(value)


def test_daterange_is_inclusive():
    days = daterange(date(2024, 1, 30), date(2024, 2, 2))
    assert days == [date(2024, 1, 30), date(2024, 1, 31), date(2024, 2, 1), date(2024, 2, 2)]
    assert daterange(date(2024, 2, 2), date(2024, 1, 30)) == []


def test_format_duration():
    assert format_duration(0) == "00:00:00"
    assert format_duration(3661) == "01:01:01"
    assert format_duration(25 * 60) == "00:25:00"
