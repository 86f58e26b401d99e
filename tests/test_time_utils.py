from datetime import UTC, date, datetime, timedelta, timezone

from backend.app.core.time import as_utc, end_of_day, local_date, start_of_day, utc_now


def test_utc_now_is_timezone_aware_utc():
    value = utc_now()
    assert value.tzinfo is UTC


def test_as_utc_attaches_utc_to_naive_values():
    naive = datetime(2026, 3, 1, 9, 30)
    assert as_utc(naive) == datetime(2026, 3, 1, 9, 30, tzinfo=UTC)
    assert as_utc(None) is None


def test_as_utc_converts_other_offsets():
    ist = timezone(timedelta(hours=5, minutes=30))
    assert as_utc(datetime(2026, 3, 1, 5, 30, tzinfo=ist)) == datetime(2026, 3, 1, 0, 0, tzinfo=UTC)


def test_day_boundaries_cover_the_whole_day():
    day = date(2026, 3, 1)
    assert start_of_day(day) == datetime(2026, 3, 1, 0, 0, tzinfo=UTC)
    assert end_of_day(day) == datetime(2026, 3, 1, 23, 59, 59, 999999, tzinfo=UTC)


def test_local_date_uses_given_timezone():
    ist = timezone(timedelta(hours=5, minutes=30))
    late_utc = datetime(2026, 3, 1, 20, 0, tzinfo=UTC)
    assert local_date(late_utc) == date(2026, 3, 1)
    assert local_date(late_utc, ist) == date(2026, 3, 2)
