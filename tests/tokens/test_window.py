from datetime import datetime, timedelta, timezone

import pytest

from src.qr_attendance.qr_attendance.tokens.window import window_end, window_start

UTC = timezone.utc


def test_window_start_floors_to_multiple_of_length():
    t = datetime(2024, 1, 1, 10, 4, 59, 999000, tzinfo=UTC)
    assert window_start(t, 5) == datetime(2024, 1, 1, 10, 0, tzinfo=UTC)


def test_window_start_on_boundary_is_itself():
    t = datetime(2024, 1, 1, 10, 5, tzinfo=UTC)
    assert window_start(t, 5) == t


def test_window_end_adds_length():
    start = datetime(2024, 1, 1, 10, 0, tzinfo=UTC)
    assert window_end(start, 5) - start == timedelta(minutes=5)


def test_naive_datetimes_are_treated_as_utc():
    assert window_start(datetime(2024, 1, 1, 10, 3), 5) == datetime(2024, 1, 1, 10, 0, tzinfo=UTC)


def test_aware_datetimes_in_other_zones_align_on_utc_epoch():
    plus_seven = timezone(timedelta(hours=7))
    t = datetime(2024, 1, 1, 17, 3, tzinfo=plus_seven)
    assert window_start(t, 5) == datetime(2024, 1, 1, 10, 0, tzinfo=UTC)


def test_window_alignment_is_epoch_based_for_odd_lengths():
    # 7-minute windows do not align to the hour
    t = datetime(1970, 1, 1, 0, 15, tzinfo=UTC)
    assert window_start(t, 7) == datetime(1970, 1, 1, 0, 14, tzinfo=UTC)


@pytest.mark.parametrize("minutes", [0, -5])
def test_non_positive_window_rejected(minutes):
    with pytest.raises(ValueError):
        window_start(datetime(2024, 1, 1, tzinfo=UTC), minutes)
