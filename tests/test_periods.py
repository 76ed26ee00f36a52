from datetime import datetime, timezone

import pytest

from app.core.errors import BadRequestError
from app.utils.periods import analysis_period, analysis_window, months_ago, parse_date_param


def test_months_ago_clamps_to_month_end():
    assert months_ago(datetime(2025, 3, 31, tzinfo=timezone.utc), 1) == datetime(2025, 2, 28, tzinfo=timezone.utc)
    assert months_ago(datetime(2025, 1, 15, tzinfo=timezone.utc), 13) == datetime(2023, 12, 15, tzinfo=timezone.utc)


def test_analysis_window_and_period():
    now = datetime(2025, 10, 18, 9, 30, tzinfo=timezone.utc)
    start, end = analysis_window(6, now=now)
    assert start == datetime(2025, 4, 18, 9, 30, tzinfo=timezone.utc)
    assert end == now
    assert analysis_period(start, end, 6) == {"startDate": "2025-04-18", "endDate": "2025-10-18", "months": 6}


def test_parse_date_param():
    assert parse_date_param(None, "startDate") is None
    assert parse_date_param("2025-05-01", "startDate") == datetime(2025, 5, 1, tzinfo=timezone.utc)

    end = parse_date_param("2025-05-31", "endDate", end_of_day=True)
    assert (end.day, end.hour, end.minute) == (31, 23, 59)

    assert parse_date_param("2025-05-01T12:00:00+02:00", "startDate").hour == 10


def test_parse_date_param_rejects_garbage():
    with pytest.raises(BadRequestError):
        parse_date_param("05/01/2025", "startDate")
