from __future__ import annotations

from datetime import date, datetime

from propdesk.utils.dates import add_months, as_datetime, month_key, month_keys_between, month_start


def test_add_months_clamps_to_month_length():
    assert add_months(datetime(2025, 3, 31, 9, 30), -1) == datetime(2025, 2, 28, 9, 30)
    assert add_months(datetime(2024, 1, 31), 1) == datetime(2024, 2, 29)
    assert add_months(datetime(2025, 1, 15), -12) == datetime(2024, 1, 15)
    assert add_months(datetime(2025, 11, 10), 3) == datetime(2026, 2, 10)


def test_month_helpers():
    assert month_start(datetime(2025, 7, 19, 18, 45, 3)) == datetime(2025, 7, 1)
    assert month_key(date(2025, 7, 19)) == "2025-07"
    assert month_keys_between(date(2024, 11, 20), date(2025, 2, 1)) == ["2024-11", "2024-12", "2025-01", "2025-02"]
    assert month_keys_between(date(2025, 3, 1), date(2025, 1, 1)) == []


def test_as_datetime():
    assert as_datetime(date(2025, 1, 2)) == datetime(2025, 1, 2)
    moment = datetime(2025, 1, 2, 3, 4)
    assert as_datetime(moment) is moment
