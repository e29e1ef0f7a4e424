from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from propdesk.utils.formatting import (
    format_currency,
    format_period,
    format_relative_time,
    format_short_date,
    group_thousands,
    percent_change,
    percent_of,
    plain_number,
    signed_percent,
)


def test_group_thousands_and_currency():
    assert group_thousands(1234567.4) == "1.234.567"
    assert group_thousands(-2500) == "-2.500"
    assert format_currency(350000) == "$ 350.000"
    assert format_currency(1200, "usd") == "US$ 1.200"


def test_format_period():
    assert format_period(3, 2025) == "Marzo 2025"
    with pytest.raises(ValueError):
        format_period(13, 2025)


@pytest.mark.parametrize(
    ("delta", "expected"),
    [
        (timedelta(seconds=30), "Ahora mismo"),
        (timedelta(minutes=1), "Hace 1 minuto"),
        (timedelta(minutes=45), "Hace 45 minutos"),
        (timedelta(hours=1), "Hace 1 hora"),
        (timedelta(hours=5), "Hace 5 horas"),
        (timedelta(days=1), "Hace 1 día"),
        (timedelta(days=4), "Hace 4 días"),
        (timedelta(days=7), "Hace 1 semana"),
        (timedelta(days=20), "Hace 2 semanas"),
        (timedelta(days=31), "Hace 1 mes"),
        (timedelta(days=95), "Hace 3 meses"),
    ],
)
def test_relative_time(delta, expected):
    now = datetime(2025, 6, 15, 12, 0, 0)
    assert format_relative_time(now - delta, now) == expected


def test_percentages_round_half_up():
    assert percent_change(150, 100) == 50
    assert percent_change(5, 0) == 0
    assert percent_change(1, 8) == -87
    assert percent_of(1, 8) == 13
    assert percent_of(1, 0) == 0
    assert signed_percent(12) == "+12%"
    assert signed_percent(0) == "+0%"
    assert signed_percent(-3) == "-3%"


def test_plain_number_and_short_date():
    assert plain_number(150000.0) == "150000"
    assert plain_number(99.5) == "99.5"
    assert format_short_date(date(2025, 3, 5)) == "5/3/2025"
