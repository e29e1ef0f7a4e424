"""Display formatting for amounts, billing periods and relative times (es-AR)."""

from __future__ import annotations

import math
from datetime import date, datetime

MONTH_LABELS = (
    "Enero", "Febrero", "Marzo", "Abril", "Mayo", "Junio",
    "Julio", "Agosto", "Septiembre", "Octubre", "Noviembre", "Diciembre",
)

CURRENCY_SYMBOLS = {
    "ARS": "$",
    "USD": "US$",
    "EUR": "€",
}


def group_thousands(amount: float | int) -> str:
    """Whole-number rendering with '.' as the thousands separator."""
    rounded = int(round(amount))
    sign = "-" if rounded < 0 else ""
    return sign + f"{abs(rounded):,}".replace(",", ".")


def format_currency(amount: float | int, currency: str = "ARS") -> str:
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), currency.upper())
    return f"{symbol} {group_thousands(amount)}"


def format_period(month: int, year: int) -> str:
    if not 1 <= month <= 12:
        raise ValueError(f"month out of range: {month}")
    return f"{MONTH_LABELS[month - 1]} {year}"


def _plural(count: int, singular: str, plural: str) -> str:
    return singular if count == 1 else plural


def format_relative_time(moment: datetime, now: datetime) -> str:
    delta = now - moment
    minutes = int(delta.total_seconds() // 60)
    hours = int(delta.total_seconds() // 3600)
    days = delta.days

    if minutes < 1:
        return "Ahora mismo"
    if minutes < 60:
        return f"Hace {minutes} {_plural(minutes, 'minuto', 'minutos')}"
    if hours < 24:
        return f"Hace {hours} {_plural(hours, 'hora', 'horas')}"
    if days == 1:
        return "Hace 1 día"
    if days < 7:
        return f"Hace {days} días"
    if days < 30:
        weeks = days // 7
        return f"Hace {weeks} {_plural(weeks, 'semana', 'semanas')}"
    months = days // 30
    return f"Hace {months} {_plural(months, 'mes', 'meses')}"


def percent_change(current: float, previous: float) -> int:
    """Whole-percent change rounded half up; 0 when there is no previous baseline."""
    if not previous or previous <= 0:
        return 0
    return math.floor((current - previous) / previous * 100 + 0.5)


def percent_of(part: float, whole: float) -> int:
    if not whole or whole <= 0:
        return 0
    return math.floor(part / whole * 100 + 0.5)


def signed_percent(value: float | int) -> str:
    return f"{'+' if value >= 0 else ''}{value}%"


def plain_number(value: float | int) -> str:
    """Number as plain text, without a trailing ``.0`` on whole values."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def format_short_date(value: date) -> str:
    """Day/month/year without zero padding, as es-AR prints short dates."""
    return f"{value.day}/{value.month}/{value.year}"
