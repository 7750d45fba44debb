from datetime import date, datetime
from typing import Union

from dateutil import parser, tz

DayLike = Union[date, datetime, str]


class Clock:
    """Liefert den aktuellen Zeitpunkt im lokalen Kalender."""

    def now(self) -> datetime:
        return datetime.now(tz.tzlocal())

    def today(self) -> date:
        return self.now().date()


def calendar_day(value: DayLike) -> date:
    """
    Normalisiert einen Zeitpunkt auf den Kalendertag im lokalen Kalender.
    Akzeptiert date, datetime (naiv oder mit Zeitzone) und ISO-8601-Strings,
    z. B. '2024-01-01' oder '2023-12-31T22:00:00.000Z'.
    """
    if isinstance(value, str):
        value = parser.isoparse(value.strip())
    # datetime ist eine Unterklasse von date, also zuerst prüfen
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(tz.tzlocal())
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Kein Kalendertag: {value!r}")


def month_index(day: DayLike) -> int:
    """Monat als Index 0 (Januar) bis 11 (Dezember)."""
    return calendar_day(day).month - 1


def is_same_day(a: DayLike, b: DayLike) -> bool:
    return calendar_day(a) == calendar_day(b)
