"""Resolve free-text time expressions for `jrnl get`.

Understands a small, predictable vocabulary:

- ``today``, ``now``, ``yesterday``, ``tomorrow``
- ``3 days ago``, ``a week ago``, ``2 weeks ago``
- ``monday`` (most recent Monday, today included), ``last monday`` (strictly before today)
- ``2024-03-05`` and ``march 5`` / ``mar 5 2024``

Everything resolves to a calendar day; ``day_bounds`` turns it into the
half-open ``[after, before)`` pair the journal query expects.
"""

import re
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional

from journal.errors import TimeParseFailed

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

MONTHS = {
    name: i
    for i, names in enumerate(
        [
            ("january", "jan"),
            ("february", "feb"),
            ("march", "mar"),
            ("april", "apr"),
            ("may",),
            ("june", "jun"),
            ("july", "jul"),
            ("august", "aug"),
            ("september", "sep", "sept"),
            ("october", "oct"),
            ("november", "nov"),
            ("december", "dec"),
        ],
        start=1,
    )
    for name in names
}

_NUMBER_WORDS = {"a": 1, "an": 1, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5}

_AGO_RE = re.compile(r"^(\d+|a|an|one|two|three|four|five)\s+(day|week)s?\s+ago$")
_WEEKDAY_RE = re.compile(r"^(last\s+)?(" + "|".join(WEEKDAYS) + r")$")
_MONTH_DAY_RE = re.compile(r"^([a-z]+)\.?\s+(\d{1,2})(?:st|nd|rd|th)?(?:,?\s+(\d{4}))?$")


def _normalize(expression: str) -> str:
    return " ".join(expression.lower().replace(",", " ").split()) if expression else ""


def _shift(day: date, days: int, expression: str) -> date:
    try:
        return day + timedelta(days=days)
    except OverflowError as e:
        raise TimeParseFailed(expression, "date out of range") from e


def resolve_day(expression: str, now: Optional[datetime] = None) -> date:
    """Resolve ``expression`` to a calendar day relative to ``now``.

    Raises:
        TimeParseFailed: the expression is empty, not understood, or lands
            outside the representable date range.
    """
    now = now or datetime.now().astimezone()
    today = now.date()
    text = _normalize(expression)
    if not text:
        raise TimeParseFailed(expression, "empty time expression")

    if text in ("today", "now"):
        return today
    if text == "yesterday":
        return _shift(today, -1, expression)
    if text == "tomorrow":
        return _shift(today, 1, expression)

    m = _AGO_RE.match(text)
    if m:
        count_raw, unit = m.groups()
        count = int(count_raw) if count_raw.isdigit() else _NUMBER_WORDS[count_raw]
        days = count * (7 if unit == "week" else 1)
        return _shift(today, -days, expression)

    m = _WEEKDAY_RE.match(text)
    if m:
        strict, name = m.groups()
        back = (today.weekday() - WEEKDAYS.index(name)) % 7
        if strict and back == 0:
            back = 7
        return _shift(today, -back, expression)

    try:
        return date.fromisoformat(text)
    except ValueError:
        pass

    m = _MONTH_DAY_RE.match(text)
    if m and m.group(1) in MONTHS:
        month = MONTHS[m.group(1)]
        day = int(m.group(2))
        year = int(m.group(3)) if m.group(3) else today.year
        try:
            return date(year, month, day)
        except ValueError as e:
            raise TimeParseFailed(expression, str(e)) from e

    raise TimeParseFailed(expression)


def day_bounds(day: date, tz: Optional[tzinfo] = None) -> tuple[datetime, datetime]:
    """``[day 00:00, next day 00:00)`` in ``tz`` (local time by default).

    Raises:
        TimeParseFailed: the day has no representable successor.
    """
    tz = tz or datetime.now().astimezone().tzinfo
    after = datetime.combine(day, time.min, tzinfo=tz)
    before = datetime.combine(_shift(day, 1, day.isoformat()), time.min, tzinfo=tz)
    return after, before


def parse_instant(text: str, tz: Optional[tzinfo] = None) -> datetime:
    """Parse an ISO-8601 date or datetime; naive values are taken in ``tz`` (local by default).

    Raises:
        TimeParseFailed: not an ISO-8601 value.
    """
    try:
        value = datetime.fromisoformat(text.strip())
    except (ValueError, AttributeError) as e:
        raise TimeParseFailed(text, "expected an ISO-8601 date or datetime") from e
    if value.tzinfo is None:
        value = value.replace(tzinfo=tz or datetime.now().astimezone().tzinfo)
    return value
