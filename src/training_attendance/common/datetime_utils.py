from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Callable, Iterator, Union

from ..core.exceptions import ValidationError

Clock = Callable[[], datetime]


def now_local() -> datetime:
    """Current local time.

    Note: Services receive this as their default clock so tests can inject fixed instants.
    """
    return datetime.now()


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("Ngày phải có định dạng YYYY-MM-DD")


def parse_hhmm(value: str) -> time:
    """Parse HH:mm string into time."""
    try:
        return datetime.strptime((value or "").strip(), "%H:%M").time()
    except ValueError:
        raise ValidationError("Giờ phải có định dạng HH:mm")


def ensure_date(value: Union[date, str]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_iso_date(value)


def ensure_time(value: Union[time, str]) -> time:
    if isinstance(value, time):
        return value
    return parse_hhmm(value)


def session_start(session_date: date, start_time: time) -> datetime:
    return datetime.combine(session_date, start_time)


def registration_deadline(session_date: date, start_time: time, *, lead_minutes: int) -> datetime:
    """Registration closes `lead_minutes` before the session starts."""
    return session_start(session_date, start_time) - timedelta(minutes=lead_minutes)


def within_window(now: datetime, start: datetime, end: datetime, *, buffer_minutes: int) -> bool:
    """True when `now` lies in [start - buffer, end + buffer]."""
    buffer = timedelta(minutes=buffer_minutes)
    return start - buffer <= now <= end + buffer


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Every calendar date of the closed range [start, end]."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def require_range(start: date, end: date) -> None:
    if end < start:
        raise ValidationError("Ngày kết thúc phải >= ngày bắt đầu")
