from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time

from ..common.datetime_utils import session_start


@dataclass(frozen=True)
class ClassSession:
    """Thực thể miền (domain): Ca học của một lớp trong một ngày."""

    session_id: int
    class_id: int
    session_date: date
    name: str
    start_time: time
    end_time: time
    registration_deadline: datetime
    is_auto_selected: bool = False
    is_deleted: bool = False

    @property
    def starts_at(self) -> datetime:
        return session_start(self.session_date, self.start_time)

    @property
    def ends_at(self) -> datetime:
        return session_start(self.session_date, self.end_time)

    @property
    def time_range(self) -> str:
        return f"{self.start_time.strftime('%H:%M')} - {self.end_time.strftime('%H:%M')}"


@dataclass(frozen=True)
class SessionTemplate:
    """One slot of a bulk creation (name + HH:mm range), repeated on every date."""

    name: str
    start_time: str
    end_time: str
