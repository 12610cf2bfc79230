from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True)
class SessionRegistration:
    """Đăng ký tham gia một ca học. Append-only."""

    registration_id: int
    student_id: int
    session_id: int
    session_date: date
    registered_at: datetime
