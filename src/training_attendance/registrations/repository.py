from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import SessionRegistration


class RegistrationRepository(Protocol):
    def get(self, *, student_id: int, session_id: int) -> Optional[SessionRegistration]:
        raise NotImplementedError

    def find_on_date(self, *, student_id: int, session_date: date) -> Optional[SessionRegistration]:
        raise NotImplementedError

    def create(self, *, student_id: int, session_id: int, session_date: date, registered_at: datetime) -> int:
        """Raises ConflictError when (student, session) or (student, date) is taken."""

        raise NotImplementedError

    def list_for_student(self, student_id: int) -> Sequence[SessionRegistration]:
        """Newest session date first."""

        raise NotImplementedError
