from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, AttendanceRow


class AttendanceRepository(Protocol):
    def get_for_pair(self, *, student_id: int, session_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def upsert_checkin(
        self,
        *,
        student_id: int,
        session_id: int,
        check_in_time: datetime,
        lat: Optional[float],
        lng: Optional[float],
        face_score: float,
        image_url: Optional[str],
        status: AttendanceStatus,
        location_note: Optional[str],
    ) -> AttendanceRecord:
        """Atomic insert-or-update keyed by (student, session).

        A row that is already checked out is left untouched; the stored row is returned
        either way so the caller can tell.
        """

        raise NotImplementedError

    def mark_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        lat: Optional[float],
        lng: Optional[float],
        face_score: float,
        image_url: Optional[str],
    ) -> bool:
        """Set the check-out fields only if none are set yet. Returns False otherwise."""

        raise NotImplementedError

    def list_rows(
        self,
        *,
        session_date: Optional[date] = None,
        session_id: Optional[int] = None,
        class_id: Optional[int] = None,
        student_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        active_sessions_only: bool = False,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceRow]:
        """Newest check-in first."""

        raise NotImplementedError

    def list_for_sessions(self, session_ids: Sequence[int]) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
