from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Thực thể miền (domain): Bản ghi điểm danh, duy nhất theo (student, session)."""

    attendance_id: int
    student_id: int
    session_id: int
    status: AttendanceStatus
    check_in_time: Optional[datetime] = None
    check_in_lat: Optional[float] = None
    check_in_lng: Optional[float] = None
    check_in_face_score: Optional[float] = None
    check_in_image_url: Optional[str] = None
    check_out_time: Optional[datetime] = None
    check_out_lat: Optional[float] = None
    check_out_lng: Optional[float] = None
    check_out_face_score: Optional[float] = None
    check_out_image_url: Optional[str] = None
    location_note: Optional[str] = None

    @property
    def is_checked_out(self) -> bool:
        return self.check_out_time is not None

    @property
    def has_gps(self) -> bool:
        return self.check_in_lat is not None and self.check_in_lng is not None


@dataclass(frozen=True)
class AttendanceRow:
    """Read-model joined with student and session summaries (listings, reports)."""

    attendance_id: int
    student_id: int
    student_code: str
    full_name: str
    session_id: int
    class_id: int
    session_date: date
    session_name: str
    start_time: time
    end_time: time
    status: AttendanceStatus
    check_in_time: Optional[datetime] = None
    check_in_lat: Optional[float] = None
    check_in_lng: Optional[float] = None
    check_in_face_score: Optional[float] = None
    check_out_time: Optional[datetime] = None
    check_out_lat: Optional[float] = None
    check_out_lng: Optional[float] = None
    check_out_face_score: Optional[float] = None
    location_note: Optional[str] = None
    avatar_url: Optional[str] = None

    @property
    def has_gps(self) -> bool:
        return self.check_in_lat is not None and self.check_in_lng is not None
