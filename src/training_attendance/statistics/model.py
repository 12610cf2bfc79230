from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import DayStatus


@dataclass(frozen=True)
class StudentRef:
    student_id: int
    student_code: str
    full_name: str
    avatar_url: Optional[str] = None


@dataclass(frozen=True)
class ClassRef:
    class_id: int
    code: str
    name: str


@dataclass(frozen=True)
class OverviewStats:
    start_date: date
    end_date: date
    total_sessions: int
    total_attendances: int
    present_count: int
    late_count: int
    absent_count: int
    far_check_in_count: int
    present_rate: float
    late_rate: float
    absent_rate: float
    far_check_in_rate: float


@dataclass(frozen=True)
class DayCell:
    date: date
    status: DayStatus


@dataclass(frozen=True)
class MatrixRow:
    student: StudentRef
    daily_status: list[DayCell]
    present_count: int
    late_count: int
    absent_count: int
    total_days: int
    attendance_rate: float


@dataclass(frozen=True)
class AttendanceMatrix:
    """Students x calendar dates of one class."""

    start_date: date
    end_date: date
    class_id: int
    dates: list[date]
    students: list[MatrixRow]
    total_students: int
    total_days: int


@dataclass(frozen=True)
class AbsenceRow:
    student: StudentRef
    training_class: ClassRef
    absent_days: int
    total_days: int
    attendance_rate: float


@dataclass(frozen=True)
class WeeklyAbsence:
    start_date: date
    end_date: date
    total_days: int
    students: list[AbsenceRow]


@dataclass(frozen=True)
class MissingCheckIn:
    student_code: str
    student_name: str
    class_code: str
    class_name: str
    session_id: int
    session_date: date
    session_name: str
    session_time: str


@dataclass(frozen=True)
class FarCheckIn:
    session_date: date
    session_name: str
    check_in_time: Optional[datetime]
    location_note: str
    distance: int
    lat: Optional[float] = None
    lng: Optional[float] = None


@dataclass(frozen=True)
class NoGpsCheckIn:
    session_date: date
    session_name: str
    check_in_time: Optional[datetime]
    reason: str


@dataclass
class StudentLocationIssues:
    student: StudentRef
    far_check_ins: list[FarCheckIn] = field(default_factory=list)
    no_gps_check_ins: list[NoGpsCheckIn] = field(default_factory=list)
    total_far_check_ins: int = 0
    total_no_gps_check_ins: int = 0
    max_distance: int = 0
    avg_distance: int = 0


@dataclass(frozen=True)
class FarCheckInReport:
    start_date: date
    end_date: date
    total_far_check_ins: int
    total_no_gps_check_ins: int
    total_students_with_issues: int
    students: list[StudentLocationIssues]
