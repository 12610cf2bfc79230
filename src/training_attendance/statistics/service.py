from __future__ import annotations

import re
from collections import defaultdict
from datetime import date
from typing import Optional, Union

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..classes.repository import ClassRepository
from ..common.datetime_utils import Clock, ensure_date, iter_dates, now_local, require_range
from ..core.constants import FAR_LOCATION_MARKER, NOTE_NO_CHECKIN_LOCATION
from ..core.enums import AttendanceStatus, DayStatus
from ..core.exceptions import NotFoundError
from ..enrollments.model import EnrollmentRequestRow
from ..enrollments.repository import EnrollmentRepository
from ..sessions.model import ClassSession
from ..sessions.repository import SessionRepository
from .model import (
    AbsenceRow,
    AttendanceMatrix,
    ClassRef,
    DayCell,
    FarCheckIn,
    FarCheckInReport,
    MatrixRow,
    MissingCheckIn,
    NoGpsCheckIn,
    OverviewStats,
    StudentLocationIssues,
    StudentRef,
    WeeklyAbsence,
)

_DISTANCE_RE = re.compile(r"\((\d+)m\)")

# Best outcome wins when a student checked in to several sessions of one day.
_STATUS_RANK = {
    AttendanceStatus.ABSENT: 1,
    AttendanceStatus.LATE: 2,
    AttendanceStatus.PRESENT: 3,
}

DateLike = Union[date, str]


def _rate(part: int, total: int) -> float:
    return round(part / total * 100, 1) if total > 0 else 0.0


def _is_far(note: Optional[str]) -> bool:
    return bool(note) and FAR_LOCATION_MARKER in note


def extract_distance(note: Optional[str]) -> int:
    """Distance in metres embedded in a far-location note, 0 when absent."""
    m = _DISTANCE_RE.search(note or "")
    return int(m.group(1)) if m else 0


def _student_ref(row: EnrollmentRequestRow) -> StudentRef:
    return StudentRef(
        student_id=row.student_id,
        student_code=row.student_code,
        full_name=row.student_name,
        avatar_url=row.avatar_url,
    )


class StatisticsService:
    """Read-side reports over a closed date range.

    Never fails on empty input: ranges without sessions or check-ins give
    zeroed counts and empty lists.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        enrollments: EnrollmentRepository,
        attendance: AttendanceRepository,
        classes: ClassRepository,
        *,
        clock: Clock = now_local,
        late_counts_as_present: bool = False,
    ):
        self._sessions = sessions
        self._enrollments = enrollments
        self._attendance = attendance
        self._classes = classes
        self._clock = clock
        self._late_counts_as_present = bool(late_counts_as_present)

    def _range(self, start_date: DateLike, end_date: DateLike) -> tuple[date, date]:
        start = ensure_date(start_date)
        end = ensure_date(end_date)
        require_range(start, end)
        return start, end

    def _sessions_in(self, start: date, end: date, class_id: Optional[int]) -> list[ClassSession]:
        class_ids = [int(class_id)] if class_id is not None else None
        return list(self._sessions.list_range(start=start, end=end, class_ids=class_ids))

    def _checked_in(self, sessions: list[ClassSession]) -> list[AttendanceRecord]:
        records = self._attendance.list_for_sessions([s.session_id for s in sessions])
        return [r for r in records if r.check_in_time is not None]

    def overview(self, start_date: DateLike, end_date: DateLike, class_id: Optional[int] = None) -> OverviewStats:
        start, end = self._range(start_date, end_date)
        sessions = self._sessions_in(start, end, class_id)
        records = self._checked_in(sessions)

        total = len(records)
        present = sum(1 for r in records if r.status == AttendanceStatus.PRESENT)
        late = sum(1 for r in records if r.status == AttendanceStatus.LATE)
        absent = sum(1 for r in records if r.status == AttendanceStatus.ABSENT)
        far = sum(1 for r in records if _is_far(r.location_note))

        return OverviewStats(
            start_date=start,
            end_date=end,
            total_sessions=len(sessions),
            total_attendances=total,
            present_count=present,
            late_count=late,
            absent_count=absent,
            far_check_in_count=far,
            present_rate=_rate(present, total),
            late_rate=_rate(late, total),
            absent_rate=_rate(absent, total),
            far_check_in_rate=_rate(far, total),
        )

    def attendance_matrix(self, start_date: DateLike, end_date: DateLike, class_id: int) -> AttendanceMatrix:
        """One cell per (enrolled student, calendar date) of the range.

        Dates before the student's enrollment or after today are NO_SESSION.
        Other dates carry the best status the student recorded that day, or
        ABSENT when nothing was recorded (even if the class had no session).
        """

        start, end = self._range(start_date, end_date)
        if not self._classes.get_by_id(int(class_id)):
            raise NotFoundError("Không tìm thấy lớp học")

        today = self._clock().date()
        sessions = self._sessions_in(start, end, class_id)
        session_dates = {s.session_id: s.session_date for s in sessions}

        best: dict[tuple[int, date], AttendanceStatus] = {}
        for r in self._checked_in(sessions):
            key = (r.student_id, session_dates[r.session_id])
            current = best.get(key)
            if current is None or _STATUS_RANK[r.status] > _STATUS_RANK[current]:
                best[key] = r.status

        dates = list(iter_dates(start, end))
        rows: list[MatrixRow] = []
        for enrollment in self._enrollments.list_approved(class_ids=[int(class_id)]):
            enrolled_on = enrollment.enrolled_on
            cells = []
            for d in dates:
                if d < enrolled_on or d > today:
                    status = DayStatus.NO_SESSION
                else:
                    recorded = best.get((enrollment.student_id, d))
                    status = DayStatus(recorded.value) if recorded else DayStatus.ABSENT
                cells.append(DayCell(date=d, status=status))

            present = sum(1 for c in cells if c.status == DayStatus.PRESENT)
            late = sum(1 for c in cells if c.status == DayStatus.LATE)
            absent = sum(1 for c in cells if c.status == DayStatus.ABSENT)
            if self._late_counts_as_present:
                present += late
            total_days = sum(1 for c in cells if c.status != DayStatus.NO_SESSION)

            rows.append(
                MatrixRow(
                    student=_student_ref(enrollment),
                    daily_status=cells,
                    present_count=present,
                    late_count=late,
                    absent_count=absent,
                    total_days=total_days,
                    attendance_rate=_rate(present, total_days),
                )
            )

        return AttendanceMatrix(
            start_date=start,
            end_date=end,
            class_id=int(class_id),
            dates=dates,
            students=rows,
            total_students=len(rows),
            total_days=len(dates),
        )

    def weekly_absence(
        self, start_date: DateLike, end_date: DateLike, class_id: Optional[int] = None
    ) -> WeeklyAbsence:
        """Days absent per student, counting only dates on which the student's class held a session.

        One check-in among a day's sessions is enough to be present that day.
        """

        start, end = self._range(start_date, end_date)
        sessions = self._sessions_in(start, end, class_id)

        dates_by_class: dict[int, dict[date, set[int]]] = defaultdict(lambda: defaultdict(set))
        for s in sessions:
            dates_by_class[s.class_id][s.session_date].add(s.session_id)

        attended = {(r.student_id, r.session_id) for r in self._checked_in(sessions)}

        class_ids = [int(class_id)] if class_id is not None else sorted(dates_by_class)
        rows: list[AbsenceRow] = []
        if class_ids:
            for enrollment in self._enrollments.list_approved(class_ids=class_ids):
                days = dates_by_class.get(enrollment.class_id, {})
                absent_days = sum(
                    1
                    for session_ids in days.values()
                    if not any((enrollment.student_id, sid) in attended for sid in session_ids)
                )
                total_days = len(days)
                rows.append(
                    AbsenceRow(
                        student=_student_ref(enrollment),
                        training_class=ClassRef(
                            class_id=enrollment.class_id,
                            code=enrollment.class_code,
                            name=enrollment.class_name,
                        ),
                        absent_days=absent_days,
                        total_days=total_days,
                        attendance_rate=_rate(total_days - absent_days, total_days),
                    )
                )

        rows.sort(key=lambda r: -r.absent_days)
        return WeeklyAbsence(
            start_date=start,
            end_date=end,
            total_days=len({s.session_date for s in sessions}),
            students=rows,
        )

    def missing_check_ins(
        self, start_date: DateLike, end_date: DateLike, class_id: Optional[int] = None
    ) -> list[MissingCheckIn]:
        start, end = self._range(start_date, end_date)
        sessions = self._sessions_in(start, end, class_id)
        class_ids = sorted({s.class_id for s in sessions})
        if not class_ids:
            return []

        attended = {(r.student_id, r.session_id) for r in self._checked_in(sessions)}

        missing: list[MissingCheckIn] = []
        for enrollment in self._enrollments.list_approved(class_ids=class_ids):
            for s in sessions:
                if s.class_id != enrollment.class_id or (enrollment.student_id, s.session_id) in attended:
                    continue
                missing.append(
                    MissingCheckIn(
                        student_code=enrollment.student_code,
                        student_name=enrollment.student_name,
                        class_code=enrollment.class_code,
                        class_name=enrollment.class_name,
                        session_id=s.session_id,
                        session_date=s.session_date,
                        session_name=s.name,
                        session_time=s.time_range,
                    )
                )
        return missing

    def far_check_in_details(
        self, start_date: DateLike, end_date: DateLike, class_id: Optional[int] = None
    ) -> FarCheckInReport:
        """Check-ins flagged far from the class, plus check-ins that captured no GPS at all."""

        start, end = self._range(start_date, end_date)
        rows = self._attendance.list_rows(
            start=start,
            end=end,
            class_id=int(class_id) if class_id is not None else None,
            active_sessions_only=True,
        )

        by_student: dict[int, StudentLocationIssues] = {}
        total_far = 0
        total_no_gps = 0
        for row in rows:
            if row.check_in_time is None:
                continue
            far = _is_far(row.location_note)
            no_gps = not row.has_gps
            if not far and not no_gps:
                continue

            issues = by_student.get(row.student_id)
            if issues is None:
                issues = by_student[row.student_id] = StudentLocationIssues(
                    student=StudentRef(
                        student_id=row.student_id,
                        student_code=row.student_code,
                        full_name=row.full_name,
                        avatar_url=row.avatar_url,
                    )
                )

            if far:
                total_far += 1
                issues.far_check_ins.append(
                    FarCheckIn(
                        session_date=row.session_date,
                        session_name=row.session_name,
                        check_in_time=row.check_in_time,
                        location_note=row.location_note,
                        distance=extract_distance(row.location_note),
                        lat=row.check_in_lat,
                        lng=row.check_in_lng,
                    )
                )
            if no_gps:
                total_no_gps += 1
                issues.no_gps_check_ins.append(
                    NoGpsCheckIn(
                        session_date=row.session_date,
                        session_name=row.session_name,
                        check_in_time=row.check_in_time,
                        reason=NOTE_NO_CHECKIN_LOCATION,
                    )
                )

        students = list(by_student.values())
        for issues in students:
            issues.total_far_check_ins = len(issues.far_check_ins)
            issues.total_no_gps_check_ins = len(issues.no_gps_check_ins)
            distances = [f.distance for f in issues.far_check_ins]
            if distances:
                issues.max_distance = max(distances)
                issues.avg_distance = round(sum(distances) / len(distances))
        students.sort(key=lambda s: (-s.total_far_check_ins, -s.total_no_gps_check_ins))

        return FarCheckInReport(
            start_date=start,
            end_date=end,
            total_far_check_ins=total_far,
            total_no_gps_check_ins=total_no_gps,
            total_students_with_issues=len(students),
            students=students,
        )
