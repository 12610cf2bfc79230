from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Union

from ..classes.repository import ClassRepository
from ..common.datetime_utils import Clock, ensure_date, now_local, within_window
from ..core.constants import (
    CHECKIN_BUFFER_MINUTES,
    CHECKIN_IMAGE_FOLDER,
    CHECKOUT_IMAGE_FOLDER,
    DEFAULT_HISTORY_LIMIT,
    DEFAULT_LIST_LIMIT,
)
from ..core.enums import EnrollmentStatus
from ..core.exceptions import (
    AlreadyCheckedOutError,
    ConflictError,
    FaceNotRegisteredError,
    InvalidStateError,
    NotFoundError,
)
from ..enrollments.repository import EnrollmentRepository
from ..faces.service import FaceService
from ..sessions.model import ClassSession
from ..sessions.repository import SessionRepository
from ..students.model import Student
from ..students.repository import StudentRepository
from .factory import AttendanceStrategyFactory
from .location import DistanceFn, describe_location, haversine_meters
from .model import AttendanceRecord, AttendanceRow
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Check-in / check-out per (student, session).

    NONE -> CHECKED_IN -> CHECKED_OUT. A check-in may be repeated (it overwrites
    the previous one) until the pair is checked out; after that the row is final.
    Nothing is written before the face verification succeeded.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        sessions: SessionRepository,
        classes: ClassRepository,
        enrollments: EnrollmentRepository,
        faces: FaceService,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        distance_fn: DistanceFn = haversine_meters,
        clock: Clock = now_local,
        buffer_minutes: int = CHECKIN_BUFFER_MINUTES,
    ):
        self._attendance = attendance
        self._students = students
        self._sessions = sessions
        self._classes = classes
        self._enrollments = enrollments
        self._faces = faces
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._distance_fn = distance_fn
        self._clock = clock
        self._buffer_minutes = int(buffer_minutes)

    def _get_student(self, student_id: int) -> Student:
        student = self._students.get_by_id(int(student_id))
        if not student:
            raise NotFoundError("Không tìm thấy học viên")
        return student

    def _get_active_session(self, session_id: int) -> ClassSession:
        session = self._sessions.get_by_id(int(session_id))
        if not session or session.is_deleted:
            raise NotFoundError("Không tìm thấy ca học")
        return session

    def find_current_session(self, student_id: int, class_id: Optional[int] = None) -> ClassSession:
        """Pick the session a student is checking in to right now.

        Candidates are today's sessions of the student's approved classes whose
        start/end window (widened by the buffer) contains the current time.
        Auto-selected sessions win, then the one starting closest to now.
        """

        now = self._clock()
        approved = self._enrollments.list_rows(
            student_id=int(student_id),
            class_id=int(class_id) if class_id is not None else None,
            status=EnrollmentStatus.APPROVED,
        )
        class_ids = sorted({r.class_id for r in approved})
        if not class_ids:
            raise InvalidStateError("Bạn chưa được duyệt vào lớp học nào")

        todays = self._sessions.list_by_date(session_date=now.date(), class_ids=class_ids)
        if not todays:
            raise NotFoundError("Hôm nay không có ca học nào")

        open_now = [
            s for s in todays if within_window(now, s.starts_at, s.ends_at, buffer_minutes=self._buffer_minutes)
        ]
        if not open_now:
            raise NotFoundError("Hiện tại không có ca học nào đang diễn ra")

        chosen = min(
            open_now,
            key=lambda s: (not s.is_auto_selected, abs((now - s.starts_at).total_seconds()), s.session_id),
        )

        existing = self._attendance.get_for_pair(student_id=int(student_id), session_id=chosen.session_id)
        if existing and existing.check_in_time is not None:
            raise ConflictError(f"Bạn đã check-in cho {chosen.name} rồi")
        return chosen

    def check_in(
        self,
        *,
        student_id: int,
        image_base64: str,
        session_id: Optional[int] = None,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
        class_id: Optional[int] = None,
    ) -> AttendanceRecord:
        student = self._get_student(student_id)
        if session_id is None:
            session = self.find_current_session(student.student_id, class_id)
        else:
            session = self._get_active_session(session_id)

        if not student.face_registered:
            raise FaceNotRegisteredError("Bạn chưa đăng ký khuôn mặt. Vui lòng đăng ký trước khi điểm danh.")

        existing = self._attendance.get_for_pair(student_id=student.student_id, session_id=session.session_id)
        if existing and existing.is_checked_out:
            raise AlreadyCheckedOutError("Bạn đã check-out ca học này rồi")

        verification = self._faces.verify(student, image_base64, folder=CHECKIN_IMAGE_FOLDER)

        now = self._clock()
        strategy = self._factory.for_checkin(now=now, session_start=session.starts_at)
        decision = strategy.decide_checkin(now=now, session_start=session.starts_at)

        training_class = self._classes.get_by_id(session.class_id)
        note = describe_location(training_class, lat, lng, distance_fn=self._distance_fn)

        record = self._attendance.upsert_checkin(
            student_id=student.student_id,
            session_id=session.session_id,
            check_in_time=now,
            lat=lat,
            lng=lng,
            face_score=verification.score,
            image_url=verification.image_url,
            status=decision.status,
            location_note=note,
        )
        if record.is_checked_out:
            # A concurrent check-out landed between our read and the upsert.
            raise AlreadyCheckedOutError("Bạn đã check-out ca học này rồi")

        logger.info(
            "Check-in student=%s session=%s status=%s note=%s",
            student.student_id,
            session.session_id,
            decision.status.value,
            note or "-",
        )
        return record

    def check_out(
        self,
        *,
        student_id: int,
        session_id: int,
        image_base64: str,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
    ) -> AttendanceRecord:
        student = self._get_student(student_id)
        verification = self._faces.verify(student, image_base64, folder=CHECKOUT_IMAGE_FOLDER)

        record = self._attendance.get_for_pair(student_id=student.student_id, session_id=int(session_id))
        if not record:
            raise NotFoundError("Bạn chưa check-in cho ca học này")
        if record.is_checked_out:
            raise AlreadyCheckedOutError("Bạn đã check-out ca học này rồi")

        now = self._clock()
        updated = self._attendance.mark_checkout(
            attendance_id=record.attendance_id,
            check_out_time=now,
            lat=lat,
            lng=lng,
            face_score=verification.score,
            image_url=verification.image_url,
        )
        if not updated:
            raise AlreadyCheckedOutError("Bạn đã check-out ca học này rồi")

        logger.info("Check-out student=%s session=%s", student.student_id, session_id)
        return self._attendance.get_for_pair(student_id=student.student_id, session_id=int(session_id))

    def get_records(
        self,
        *,
        session_date: Union[date, str, None] = None,
        session_id: Optional[int] = None,
        class_id: Optional[int] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> list[AttendanceRow]:
        return list(
            self._attendance.list_rows(
                session_date=ensure_date(session_date) if session_date else None,
                session_id=int(session_id) if session_id is not None else None,
                class_id=int(class_id) if class_id is not None else None,
                limit=limit,
            )
        )

    def get_my_history(self, student_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> list[AttendanceRow]:
        return list(self._attendance.list_rows(student_id=int(student_id), limit=limit))
