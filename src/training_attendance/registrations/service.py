from __future__ import annotations

import logging

from ..common.datetime_utils import Clock, now_local
from ..core.exceptions import ConflictError, DeadlinePassedError, NotFoundError
from ..sessions.repository import SessionRepository
from .model import SessionRegistration
from .repository import RegistrationRepository

logger = logging.getLogger(__name__)


class RegistrationService:
    def __init__(self, registrations: RegistrationRepository, sessions: SessionRepository, *, clock: Clock = now_local):
        self._registrations = registrations
        self._sessions = sessions
        self._clock = clock

    def register(self, *, student_id: int, session_id: int) -> SessionRegistration:
        session = self._sessions.get_by_id(int(session_id))
        if not session or session.is_deleted:
            raise NotFoundError("Không tìm thấy ca học")

        now = self._clock()
        # Hard cutover: the deadline instant itself is still open.
        if now > session.registration_deadline:
            raise DeadlinePassedError("Đã hết hạn đăng ký ca học này")

        if self._registrations.get(student_id=int(student_id), session_id=session.session_id):
            raise ConflictError("Bạn đã đăng ký ca học này rồi")

        if self._registrations.find_on_date(student_id=int(student_id), session_date=session.session_date):
            raise ConflictError("Bạn chỉ được đăng ký 1 ca học mỗi ngày")

        registration_id = self._registrations.create(
            student_id=int(student_id),
            session_id=session.session_id,
            session_date=session.session_date,
            registered_at=now,
        )
        logger.info("Student %s registered for session %s", student_id, session.session_id)
        return SessionRegistration(
            registration_id=registration_id,
            student_id=int(student_id),
            session_id=session.session_id,
            session_date=session.session_date,
            registered_at=now,
        )

    def my_registrations(self, student_id: int) -> list[dict]:
        registrations = list(self._registrations.list_for_student(int(student_id)))
        sessions = {s.session_id: s for s in self._sessions.get_many([r.session_id for r in registrations])}
        return [{"registration": r, "session": sessions.get(r.session_id)} for r in registrations]
