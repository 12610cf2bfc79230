from __future__ import annotations

import logging
from datetime import date, time
from typing import Iterable, Optional, Sequence, Union

from ..classes.repository import ClassRepository
from ..common.datetime_utils import (
    Clock,
    ensure_date,
    ensure_time,
    iter_dates,
    now_local,
    registration_deadline,
    require_range,
)
from ..common.validators import require_non_empty
from ..core.constants import MAX_SESSIONS_PER_DAY, REGISTRATION_LEAD_MINUTES
from ..core.exceptions import CapacityExceededError, NotFoundError, ValidationError
from .model import ClassSession, SessionTemplate
from .repository import SessionRepository

logger = logging.getLogger(__name__)

ClassFilter = Union[int, Sequence[int], None]


def _class_ids(class_id: ClassFilter) -> Optional[list[int]]:
    if class_id is None:
        return None
    if isinstance(class_id, (list, tuple, set, frozenset)):
        return [int(c) for c in class_id]
    return [int(class_id)]


class SessionService:
    """Session registry: creates, edits and soft-deletes class sessions.

    Soft-deleting a session never touches its registrations or attendance rows;
    they are kept as an audit trail.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        classes: ClassRepository,
        *,
        clock: Clock = now_local,
        lead_minutes: int = REGISTRATION_LEAD_MINUTES,
        max_per_day: int = MAX_SESSIONS_PER_DAY,
    ):
        self._sessions = sessions
        self._classes = classes
        self._clock = clock
        self._lead_minutes = int(lead_minutes)
        self._max_per_day = int(max_per_day)

    @staticmethod
    def _validate_slot(name: str, start_time: Union[time, str], end_time: Union[time, str]) -> tuple[str, time, time]:
        name = require_non_empty(name, "Tên ca học")
        start_t = ensure_time(start_time)
        end_t = ensure_time(end_time)
        if end_t <= start_t:
            raise ValidationError("Giờ kết thúc phải sau giờ bắt đầu")
        return name, start_t, end_t

    def get_session(self, session_id: int) -> ClassSession:
        session = self._sessions.get_by_id(int(session_id))
        if not session or session.is_deleted:
            raise NotFoundError("Không tìm thấy ca học")
        return session

    def create_session(
        self,
        *,
        class_id: int,
        session_date: Union[date, str],
        name: str,
        start_time: Union[time, str],
        end_time: Union[time, str],
        is_auto_selected: bool = False,
    ) -> ClassSession:
        if not self._classes.get_by_id(int(class_id)):
            raise NotFoundError("Không tìm thấy lớp học")

        day = ensure_date(session_date)
        name, start_t, end_t = self._validate_slot(name, start_time, end_time)

        if self._sessions.count_active(class_id=int(class_id), session_date=day) >= self._max_per_day:
            raise CapacityExceededError(f"Mỗi ngày chỉ được tạo tối đa {self._max_per_day} ca học cho lớp này")

        session_id = self._sessions.create(
            class_id=int(class_id),
            session_date=day,
            name=name,
            start_time=start_t,
            end_time=end_t,
            registration_deadline=registration_deadline(day, start_t, lead_minutes=self._lead_minutes),
            is_auto_selected=bool(is_auto_selected),
        )
        logger.info("Created session %s for class %s on %s", session_id, class_id, day)
        return self.get_session(session_id)

    def update_session(
        self,
        session_id: int,
        *,
        class_id: int,
        session_date: Union[date, str],
        name: str,
        start_time: Union[time, str],
        end_time: Union[time, str],
    ) -> ClassSession:
        """Edit a session and recompute its deadline. The daily cap is only checked on creation.

        Moving the session to another date moves its registrations with it; the
        repository raises ConflictError when a registrant already holds another
        session on the new date.
        """

        self.get_session(session_id)
        if not self._classes.get_by_id(int(class_id)):
            raise NotFoundError("Không tìm thấy lớp học")
        day = ensure_date(session_date)
        name, start_t, end_t = self._validate_slot(name, start_time, end_time)

        self._sessions.update(
            session_id=int(session_id),
            class_id=int(class_id),
            session_date=day,
            name=name,
            start_time=start_t,
            end_time=end_t,
            registration_deadline=registration_deadline(day, start_t, lead_minutes=self._lead_minutes),
        )
        return self.get_session(session_id)

    def soft_delete_session(self, session_id: int) -> None:
        self.get_session(session_id)
        self._sessions.soft_delete(int(session_id))
        logger.info("Soft-deleted session %s", session_id)

    def list_by_date(self, session_date: Union[date, str], class_id: ClassFilter = None) -> list[ClassSession]:
        return list(self._sessions.list_by_date(session_date=ensure_date(session_date), class_ids=_class_ids(class_id)))

    def list_today(self, class_id: ClassFilter = None) -> list[ClassSession]:
        return self.list_by_date(self._clock().date(), class_id)

    def bulk_create_sessions(
        self,
        *,
        class_id: int,
        start_date: Union[date, str],
        end_date: Union[date, str],
        templates: Iterable[SessionTemplate],
        exclude_saturday: bool = False,
        exclude_weekends: bool = False,
    ) -> list[ClassSession]:
        """Create the same slots on every date of a range.

        Dates already holding the maximum number of sessions are skipped, and a
        date never receives more slots than it has room for.
        """

        if not self._classes.get_by_id(int(class_id)):
            raise NotFoundError("Không tìm thấy lớp học")

        start = ensure_date(start_date)
        end = ensure_date(end_date)
        require_range(start, end)

        slots = [self._validate_slot(t.name, t.start_time, t.end_time) for t in templates]
        if not slots:
            raise ValidationError("Vui lòng nhập ít nhất 1 ca học")

        created: list[ClassSession] = []
        for day in iter_dates(start, end):
            weekday = day.weekday()  # 5 = Saturday, 6 = Sunday
            if exclude_weekends and weekday >= 5:
                continue
            if exclude_saturday and weekday == 5:
                continue

            room = self._max_per_day - self._sessions.count_active(class_id=int(class_id), session_date=day)
            for name, start_t, end_t in slots[: max(room, 0)]:
                session_id = self._sessions.create(
                    class_id=int(class_id),
                    session_date=day,
                    name=name,
                    start_time=start_t,
                    end_time=end_t,
                    registration_deadline=registration_deadline(day, start_t, lead_minutes=self._lead_minutes),
                )
                created.append(self.get_session(session_id))

        logger.info("Bulk-created %d sessions for class %s (%s..%s)", len(created), class_id, start, end)
        return created
