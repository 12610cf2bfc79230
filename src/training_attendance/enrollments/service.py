from __future__ import annotations

import logging
from typing import Optional, Union

from ..classes.model import TrainingClass
from ..classes.repository import ClassRepository
from ..common.datetime_utils import Clock, now_local
from ..common.validators import optional_text
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import EnrollmentStatus
from ..core.exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError
from .model import EnrollmentRequest, EnrollmentRequestRow
from .repository import EnrollmentRepository

logger = logging.getLogger(__name__)


class EnrollmentService:
    """Request/approval workflow deciding which students belong to a class.

    A student holds at most one open (PENDING or APPROVED) request per class;
    a REJECTED request does not block asking again.
    """

    def __init__(self, enrollments: EnrollmentRepository, classes: ClassRepository, *, clock: Clock = now_local):
        self._enrollments = enrollments
        self._classes = classes
        self._clock = clock

    def create_request(self, *, student_id: int, class_id: int) -> EnrollmentRequest:
        existing = self._enrollments.find_open(student_id=int(student_id), class_id=int(class_id))
        if existing:
            if existing.status == EnrollmentStatus.APPROVED:
                raise ConflictError("Bạn đã tham gia lớp học này rồi")
            raise ConflictError("Bạn đã có yêu cầu đang chờ duyệt cho lớp này")

        if not self._classes.get_by_id(int(class_id)):
            raise NotFoundError("Không tìm thấy lớp học")

        request_id = self._enrollments.create(
            student_id=int(student_id),
            class_id=int(class_id),
            requested_at=self._clock(),
        )
        logger.info("Student %s requested to join class %s (request %s)", student_id, class_id, request_id)
        return self._get(request_id)

    def review(
        self,
        *,
        request_id: int,
        reviewer_id: int,
        decision: Union[EnrollmentStatus, str],
        reason: Optional[str] = None,
    ) -> EnrollmentRequest:
        try:
            decision = EnrollmentStatus(decision)
        except ValueError:
            raise ValidationError("Quyết định không hợp lệ")
        if decision == EnrollmentStatus.PENDING:
            raise ValidationError("Quyết định không hợp lệ")

        req = self._enrollments.get_by_id(int(request_id))
        if not req:
            raise NotFoundError("Không tìm thấy yêu cầu")
        if req.status != EnrollmentStatus.PENDING:
            raise InvalidStateError("Yêu cầu đã được xử lý rồi")

        decided = self._enrollments.decide(
            request_id=int(request_id),
            status=decision,
            reviewed_by=int(reviewer_id),
            reviewed_at=self._clock(),
            rejection_reason=optional_text(reason) if decision == EnrollmentStatus.REJECTED else None,
        )
        if not decided:
            # Another reviewer got there first.
            raise InvalidStateError("Yêu cầu đã được xử lý rồi")

        logger.info("Enrollment request %s %s by %s", request_id, decision.value, reviewer_id)
        return self._get(request_id)

    def my_enrolled_classes(self, student_id: int) -> list[TrainingClass]:
        rows = self._enrollments.list_rows(student_id=int(student_id), status=EnrollmentStatus.APPROVED)
        rows = sorted(rows, key=lambda r: r.reviewed_at or r.requested_at, reverse=True)

        out: list[TrainingClass] = []
        for r in rows:
            training_class = self._classes.get_by_id(r.class_id)
            if training_class:
                out.append(training_class)
        return out

    def my_requests(self, student_id: int) -> list[EnrollmentRequestRow]:
        return list(self._enrollments.list_rows(student_id=int(student_id), limit=DEFAULT_LIST_LIMIT))

    def all_requests(
        self,
        *,
        class_id: Optional[int] = None,
        status: Union[EnrollmentStatus, str, None] = None,
    ) -> list[EnrollmentRequestRow]:
        try:
            status = EnrollmentStatus(status) if status else None
        except ValueError:
            raise ValidationError("Trạng thái không hợp lệ")
        return list(
            self._enrollments.list_rows(
                class_id=int(class_id) if class_id is not None else None,
                status=status,
                limit=DEFAULT_LIST_LIMIT,
            )
        )

    def pending_requests(self, class_id: Optional[int] = None) -> list[EnrollmentRequestRow]:
        return list(
            self._enrollments.list_rows(
                class_id=int(class_id) if class_id is not None else None,
                status=EnrollmentStatus.PENDING,
                oldest_first=True,
                limit=DEFAULT_LIST_LIMIT,
            )
        )

    def class_stats(self, class_id: int) -> dict:
        counts = self._enrollments.count_by_status(class_id=int(class_id))
        return {
            "pending": counts.get(EnrollmentStatus.PENDING, 0),
            "approved": counts.get(EnrollmentStatus.APPROVED, 0),
            "rejected": counts.get(EnrollmentStatus.REJECTED, 0),
        }

    def pending_count(self, class_id: int) -> int:
        return self.class_stats(class_id)["pending"]

    def _get(self, request_id: int) -> EnrollmentRequest:
        req = self._enrollments.get_by_id(int(request_id))
        if not req:
            raise NotFoundError("Không tìm thấy yêu cầu")
        return req
