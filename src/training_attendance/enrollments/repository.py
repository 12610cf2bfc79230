from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import EnrollmentStatus
from .model import EnrollmentRequest, EnrollmentRequestRow


class EnrollmentRepository(Protocol):
    def get_by_id(self, request_id: int) -> Optional[EnrollmentRequest]:
        raise NotImplementedError

    def find_open(self, *, student_id: int, class_id: int) -> Optional[EnrollmentRequest]:
        """The PENDING or APPROVED request of a student for a class, if any."""

        raise NotImplementedError

    def create(self, *, student_id: int, class_id: int, requested_at: datetime) -> int:
        """Insert a PENDING request.

        Raises ConflictError when another open request exists for the pair.
        """

        raise NotImplementedError

    def decide(
        self,
        *,
        request_id: int,
        status: EnrollmentStatus,
        reviewed_by: int,
        reviewed_at: datetime,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        """Transition a PENDING request. Returns False if it was no longer PENDING."""

        raise NotImplementedError

    def list_rows(
        self,
        *,
        student_id: Optional[int] = None,
        class_id: Optional[int] = None,
        status: Optional[EnrollmentStatus] = None,
        oldest_first: bool = False,
        limit: int = 500,
    ) -> Sequence[EnrollmentRequestRow]:
        raise NotImplementedError

    def list_approved(self, *, class_ids: Sequence[int]) -> Sequence[EnrollmentRequestRow]:
        """APPROVED requests of the given classes ordered by student code."""

        raise NotImplementedError

    def count_by_status(self, *, class_id: int) -> dict[EnrollmentStatus, int]:
        raise NotImplementedError
