from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import EnrollmentStatus


@dataclass(frozen=True)
class EnrollmentRequest:
    """Yêu cầu tham gia lớp: PENDING -> APPROVED | REJECTED (terminal)."""

    request_id: int
    student_id: int
    class_id: int
    status: EnrollmentStatus
    requested_at: datetime
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None


@dataclass(frozen=True)
class EnrollmentRequestRow:
    """Read-model joined with student and class summaries (listings, reports)."""

    request_id: int
    student_id: int
    student_code: str
    student_name: str
    class_id: int
    class_code: str
    class_name: str
    status: EnrollmentStatus
    requested_at: datetime
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    avatar_url: Optional[str] = None

    @property
    def enrolled_on(self) -> date:
        """Day the student joined: approval time, else request time."""

        return (self.reviewed_at or self.requested_at).date()
