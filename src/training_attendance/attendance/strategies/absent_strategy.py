from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class AbsentStrategy(AttendanceStrategy):
    """Showed up after the lateness window closed; recorded as absent."""

    def decide_checkin(self, *, now: datetime, session_start: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.ABSENT)
