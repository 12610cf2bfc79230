from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from ..core.constants import LATE_WINDOW_MINUTES
from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.on_time_strategy import OnTimeStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    late_window_minutes: int = LATE_WINDOW_MINUTES

    def for_checkin(self, *, now: datetime, session_start: datetime) -> AttendanceStrategy:
        if now <= session_start:
            return OnTimeStrategy()
        if now <= session_start + timedelta(minutes=self.late_window_minutes):
            return LateStrategy()
        return AbsentStrategy()
