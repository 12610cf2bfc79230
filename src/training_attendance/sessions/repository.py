from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Protocol, Sequence

from .model import ClassSession


class SessionRepository(Protocol):
    def get_by_id(self, session_id: int) -> Optional[ClassSession]:
        raise NotImplementedError

    def get_many(self, session_ids: Sequence[int]) -> Sequence[ClassSession]:
        raise NotImplementedError

    def count_active(self, *, class_id: int, session_date: date) -> int:
        """Number of non-deleted sessions of a class on a date."""

        raise NotImplementedError

    def create(
        self,
        *,
        class_id: int,
        session_date: date,
        name: str,
        start_time: time,
        end_time: time,
        registration_deadline: datetime,
        is_auto_selected: bool = False,
    ) -> int:
        raise NotImplementedError

    def update(
        self,
        *,
        session_id: int,
        class_id: int,
        session_date: date,
        name: str,
        start_time: time,
        end_time: time,
        registration_deadline: datetime,
    ) -> bool:
        """Also rewrites the session date held by its registrations, in one transaction.

        Raises ConflictError when a registrant already holds another session on the new date.
        """

        raise NotImplementedError

    def soft_delete(self, session_id: int) -> bool:
        raise NotImplementedError

    def list_by_date(self, *, session_date: date, class_ids: Optional[Sequence[int]] = None) -> Sequence[ClassSession]:
        """Non-deleted sessions ordered by start time."""

        raise NotImplementedError

    def list_range(
        self,
        *,
        start: date,
        end: date,
        class_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[ClassSession]:
        """Non-deleted sessions in [start, end] ordered by date then start time."""

        raise NotImplementedError
