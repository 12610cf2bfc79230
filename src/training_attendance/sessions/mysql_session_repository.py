from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    duplicate_key_as_conflict,
    fetchall,
    fetchone,
    in_clause,
    normalize_mysql_date,
    normalize_mysql_time,
)
from .model import ClassSession
from .repository import SessionRepository

_COLUMNS = (
    "session_id, class_id, session_date, name, start_time, end_time, "
    "registration_deadline, is_auto_selected, is_deleted"
)


def _to_session(r: dict) -> ClassSession:
    return ClassSession(
        session_id=int(r["session_id"]),
        class_id=int(r["class_id"]),
        session_date=normalize_mysql_date(r["session_date"]),
        name=r["name"],
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        registration_deadline=r["registration_deadline"],
        is_auto_selected=bool(r.get("is_auto_selected", False)),
        is_deleted=bool(r.get("is_deleted", False)),
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, session_id: int) -> Optional[ClassSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM class_sessions WHERE session_id=%s", (int(session_id),))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def get_many(self, session_ids: Sequence[int]) -> Sequence[ClassSession]:
        if not session_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM class_sessions WHERE session_id IN ({in_clause(session_ids)})",
                tuple(int(s) for s in session_ids),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def count_active(self, *, class_id: int, session_date: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS total
                FROM class_sessions
                WHERE class_id=%s AND session_date=%s AND is_deleted=0
                """,
                (int(class_id), session_date),
            )
            r = fetchone(cur)
            return int(r["total"]) if r else 0

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO class_sessions(class_id, session_date, name, start_time, end_time, registration_deadline, is_auto_selected)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(class_id), session_date, name, start_time, end_time, registration_deadline, int(is_auto_selected)),
            )
            return int(cur.lastrowid)

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
        with duplicate_key_as_conflict("Có học viên đã đăng ký ca học khác vào ngày này, không thể dời ca học"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    UPDATE class_sessions
                    SET class_id=%s, session_date=%s, name=%s, start_time=%s, end_time=%s, registration_deadline=%s
                    WHERE session_id=%s
                    """,
                    (int(class_id), session_date, name, start_time, end_time, registration_deadline, int(session_id)),
                )
                updated = cur.rowcount > 0
                # uq_registration_day rejects the move when a registrant is already booked that day.
                cur.execute(
                    "UPDATE session_registrations SET session_date=%s WHERE session_id=%s",
                    (session_date, int(session_id)),
                )
                return updated

    def soft_delete(self, session_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE class_sessions SET is_deleted=1 WHERE session_id=%s", (int(session_id),))
            return cur.rowcount > 0

    def list_by_date(self, *, session_date: date, class_ids: Optional[Sequence[int]] = None) -> Sequence[ClassSession]:
        return self.list_range(start=session_date, end=session_date, class_ids=class_ids)

    def list_range(
        self,
        *,
        start: date,
        end: date,
        class_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[ClassSession]:
        clauses = ["session_date BETWEEN %s AND %s", "is_deleted=0"]
        params: list[object] = [start, end]

        if class_ids is not None:
            if not class_ids:
                return []
            clauses.append(f"class_id IN ({in_clause(class_ids)})")
            params.extend(int(c) for c in class_ids)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM class_sessions
                WHERE {where}
                ORDER BY session_date ASC, start_time ASC, session_id ASC
                """,
                tuple(params),
            )
            return [_to_session(r) for r in fetchall(cur)]
