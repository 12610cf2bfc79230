from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, duplicate_key_as_conflict, fetchall, fetchone, normalize_mysql_date
from .model import SessionRegistration
from .repository import RegistrationRepository

# session_date is read from the session so edits to the session are seen at once.
_COLUMNS = "sr.registration_id, sr.student_id, sr.session_id, cs.session_date, sr.registered_at"
_FROM = "session_registrations sr JOIN class_sessions cs ON cs.session_id = sr.session_id"


def _to_registration(r: dict) -> SessionRegistration:
    return SessionRegistration(
        registration_id=int(r["registration_id"]),
        student_id=int(r["student_id"]),
        session_id=int(r["session_id"]),
        session_date=normalize_mysql_date(r["session_date"]),
        registered_at=r["registered_at"],
    )


class MySQLRegistrationRepository(RegistrationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, *, student_id: int, session_id: int) -> Optional[SessionRegistration]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM {_FROM} WHERE sr.student_id=%s AND sr.session_id=%s",
                (int(student_id), int(session_id)),
            )
            r = fetchone(cur)
            return _to_registration(r) if r else None

    def find_on_date(self, *, student_id: int, session_date: date) -> Optional[SessionRegistration]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM {_FROM} WHERE sr.student_id=%s AND cs.session_date=%s",
                (int(student_id), session_date),
            )
            r = fetchone(cur)
            return _to_registration(r) if r else None

    def create(self, *, student_id: int, session_id: int, session_date: date, registered_at: datetime) -> int:
        with duplicate_key_as_conflict("Bạn chỉ được đăng ký 1 ca học mỗi ngày"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO session_registrations(student_id, session_id, session_date, registered_at)
                    VALUES(%s,%s,%s,%s)
                    """,
                    (int(student_id), int(session_id), session_date, registered_at),
                )
                return int(cur.lastrowid)

    def list_for_student(self, student_id: int) -> Sequence[SessionRegistration]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM {_FROM}
                WHERE sr.student_id=%s
                ORDER BY cs.session_date DESC, sr.registered_at DESC
                """,
                (int(student_id),),
            )
            return [_to_registration(r) for r in fetchall(cur)]
