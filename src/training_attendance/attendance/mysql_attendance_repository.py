from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    fetchone,
    in_clause,
    normalize_mysql_date,
    normalize_mysql_time,
    optional_float,
)
from .model import AttendanceRecord, AttendanceRow
from .repository import AttendanceRepository

_RECORD_COLUMNS = """
    attendance_id, student_id, session_id, status,
    check_in_time, check_in_lat, check_in_lng, check_in_face_score, check_in_image_url,
    check_out_time, check_out_lat, check_out_lng, check_out_face_score, check_out_image_url,
    location_note
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        student_id=int(r["student_id"]),
        session_id=int(r["session_id"]),
        status=AttendanceStatus(r["status"]),
        check_in_time=r.get("check_in_time"),
        check_in_lat=optional_float(r.get("check_in_lat")),
        check_in_lng=optional_float(r.get("check_in_lng")),
        check_in_face_score=optional_float(r.get("check_in_face_score")),
        check_in_image_url=r.get("check_in_image_url"),
        check_out_time=r.get("check_out_time"),
        check_out_lat=optional_float(r.get("check_out_lat")),
        check_out_lng=optional_float(r.get("check_out_lng")),
        check_out_face_score=optional_float(r.get("check_out_face_score")),
        check_out_image_url=r.get("check_out_image_url"),
        location_note=r.get("location_note"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_pair(self, *, student_id: int, session_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_RECORD_COLUMNS} FROM attendance_records WHERE student_id=%s AND session_id=%s",
                (int(student_id), int(session_id)),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def upsert_checkin(
        self,
        *,
        student_id: int,
        session_id: int,
        check_in_time: datetime,
        lat: Optional[float],
        lng: Optional[float],
        face_score: float,
        image_url: Optional[str],
        status: AttendanceStatus,
        location_note: Optional[str],
    ) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            # uq_attendance_pair makes this a single atomic create-or-overwrite.
            cur.execute(
                """
                INSERT INTO attendance_records(
                    student_id, session_id, check_in_time, check_in_lat, check_in_lng,
                    check_in_face_score, check_in_image_url, status, location_note
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    check_in_time=IF(check_out_time IS NULL, VALUES(check_in_time), check_in_time),
                    check_in_lat=IF(check_out_time IS NULL, VALUES(check_in_lat), check_in_lat),
                    check_in_lng=IF(check_out_time IS NULL, VALUES(check_in_lng), check_in_lng),
                    check_in_face_score=IF(check_out_time IS NULL, VALUES(check_in_face_score), check_in_face_score),
                    check_in_image_url=IF(check_out_time IS NULL, VALUES(check_in_image_url), check_in_image_url),
                    status=IF(check_out_time IS NULL, VALUES(status), status),
                    location_note=IF(check_out_time IS NULL, VALUES(location_note), location_note)
                """,
                (
                    int(student_id),
                    int(session_id),
                    check_in_time,
                    lat,
                    lng,
                    face_score,
                    image_url,
                    status.value,
                    location_note,
                ),
            )
            cur.execute(
                f"SELECT {_RECORD_COLUMNS} FROM attendance_records WHERE student_id=%s AND session_id=%s",
                (int(student_id), int(session_id)),
            )
            return _to_record(fetchone(cur))

    def mark_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        lat: Optional[float],
        lng: Optional[float],
        face_score: float,
        image_url: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, check_out_lat=%s, check_out_lng=%s,
                    check_out_face_score=%s, check_out_image_url=%s
                WHERE attendance_id=%s AND check_out_time IS NULL
                """,
                (check_out_time, lat, lng, face_score, image_url, int(attendance_id)),
            )
            return cur.rowcount > 0

    def list_rows(
        self,
        *,
        session_date: Optional[date] = None,
        session_id: Optional[int] = None,
        class_id: Optional[int] = None,
        student_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        active_sessions_only: bool = False,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceRow]:
        clauses = ["1=1"]
        params: list[object] = []

        if session_date is not None:
            clauses.append("cs.session_date=%s")
            params.append(session_date)
        if session_id is not None:
            clauses.append("ar.session_id=%s")
            params.append(int(session_id))
        if class_id is not None:
            clauses.append("cs.class_id=%s")
            params.append(int(class_id))
        if student_id is not None:
            clauses.append("ar.student_id=%s")
            params.append(int(student_id))
        if start is not None:
            clauses.append("cs.session_date >= %s")
            params.append(start)
        if end is not None:
            clauses.append("cs.session_date <= %s")
            params.append(end)
        if active_sessions_only:
            clauses.append("cs.is_deleted=0")

        where = " AND ".join(clauses)
        limit_sql = ""
        if limit is not None:
            limit_sql = "LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    ar.attendance_id, ar.student_id, s.student_code, s.full_name, s.avatar_url,
                    ar.session_id, cs.class_id, cs.session_date, cs.name AS session_name,
                    cs.start_time, cs.end_time, ar.status,
                    ar.check_in_time, ar.check_in_lat, ar.check_in_lng, ar.check_in_face_score,
                    ar.check_out_time, ar.check_out_lat, ar.check_out_lng, ar.check_out_face_score,
                    ar.location_note
                FROM attendance_records ar
                JOIN students s ON s.student_id = ar.student_id
                JOIN class_sessions cs ON cs.session_id = ar.session_id
                WHERE {where}
                ORDER BY ar.check_in_time DESC, ar.attendance_id DESC
                {limit_sql}
                """,
                tuple(params),
            )
            return [
                AttendanceRow(
                    attendance_id=int(r["attendance_id"]),
                    student_id=int(r["student_id"]),
                    student_code=r["student_code"],
                    full_name=r["full_name"],
                    session_id=int(r["session_id"]),
                    class_id=int(r["class_id"]),
                    session_date=normalize_mysql_date(r["session_date"]),
                    session_name=r["session_name"],
                    start_time=normalize_mysql_time(r["start_time"]),
                    end_time=normalize_mysql_time(r["end_time"]),
                    status=AttendanceStatus(r["status"]),
                    check_in_time=r.get("check_in_time"),
                    check_in_lat=optional_float(r.get("check_in_lat")),
                    check_in_lng=optional_float(r.get("check_in_lng")),
                    check_in_face_score=optional_float(r.get("check_in_face_score")),
                    check_out_time=r.get("check_out_time"),
                    check_out_lat=optional_float(r.get("check_out_lat")),
                    check_out_lng=optional_float(r.get("check_out_lng")),
                    check_out_face_score=optional_float(r.get("check_out_face_score")),
                    location_note=r.get("location_note"),
                    avatar_url=r.get("avatar_url"),
                )
                for r in fetchall(cur)
            ]

    def list_for_sessions(self, session_ids: Sequence[int]) -> Sequence[AttendanceRecord]:
        if not session_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_RECORD_COLUMNS} FROM attendance_records WHERE session_id IN ({in_clause(session_ids)})",
                tuple(int(s) for s in session_ids),
            )
            return [_to_record(r) for r in fetchall(cur)]
