from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import EnrollmentStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, duplicate_key_as_conflict, fetchall, fetchone, in_clause
from .model import EnrollmentRequest, EnrollmentRequestRow
from .repository import EnrollmentRepository

_ROW_SELECT = """
    SELECT
        er.request_id, er.student_id, s.student_code, s.full_name AS student_name, s.avatar_url,
        er.class_id, c.code AS class_code, c.name AS class_name,
        er.status, er.requested_at, er.reviewed_by, er.reviewed_at, er.rejection_reason
    FROM enrollment_requests er
    JOIN students s ON s.student_id = er.student_id
    JOIN training_classes c ON c.class_id = er.class_id
"""


def _to_request(r: dict) -> EnrollmentRequest:
    return EnrollmentRequest(
        request_id=int(r["request_id"]),
        student_id=int(r["student_id"]),
        class_id=int(r["class_id"]),
        status=EnrollmentStatus(r["status"]),
        requested_at=r["requested_at"],
        reviewed_by=r.get("reviewed_by"),
        reviewed_at=r.get("reviewed_at"),
        rejection_reason=r.get("rejection_reason"),
    )


def _to_row(r: dict) -> EnrollmentRequestRow:
    return EnrollmentRequestRow(
        request_id=int(r["request_id"]),
        student_id=int(r["student_id"]),
        student_code=r["student_code"],
        student_name=r["student_name"],
        class_id=int(r["class_id"]),
        class_code=r["class_code"],
        class_name=r["class_name"],
        status=EnrollmentStatus(r["status"]),
        requested_at=r["requested_at"],
        reviewed_by=r.get("reviewed_by"),
        reviewed_at=r.get("reviewed_at"),
        rejection_reason=r.get("rejection_reason"),
        avatar_url=r.get("avatar_url"),
    )


class MySQLEnrollmentRepository(EnrollmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, request_id: int) -> Optional[EnrollmentRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT request_id, student_id, class_id, status, requested_at, reviewed_by, reviewed_at, rejection_reason
                FROM enrollment_requests
                WHERE request_id=%s
                """,
                (int(request_id),),
            )
            r = fetchone(cur)
            return _to_request(r) if r else None

    def find_open(self, *, student_id: int, class_id: int) -> Optional[EnrollmentRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT request_id, student_id, class_id, status, requested_at, reviewed_by, reviewed_at, rejection_reason
                FROM enrollment_requests
                WHERE student_id=%s AND class_id=%s AND status IN ('PENDING', 'APPROVED')
                LIMIT 1
                """,
                (int(student_id), int(class_id)),
            )
            r = fetchone(cur)
            return _to_request(r) if r else None

    def create(self, *, student_id: int, class_id: int, requested_at: datetime) -> int:
        with duplicate_key_as_conflict("Bạn đã có yêu cầu đang mở cho lớp này"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO enrollment_requests(student_id, class_id, status, requested_at)
                    VALUES(%s,%s,'PENDING',%s)
                    """,
                    (int(student_id), int(class_id), requested_at),
                )
                return int(cur.lastrowid)

    def decide(
        self,
        *,
        request_id: int,
        status: EnrollmentStatus,
        reviewed_by: int,
        reviewed_at: datetime,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE enrollment_requests
                SET status=%s, reviewed_by=%s, reviewed_at=%s, rejection_reason=%s
                WHERE request_id=%s AND status='PENDING'
                """,
                (status.value, int(reviewed_by), reviewed_at, rejection_reason, int(request_id)),
            )
            return cur.rowcount > 0

    def list_rows(
        self,
        *,
        student_id: Optional[int] = None,
        class_id: Optional[int] = None,
        status: Optional[EnrollmentStatus] = None,
        oldest_first: bool = False,
        limit: int = 500,
    ) -> Sequence[EnrollmentRequestRow]:
        clauses = ["1=1"]
        params: list[object] = []

        if student_id is not None:
            clauses.append("er.student_id=%s")
            params.append(int(student_id))
        if class_id is not None:
            clauses.append("er.class_id=%s")
            params.append(int(class_id))
        if status is not None:
            clauses.append("er.status=%s")
            params.append(status.value)

        where = " AND ".join(clauses)
        order = "ASC" if oldest_first else "DESC"
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                {_ROW_SELECT}
                WHERE {where}
                ORDER BY er.requested_at {order}, er.request_id {order}
                LIMIT %s
                """,
                tuple(params),
            )
            return [_to_row(r) for r in fetchall(cur)]

    def list_approved(self, *, class_ids: Sequence[int]) -> Sequence[EnrollmentRequestRow]:
        if not class_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                {_ROW_SELECT}
                WHERE er.status='APPROVED' AND er.class_id IN ({in_clause(class_ids)})
                ORDER BY s.student_code ASC
                """,
                tuple(int(c) for c in class_ids),
            )
            return [_to_row(r) for r in fetchall(cur)]

    def count_by_status(self, *, class_id: int) -> dict[EnrollmentStatus, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT status, COUNT(*) AS total
                FROM enrollment_requests
                WHERE class_id=%s
                GROUP BY status
                """,
                (int(class_id),),
            )
            counts = {s: 0 for s in EnrollmentStatus}
            for r in fetchall(cur):
                counts[EnrollmentStatus(r["status"])] = int(r["total"])
            return counts
