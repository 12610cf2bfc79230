from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, duplicate_key_as_conflict, fetchall, fetchone, optional_float
from .model import TrainingClass
from .repository import ClassRepository

_COLUMNS = "class_id, code, name, class_type, location, academic_year, latitude, longitude, created_at"


def _to_class(r: dict) -> TrainingClass:
    return TrainingClass(
        class_id=int(r["class_id"]),
        code=r["code"],
        name=r["name"],
        class_type=r["class_type"],
        location=r.get("location"),
        academic_year=str(r["academic_year"]),
        latitude=optional_float(r.get("latitude")),
        longitude=optional_float(r.get("longitude")),
        created_at=r.get("created_at"),
    )


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, class_id: int) -> Optional[TrainingClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM training_classes WHERE class_id=%s", (int(class_id),))
            r = fetchone(cur)
            return _to_class(r) if r else None

    def list_all(self) -> Sequence[TrainingClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM training_classes ORDER BY created_at DESC, class_id DESC")
            return [_to_class(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        code: str,
        name: str,
        class_type: str,
        location: Optional[str],
        academic_year: str,
        latitude: Optional[float],
        longitude: Optional[float],
        created_at: datetime,
    ) -> int:
        with duplicate_key_as_conflict("Mã lớp học đã tồn tại"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO training_classes(code, name, class_type, location, academic_year, latitude, longitude, created_at)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (code, name, class_type, location, academic_year, latitude, longitude, created_at),
                )
                return int(cur.lastrowid)

    def update(
        self,
        *,
        class_id: int,
        name: str,
        class_type: str,
        location: Optional[str],
        academic_year: str,
        latitude: Optional[float],
        longitude: Optional[float],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE training_classes
                SET name=%s, class_type=%s, location=%s, academic_year=%s, latitude=%s, longitude=%s
                WHERE class_id=%s
                """,
                (name, class_type, location, academic_year, latitude, longitude, int(class_id)),
            )
            return cur.rowcount > 0

    def delete(self, class_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM training_classes WHERE class_id=%s", (int(class_id),))
            return cur.rowcount > 0

    def has_dependents(self, class_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT
                    (SELECT COUNT(*) FROM class_sessions WHERE class_id=%s)
                    + (SELECT COUNT(*) FROM enrollment_requests WHERE class_id=%s) AS refs
                """,
                (int(class_id), int(class_id)),
            )
            r = fetchone(cur)
            return bool(r and int(r["refs"]) > 0)
