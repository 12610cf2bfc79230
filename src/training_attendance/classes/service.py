from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Optional

from ..common.datetime_utils import Clock, now_local
from ..common.validators import optional_text, require_non_empty
from ..core.enums import EnrollmentStatus
from ..core.exceptions import ConflictError, NotFoundError
from ..enrollments.repository import EnrollmentRepository
from .model import TrainingClass
from .repository import ClassRepository

logger = logging.getLogger(__name__)


class ClassService:
    def __init__(self, classes: ClassRepository, enrollments: EnrollmentRepository, *, clock: Clock = now_local):
        self._classes = classes
        self._enrollments = enrollments
        self._clock = clock

    def get_class(self, class_id: int) -> TrainingClass:
        training_class = self._classes.get_by_id(int(class_id))
        if not training_class:
            raise NotFoundError("Không tìm thấy lớp học")
        return training_class

    def list_classes(self) -> list[dict]:
        """Admin view: newest first with the number of pending enrollment requests."""

        out = []
        for c in self._classes.list_all():
            counts = self._enrollments.count_by_status(class_id=c.class_id)
            out.append({**asdict(c), "pending_count": counts.get(EnrollmentStatus.PENDING, 0)})
        return out

    def available_classes(self) -> list[dict]:
        """Student view: academic year desc, then name, with approved student count."""

        out = []
        for c in self._classes.list_all():
            counts = self._enrollments.count_by_status(class_id=c.class_id)
            out.append({**asdict(c), "student_count": counts.get(EnrollmentStatus.APPROVED, 0)})
        out.sort(key=lambda x: x["name"])
        out.sort(key=lambda x: x["academic_year"], reverse=True)
        return out

    def create_class(
        self,
        *,
        name: str,
        class_type: str,
        academic_year: str,
        location: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> TrainingClass:
        now = self._clock()
        # TC + last 6 digits of the timestamp
        code = f"TC{int(now.timestamp() * 1000) % 1_000_000:06d}"
        class_id = self._classes.create(
            code=code,
            name=require_non_empty(name, "Tên lớp học"),
            class_type=require_non_empty(class_type, "Loại lớp học"),
            location=optional_text(location),
            academic_year=require_non_empty(str(academic_year), "Năm học"),
            latitude=latitude,
            longitude=longitude,
            created_at=now,
        )
        logger.info("Created training class %s (%s)", class_id, code)
        return self.get_class(class_id)

    def update_class(
        self,
        class_id: int,
        *,
        name: str,
        class_type: str,
        academic_year: str,
        location: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> TrainingClass:
        self.get_class(class_id)
        self._classes.update(
            class_id=int(class_id),
            name=require_non_empty(name, "Tên lớp học"),
            class_type=require_non_empty(class_type, "Loại lớp học"),
            location=optional_text(location),
            academic_year=require_non_empty(str(academic_year), "Năm học"),
            latitude=latitude,
            longitude=longitude,
        )
        return self.get_class(class_id)

    def delete_class(self, class_id: int) -> None:
        self.get_class(class_id)
        if self._classes.has_dependents(int(class_id)):
            raise ConflictError("Lớp học còn ca học hoặc yêu cầu tham gia, không thể xóa")
        self._classes.delete(int(class_id))
        logger.info("Deleted training class %s", class_id)
