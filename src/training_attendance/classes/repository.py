from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import TrainingClass


class ClassRepository(Protocol):
    """Giao diện repository cho TrainingClass.

    Lưu ý (DIP): tầng service phụ thuộc vào interface này, không phụ thuộc trực tiếp DB cụ thể.
    """

    def get_by_id(self, class_id: int) -> Optional[TrainingClass]:
        raise NotImplementedError

    def list_all(self) -> Sequence[TrainingClass]:
        """Newest first."""

        raise NotImplementedError

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
        raise NotImplementedError

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
        raise NotImplementedError

    def delete(self, class_id: int) -> bool:
        raise NotImplementedError

    def has_dependents(self, class_id: int) -> bool:
        """True while sessions or enrollment requests still reference the class."""

        raise NotImplementedError
