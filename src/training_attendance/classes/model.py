from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class TrainingClass:
    """Thực thể miền (domain): Lớp học.

    `code` is immutable once issued; the other descriptive fields may change.
    """

    class_id: int
    code: str
    name: str
    class_type: str
    location: Optional[str]
    academic_year: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    created_at: Optional[datetime] = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None
