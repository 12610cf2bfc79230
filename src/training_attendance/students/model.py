from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Student:
    """Hồ sơ học viên (reference data, owned outside the attendance core)."""

    student_id: int
    student_code: str
    full_name: str
    avatar_url: Optional[str] = None
    face_registered: bool = False
