from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Vai trò người dùng dùng cho phân quyền ở tầng HTTP."""

    ADMIN = "ADMIN"
    STUDENT = "STUDENT"


class AttendanceStatus(str, Enum):
    """Trạng thái điểm danh lưu trong CSDL."""

    PRESENT = "PRESENT"
    LATE = "LATE"
    ABSENT = "ABSENT"


class EnrollmentStatus(str, Enum):
    """Trạng thái luồng duyệt yêu cầu vào lớp."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class DayStatus(str, Enum):
    """Ô của ma trận điểm danh (học viên x ngày)."""

    PRESENT = "PRESENT"
    LATE = "LATE"
    ABSENT = "ABSENT"
    NO_SESSION = "NO_SESSION"
