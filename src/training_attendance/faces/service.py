from __future__ import annotations

import logging

from ..core.constants import FACE_MATCH_THRESHOLD
from ..core.exceptions import FaceMismatchError, FaceNotRegisteredError, NotFoundError, ValidationError
from ..students.model import Student
from ..students.repository import StudentRepository
from .client import FaceMatcher
from .image_store import ImageStore
from .model import FaceMatchResult, FaceVerification

logger = logging.getLogger(__name__)


class FaceService:
    """Biometric gate for check-in/out and face registration.

    Matching itself is delegated to the remote comparator; this service only
    uploads captures, applies the score threshold and phrases the failures.
    """

    def __init__(
        self,
        students: StudentRepository,
        matcher: FaceMatcher,
        images: ImageStore,
        *,
        threshold: float = FACE_MATCH_THRESHOLD,
    ):
        self._students = students
        self._matcher = matcher
        self._images = images
        self._threshold = float(threshold)

    def verify(self, student: Student, image_base64: str, *, folder: str) -> FaceVerification:
        if not student.avatar_url:
            raise FaceNotRegisteredError("Học viên chưa có ảnh khuôn mặt đăng ký")

        image_url = self._images.upload(image_base64, folder)
        result = self._matcher.compare(student.avatar_url, image_url)

        if not result.matched or result.score < self._threshold:
            logger.warning("Face mismatch for student %s (score=%.3f)", student.student_id, result.score)
            raise FaceMismatchError(
                f"Khuôn mặt không khớp (Độ chính xác: {result.score * 100:.1f}%). "
                "Vui lòng chụp lại ảnh mới và thử lại.",
                score=result.score,
            )
        return FaceVerification(score=result.score, image_url=image_url)

    def register_face(self, *, student_id: int, selfie_url: str) -> FaceMatchResult:
        """Confirm the student's avatar against a fresh selfie and flag the face as registered."""

        student = self._students.get_by_id(int(student_id))
        if not student:
            raise NotFoundError("Không tìm thấy học viên")
        if not student.avatar_url:
            raise ValidationError("Học viên chưa có ảnh đại diện. Vui lòng tải ảnh đại diện trước.")

        result = self._matcher.compare(student.avatar_url, selfie_url)
        if result.matched:
            self._students.mark_face_registered(student.student_id)
            logger.info("Face registered for student %s", student.student_id)
        return result
