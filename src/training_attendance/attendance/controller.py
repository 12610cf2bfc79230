from __future__ import annotations

from flask import Flask

from ..common.http import (
    admin_required,
    arg_date,
    arg_float,
    arg_int,
    current_user_id,
    json_body,
    login_required,
    ok,
)
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    def _image(data: dict) -> str:
        image = data.get("image")
        if not image or not isinstance(image, str):
            raise ValidationError("Thiếu ảnh khuôn mặt")
        return image

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="api_check_in")
    @login_required
    def api_check_in():
        data = json_body()
        record = container.attendance_service.check_in(
            student_id=current_user_id(),
            image_base64=_image(data),
            session_id=arg_int("session_id", source=data),
            class_id=arg_int("class_id", source=data),
            lat=arg_float("lat", source=data),
            lng=arg_float("lng", source=data),
        )
        return ok(record, message="Check-in thành công")

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="api_check_out")
    @login_required
    def api_check_out():
        data = json_body()
        session_id = arg_int("session_id", source=data)
        if session_id is None:
            raise ValidationError("Thiếu ca học")
        record = container.attendance_service.check_out(
            student_id=current_user_id(),
            session_id=session_id,
            image_base64=_image(data),
            lat=arg_float("lat", source=data),
            lng=arg_float("lng", source=data),
        )
        return ok(record, message="Check-out thành công")

    @app.route("/api/attendance/current-session", methods=["GET"], endpoint="api_current_session")
    @login_required
    def api_current_session():
        return ok(container.attendance_service.find_current_session(current_user_id(), arg_int("class_id")))

    @app.route("/api/attendance/me", methods=["GET"], endpoint="api_my_attendance")
    @login_required
    def api_my_attendance():
        return ok(container.attendance_service.get_my_history(current_user_id()))

    @app.route("/api/attendance", methods=["GET"], endpoint="api_attendance_records")
    @admin_required
    def api_attendance_records():
        return ok(
            container.attendance_service.get_records(
                session_date=arg_date("date"),
                session_id=arg_int("session_id"),
                class_id=arg_int("class_id"),
            )
        )

    @app.route("/api/attendance/face/register", methods=["POST"], endpoint="api_register_face")
    @login_required
    def api_register_face():
        selfie_url = json_body().get("selfie_url")
        if not selfie_url:
            raise ValidationError("Thiếu ảnh selfie")
        result = container.face_service.register_face(student_id=current_user_id(), selfie_url=str(selfie_url))
        message = "Đăng ký khuôn mặt thành công" if result.matched else "Khuôn mặt không khớp với ảnh đại diện"
        return ok(result, message=message)
