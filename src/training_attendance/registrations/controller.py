from __future__ import annotations

from flask import Flask

from ..common.http import arg_int, current_user_id, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/registrations", methods=["POST"], endpoint="api_registration_create")
    @login_required
    def api_registration_create():
        registration = container.registration_service.register(
            student_id=current_user_id(),
            session_id=arg_int("session_id", source=json_body()) or 0,
        )
        return ok(registration, message="Đăng ký ca học thành công", status=201)

    @app.route("/api/registrations/me", methods=["GET"], endpoint="api_my_registrations")
    @login_required
    def api_my_registrations():
        return ok(container.registration_service.my_registrations(current_user_id()))
