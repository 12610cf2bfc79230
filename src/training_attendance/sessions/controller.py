from __future__ import annotations

from flask import Flask

from ..common.http import admin_required, arg_date, arg_int, json_body, login_required, ok
from ..container import Container
from ..core.exceptions import ValidationError
from .model import SessionTemplate


def register(app: Flask, container: Container) -> None:
    @app.route("/api/sessions", methods=["GET"], endpoint="api_sessions")
    @login_required
    def api_sessions():
        day = arg_date("date") or container.clock().date()
        return ok(container.session_service.list_by_date(day, arg_int("class_id")))

    @app.route("/api/sessions/today", methods=["GET"], endpoint="api_sessions_today")
    @login_required
    def api_sessions_today():
        return ok(container.session_service.list_today(arg_int("class_id")))

    @app.route("/api/sessions/<int:session_id>", methods=["GET"], endpoint="api_session_detail")
    @login_required
    def api_session_detail(session_id: int):
        return ok(container.session_service.get_session(session_id))

    @app.route("/api/sessions", methods=["POST"], endpoint="api_session_create")
    @admin_required
    def api_session_create():
        data = json_body()
        created = container.session_service.create_session(
            class_id=arg_int("class_id", source=data) or 0,
            session_date=data.get("date", ""),
            name=data.get("name", ""),
            start_time=data.get("start_time", ""),
            end_time=data.get("end_time", ""),
            is_auto_selected=bool(data.get("is_auto_selected", False)),
        )
        return ok(created, message="Tạo ca học thành công", status=201)

    @app.route("/api/sessions/bulk", methods=["POST"], endpoint="api_session_bulk_create")
    @admin_required
    def api_session_bulk_create():
        data = json_body()
        raw_templates = data.get("sessions") or []
        if not isinstance(raw_templates, list):
            raise ValidationError("Danh sách ca học không hợp lệ")

        created = container.session_service.bulk_create_sessions(
            class_id=arg_int("class_id", source=data) or 0,
            start_date=data.get("start_date", ""),
            end_date=data.get("end_date", ""),
            templates=[
                SessionTemplate(
                    name=str(t.get("name", "")),
                    start_time=str(t.get("start_time", "")),
                    end_time=str(t.get("end_time", "")),
                )
                for t in raw_templates
                if isinstance(t, dict)
            ],
            exclude_saturday=bool(data.get("exclude_saturday", False)),
            exclude_weekends=bool(data.get("exclude_weekends", False)),
        )
        return ok(created, message=f"Đã tạo {len(created)} ca học", status=201)

    @app.route("/api/sessions/<int:session_id>", methods=["PUT"], endpoint="api_session_update")
    @admin_required
    def api_session_update(session_id: int):
        data = json_body()
        updated = container.session_service.update_session(
            session_id,
            class_id=arg_int("class_id", source=data) or 0,
            session_date=data.get("date", ""),
            name=data.get("name", ""),
            start_time=data.get("start_time", ""),
            end_time=data.get("end_time", ""),
        )
        return ok(updated, message="Cập nhật ca học thành công")

    @app.route("/api/sessions/<int:session_id>", methods=["DELETE"], endpoint="api_session_delete")
    @admin_required
    def api_session_delete(session_id: int):
        container.session_service.soft_delete_session(session_id)
        return ok(message="Đã xóa ca học")
