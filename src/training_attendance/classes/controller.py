from __future__ import annotations

from flask import Flask

from ..common.http import admin_required, arg_float, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _class_fields(data: dict) -> dict:
        return {
            "name": data.get("name", ""),
            "class_type": data.get("class_type", ""),
            "academic_year": data.get("academic_year", ""),
            "location": data.get("location"),
            "latitude": arg_float("latitude", source=data),
            "longitude": arg_float("longitude", source=data),
        }

    @app.route("/api/classes", methods=["GET"], endpoint="api_classes")
    @admin_required
    def api_classes():
        return ok(container.class_service.list_classes())

    @app.route("/api/classes/available", methods=["GET"], endpoint="api_classes_available")
    @login_required
    def api_classes_available():
        return ok(container.class_service.available_classes())

    @app.route("/api/classes/<int:class_id>", methods=["GET"], endpoint="api_class_detail")
    @login_required
    def api_class_detail(class_id: int):
        return ok(container.class_service.get_class(class_id))

    @app.route("/api/classes", methods=["POST"], endpoint="api_class_create")
    @admin_required
    def api_class_create():
        created = container.class_service.create_class(**_class_fields(json_body()))
        return ok(created, message="Tạo lớp học thành công", status=201)

    @app.route("/api/classes/<int:class_id>", methods=["PUT"], endpoint="api_class_update")
    @admin_required
    def api_class_update(class_id: int):
        updated = container.class_service.update_class(class_id, **_class_fields(json_body()))
        return ok(updated, message="Cập nhật lớp học thành công")

    @app.route("/api/classes/<int:class_id>", methods=["DELETE"], endpoint="api_class_delete")
    @admin_required
    def api_class_delete(class_id: int):
        container.class_service.delete_class(class_id)
        return ok(message="Đã xóa lớp học")
