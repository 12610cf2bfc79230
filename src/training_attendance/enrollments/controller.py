from __future__ import annotations

from flask import Flask, request

from ..common.http import admin_required, arg_int, current_user_id, json_body, login_required, ok
from ..common.validators import require_non_empty
from ..container import Container
from ..core.enums import EnrollmentStatus


def register(app: Flask, container: Container) -> None:
    @app.route("/api/enrollments", methods=["POST"], endpoint="api_enrollment_create")
    @login_required
    def api_enrollment_create():
        created = container.enrollment_service.create_request(
            student_id=current_user_id(),
            class_id=arg_int("class_id", source=json_body()) or 0,
        )
        return ok(created, message="Đã gửi yêu cầu tham gia lớp", status=201)

    @app.route("/api/enrollments/me", methods=["GET"], endpoint="api_my_enrollments")
    @login_required
    def api_my_enrollments():
        return ok(container.enrollment_service.my_requests(current_user_id()))

    @app.route("/api/enrollments/my-classes", methods=["GET"], endpoint="api_my_classes")
    @login_required
    def api_my_classes():
        return ok(container.enrollment_service.my_enrolled_classes(current_user_id()))

    @app.route("/api/enrollments", methods=["GET"], endpoint="api_enrollments")
    @admin_required
    def api_enrollments():
        return ok(
            container.enrollment_service.all_requests(
                class_id=arg_int("class_id"),
                status=request.args.get("status") or None,
            )
        )

    @app.route("/api/enrollments/pending", methods=["GET"], endpoint="api_enrollments_pending")
    @admin_required
    def api_enrollments_pending():
        return ok(container.enrollment_service.pending_requests(arg_int("class_id")))

    @app.route("/api/enrollments/stats/<int:class_id>", methods=["GET"], endpoint="api_enrollment_stats")
    @admin_required
    def api_enrollment_stats(class_id: int):
        return ok(container.enrollment_service.class_stats(class_id))

    @app.route("/api/enrollments/<int:request_id>/review", methods=["POST"], endpoint="api_enrollment_review")
    @admin_required
    def api_enrollment_review(request_id: int):
        data = json_body()
        decision = str(data.get("decision", ""))
        reason = data.get("reason")
        if decision == EnrollmentStatus.REJECTED.value:
            reason = require_non_empty(str(reason or ""), "Lý do từ chối")
        reviewed = container.enrollment_service.review(
            request_id=request_id,
            reviewer_id=current_user_id(),
            decision=decision,
            reason=reason,
        )
        return ok(reviewed, message="Đã xử lý yêu cầu")
