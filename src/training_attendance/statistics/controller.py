from __future__ import annotations

from datetime import timedelta

from flask import Flask

from ..common.http import admin_required, arg_date, arg_int, ok
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    def _range():
        today = container.clock().date()
        start = arg_date("start_date", default=today - timedelta(days=6))
        end = arg_date("end_date", default=today)
        return start, end

    @app.route("/api/statistics/overview", methods=["GET"], endpoint="api_stats_overview")
    @admin_required
    def api_stats_overview():
        start, end = _range()
        return ok(container.statistics_service.overview(start, end, arg_int("class_id")))

    @app.route("/api/statistics/matrix", methods=["GET"], endpoint="api_stats_matrix")
    @admin_required
    def api_stats_matrix():
        class_id = arg_int("class_id")
        if class_id is None:
            raise ValidationError("Thiếu tham số class_id")
        start, end = _range()
        return ok(container.statistics_service.attendance_matrix(start, end, class_id))

    @app.route("/api/statistics/weekly-absence", methods=["GET"], endpoint="api_stats_weekly_absence")
    @admin_required
    def api_stats_weekly_absence():
        start, end = _range()
        return ok(container.statistics_service.weekly_absence(start, end, arg_int("class_id")))

    @app.route("/api/statistics/far-check-ins", methods=["GET"], endpoint="api_stats_far_check_ins")
    @admin_required
    def api_stats_far_check_ins():
        start, end = _range()
        return ok(container.statistics_service.far_check_in_details(start, end, arg_int("class_id")))

    @app.route("/api/statistics/missing-check-ins", methods=["GET"], endpoint="api_stats_missing_check_ins")
    @admin_required
    def api_stats_missing_check_ins():
        start, end = _range()
        return ok(container.statistics_service.missing_check_ins(start, end, arg_int("class_id")))
