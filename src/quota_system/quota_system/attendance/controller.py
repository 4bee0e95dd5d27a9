from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import format_iso_date
from ..common.http import json_body
from ..common.validators import (
    require_actor,
    require_bool,
    require_bounded_range,
    require_iso_date,
    require_non_empty,
    require_positive_int,
)
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    attendance = container.attendance_service
    settings = container.settings

    @app.route("/quota/attendance/individual", methods=["PUT"], endpoint="attendance_individual")
    def attendance_individual():
        body = json_body()
        employee_id = require_non_empty(body.get("employeeId"), "Employee ID")
        day = require_iso_date(body.get("date"))
        has_attended = require_bool(body.get("hasAttended"), "hasAttended")

        record = attendance.set_attendance(employee_id=employee_id, day=day, has_attended=has_attended)
        return jsonify({"message": "Attendance updated successfully", "data": record.to_dict()}), 200

    @app.route("/quota/attendance/<day>", methods=["POST"], endpoint="attendance_save")
    def attendance_save(day: str):
        work_date = require_iso_date(day)
        changes = json_body().get("attendanceChanges")
        if not isinstance(changes, dict):
            raise ValidationError("Invalid attendance data")
        for key, value in changes.items():
            require_bool(value, f"Attendance for {key}")

        result = attendance.save_attendance(work_date, changes)
        return jsonify({"message": "Attendance data saved successfully", "data": result.to_dict()}), 200

    @app.route("/quota/attendance/manager-report/<day>", methods=["POST"], endpoint="attendance_manager_report")
    def attendance_manager_report(day: str):
        work_date = require_iso_date(day)
        reported_by = require_actor(json_body().get("reportedBy"), "Reported by")

        report = attendance.submit_manager_report(day=work_date, reported_by=reported_by)
        return jsonify({"message": "Manager report submitted successfully", "data": report.to_dict()}), 200

    @app.route(
        "/quota/attendance/manager-report/status/<day>",
        methods=["GET"],
        endpoint="attendance_manager_report_status",
    )
    def attendance_manager_report_status(day: str):
        status = attendance.report_status(require_iso_date(day))
        return jsonify({"data": status.to_dict()}), 200

    @app.route("/quota/attendance/range/<start>/<end>", methods=["GET"], endpoint="attendance_range")
    def attendance_range(start: str, end: str):
        start_date = require_iso_date(start, "Start date")
        end_date = require_iso_date(end, "End date")
        require_bounded_range(start_date, end_date)

        summary = attendance.attendance_range(start_date, end_date)
        return jsonify({"data": {format_iso_date(d): s.to_dict() for d, s in summary.items()}}), 200

    @app.route("/employees/<employee_id>/attendance-history", methods=["GET"], endpoint="attendance_history")
    def attendance_history(employee_id: str):
        limit = require_positive_int(request.args.get("limit"), "Limit", settings.default_history_limit)
        history = attendance.history(employee_id, limit=limit)
        return jsonify({"data": history.to_dict()}), 200
