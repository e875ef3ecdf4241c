from __future__ import annotations

from dataclasses import asdict
from datetime import datetime

from flask import Flask, jsonify, request

from ..common.web import (
    admin_required,
    current_role,
    current_user_id,
    json_body,
    login_required,
    optional_arg,
    parse_date_value,
    period_from,
    require_field,
)
from ..container import Container
from ..core.enums import AttendanceLocation, AttendanceStatus, Role
from ..core.exceptions import AuthorizationError, ValidationError
from .model import AttendanceRecord


def _record_view(record: AttendanceRecord) -> dict:
    return {"id": record.record_id, "worked_hours": record.worked_hours, **record.to_document()}


def _location(value) -> AttendanceLocation:
    try:
        return AttendanceLocation(str(value or AttendanceLocation.OFFICE.value))
    except ValueError:
        raise ValidationError(f"Unknown location: {value!r}")


def _optional_datetime(value, name: str):
    if value in (None, ""):
        return None
    try:
        parsed = datetime.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(f"{name} must be an ISO date-time")
    if parsed.tzinfo is not None:
        raise ValidationError(f"{name} must be a local time without a UTC offset")
    return parsed


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    @login_required
    def attendance_check_in():
        data = request.get_json(silent=True) or {}
        record = service.check_in(current_user_id(), location=_location(data.get("location")))
        return jsonify({"success": True, "attendance": _record_view(record)}), 201

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="attendance_check_out")
    @login_required
    def attendance_check_out():
        record = service.check_out(current_user_id())
        return jsonify({"success": True, "attendance": _record_view(record)})

    @app.route("/api/attendance/manual", methods=["PUT"], endpoint="attendance_manual")
    @admin_required
    def attendance_manual():
        data = json_body()
        try:
            status = AttendanceStatus(str(require_field(data, "status")))
        except ValueError:
            raise ValidationError(f"Unknown attendance status: {data.get('status')!r}")
        record = service.manual_entry(
            current_role=current_role(),
            employee_id=str(require_field(data, "employee_id")),
            work_date=parse_date_value(require_field(data, "date"), "date"),
            status=status,
            check_in_time=_optional_datetime(data.get("check_in_time"), "check_in_time"),
            check_out_time=_optional_datetime(data.get("check_out_time"), "check_out_time"),
            location=_location(data.get("location")),
            note=data.get("note"),
        )
        return jsonify({"success": True, "attendance": _record_view(record)})

    @app.route("/api/attendance/facts", methods=["GET"], endpoint="attendance_facts")
    @login_required
    def attendance_facts():
        employee_id = optional_arg("employee_id") or current_user_id()
        if current_role() != Role.ADMIN and employee_id != current_user_id():
            raise AuthorizationError("You can only view your own attendance")
        month, year = period_from(request.args)
        facts = container.fact_aggregator.aggregate(employee_id, month, year)
        records = service.list_month(employee_id, month, year)
        return jsonify(
            {
                "success": True,
                "employee_id": employee_id,
                "month": month,
                "year": year,
                "facts": asdict(facts),
                "records": [_record_view(r) for r in records],
            }
        )
