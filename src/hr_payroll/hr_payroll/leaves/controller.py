from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.validators import require_bool, require_int_in_range
from ..common.web import (
    current_role,
    current_user_id,
    json_body,
    login_required,
    optional_arg,
    parse_date_value,
    require_field,
)
from ..container import Container
from ..core.enums import LeaveStatus, LeaveType, Role
from ..core.exceptions import AuthorizationError, ValidationError


def _leave_type(value) -> LeaveType:
    try:
        return LeaveType(str(value))
    except ValueError:
        raise ValidationError(f"Unknown leave type: {value!r}")


def _leave_status(value) -> LeaveStatus:
    try:
        return LeaveStatus(str(value))
    except ValueError:
        raise ValidationError(f"Unknown leave status: {value!r}")


def register(app: Flask, container: Container) -> None:
    service = container.leave_service

    @app.route("/api/leave-requests", methods=["POST"], endpoint="leave_submit")
    @login_required
    def leave_submit():
        data = json_body()
        leave = service.submit(
            current_role=current_role(),
            current_user_id=current_user_id(),
            employee_id=str(data.get("employee_id") or current_user_id()),
            leave_type=_leave_type(require_field(data, "leave_type")),
            start_date=parse_date_value(require_field(data, "start_date"), "start_date"),
            end_date=parse_date_value(require_field(data, "end_date"), "end_date"),
            reason=data.get("reason") or "",
            supporting_document_url=data.get("supporting_document_url"),
        )
        return jsonify({"success": True, "leave_request": leave.to_view()}), 201

    @app.route("/api/leave-requests", methods=["GET"], endpoint="leave_list")
    @login_required
    def leave_list():
        status = optional_arg("status")
        employee_id = optional_arg("employee_id")
        supervisor_id = optional_arg("supervisor_id")

        # Non-admins see their own requests or the ones they supervise.
        if current_role() != Role.ADMIN:
            me = current_user_id()
            if supervisor_id and supervisor_id != me:
                raise AuthorizationError("You can only list requests you supervise")
            if not supervisor_id:
                if employee_id and employee_id != me:
                    raise AuthorizationError("You can only list your own requests")
                employee_id = me

        rows = service.list_requests(
            status=_leave_status(status) if status else None,
            employee_id=employee_id,
            supervisor_id=supervisor_id,
        )
        return jsonify({"success": True, "leave_requests": [r.to_view() for r in rows]})

    @app.route("/api/leave-requests/<request_id>/supervisor-decision", methods=["POST"], endpoint="leave_supervisor_decision")
    @login_required
    def leave_supervisor_decision(request_id: str):
        data = json_body()
        leave = service.supervisor_decide(
            current_role=current_role(),
            current_user_id=current_user_id(),
            request_id=request_id,
            approve=require_bool(data.get("approve"), "approve"),
            reason=data.get("reason"),
        )
        return jsonify({"success": True, "leave_request": leave.to_view()})

    @app.route("/api/leave-requests/<request_id>/admin-decision", methods=["POST"], endpoint="leave_admin_decision")
    @login_required
    def leave_admin_decision(request_id: str):
        data = json_body()
        leave = service.admin_decide(
            current_role=current_role(),
            current_user_id=current_user_id(),
            request_id=request_id,
            approve=require_bool(data.get("approve"), "approve"),
            reason=data.get("reason"),
        )
        return jsonify({"success": True, "leave_request": leave.to_view()})

    @app.route("/api/leave-requests/<request_id>/appeal", methods=["POST"], endpoint="leave_appeal")
    @login_required
    def leave_appeal(request_id: str):
        data = json_body()
        leave = service.appeal(
            current_user_id=current_user_id(),
            request_id=request_id,
            message=data.get("message") or "",
        )
        return jsonify({"success": True, "leave_request": leave.to_view()})

    @app.route("/api/leave-requests/<request_id>/appeal-review", methods=["POST"], endpoint="leave_appeal_review")
    @login_required
    def leave_appeal_review(request_id: str):
        data = json_body()
        leave = service.review_appeal(
            current_role=current_role(),
            current_user_id=current_user_id(),
            request_id=request_id,
            accept=require_bool(data.get("accept"), "accept"),
            reason=data.get("reason"),
        )
        return jsonify({"success": True, "leave_request": leave.to_view()})

    @app.route("/api/leave-requests/appeals/count", methods=["GET"], endpoint="leave_appeal_count")
    @login_required
    def leave_appeal_count():
        supervisor_id = optional_arg("supervisor_id")
        if current_role() != Role.ADMIN:
            supervisor_id = current_user_id()
        return jsonify({"success": True, "count": service.count_unreviewed_appeals(supervisor_id)})

    @app.route("/api/leave-balances", methods=["GET"], endpoint="leave_balances")
    @login_required
    def leave_balances():
        employee_id = optional_arg("employee_id") or current_user_id()
        if current_role() != Role.ADMIN and employee_id != current_user_id():
            raise AuthorizationError("You can only view your own leave balance")
        year_arg = optional_arg("year")
        year = container.clock().year
        if year_arg:
            year = require_int_in_range(year_arg, "year", minimum=1900, maximum=9999)
        balance = container.fact_aggregator.leave_balance(employee_id, year)
        return jsonify({"success": True, "balance": balance.to_dict()})
