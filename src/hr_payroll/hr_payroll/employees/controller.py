from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import admin_required, current_role, json_body, require_field
from ..container import Container
from ..core.enums import EmployeeStatus
from ..core.exceptions import ValidationError
from .model import Employee


def _employee_view(employee: Employee) -> dict:
    return {"id": employee.employee_id, **employee.to_document()}


def register(app: Flask, container: Container) -> None:
    service = container.employee_service

    @app.route("/api/employees/<employee_id>/status", methods=["PATCH"], endpoint="employee_set_status")
    @admin_required
    def employee_set_status(employee_id: str):
        data = json_body()
        try:
            status = EmployeeStatus(str(require_field(data, "status")))
        except ValueError:
            raise ValidationError(f"Unknown employee status: {data.get('status')!r}")
        employee = service.set_status(current_role=current_role(), employee_id=employee_id, status=status)
        return jsonify({"success": True, "employee": _employee_view(employee)})

    @app.route("/api/employees/<employee_id>/supervisor", methods=["PATCH"], endpoint="employee_assign_supervisor")
    @admin_required
    def employee_assign_supervisor(employee_id: str):
        data = json_body()
        supervisor_id = data.get("supervisor_id")
        employee = service.assign_supervisor(
            current_role=current_role(),
            employee_id=employee_id,
            supervisor_id=str(supervisor_id) if supervisor_id else None,
        )
        return jsonify({"success": True, "employee": _employee_view(employee)})

    @app.route("/api/employees/<employee_id>", methods=["DELETE"], endpoint="employee_hard_delete")
    @admin_required
    def employee_hard_delete(employee_id: str):
        service.hard_delete(current_role=current_role(), employee_id=employee_id)
        return jsonify({"success": True, "message": f"Employee {employee_id} deleted"})
