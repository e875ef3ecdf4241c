from __future__ import annotations

import csv
import io

from flask import Flask, jsonify, request

from ..common.web import admin_required, current_role, current_user_id, json_body, period_from, require_field
from ..container import Container
from ..core.enums import PayrollAction
from ..core.exceptions import ValidationError
from .service import EXPORT_COLUMNS


def _record_ids(data: dict) -> list[str]:
    ids = data.get("record_ids")
    if not isinstance(ids, list) or not ids:
        raise ValidationError("record_ids must be a non-empty list")
    return [str(i) for i in ids]


def register(app: Flask, container: Container) -> None:
    service = container.payroll_service

    def _write_report_csv(*, rows: list[dict], filename: str):
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=EXPORT_COLUMNS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/payroll/generate", methods=["POST"], endpoint="payroll_generate")
    @admin_required
    def payroll_generate():
        month, year = period_from(json_body())
        outcomes = service.generate(current_role=current_role(), month=month, year=year)
        return jsonify({"success": True, "outcomes": [o.to_dict() for o in outcomes]})

    @app.route("/api/payroll", methods=["GET"], endpoint="payroll_preview")
    @admin_required
    def payroll_preview():
        month, year = period_from(request.args)
        return jsonify({"success": True, "records": service.preview(month, year)})

    @app.route("/api/payroll/field", methods=["PATCH"], endpoint="payroll_update_field")
    @admin_required
    def payroll_update_field():
        data = json_body()
        month = year = None
        if not data.get("record_id"):
            month, year = period_from(data)
        record = service.update_field(
            current_role=current_role(),
            field=str(require_field(data, "field")),
            value=data.get("value"),
            record_id=data.get("record_id"),
            employee_id=str(data["employee_id"]) if data.get("employee_id") else None,
            month=month,
            year=year,
        )
        return jsonify({"success": True, "record": record.to_view()})

    @app.route("/api/payroll/decide", methods=["POST"], endpoint="payroll_decide")
    @admin_required
    def payroll_decide():
        data = json_body()
        try:
            action = PayrollAction(str(require_field(data, "action")))
        except ValueError:
            raise ValidationError("action must be 'approve' or 'reject'")
        outcomes = service.bulk_decide(
            current_role=current_role(),
            record_ids=_record_ids(data),
            action=action,
            approver_id=current_user_id(),
        )
        return jsonify({"success": True, "outcomes": [o.to_dict() for o in outcomes]})

    @app.route("/api/payroll/mark-paid", methods=["POST"], endpoint="payroll_mark_paid")
    @admin_required
    def payroll_mark_paid():
        outcomes = service.mark_paid(current_role=current_role(), record_ids=_record_ids(json_body()))
        return jsonify({"success": True, "outcomes": [o.to_dict() for o in outcomes]})

    @app.route("/api/payroll/export", methods=["GET"], endpoint="payroll_export")
    @admin_required
    def payroll_export():
        month, year = period_from(request.args)
        rows = service.export_rows(month, year)
        return _write_report_csv(rows=rows, filename=f"payroll_{year}_{month:02d}.csv")

    @app.route("/api/payroll/settings", methods=["GET"], endpoint="payroll_settings_get")
    @admin_required
    def payroll_settings_get():
        return jsonify({"success": True, "settings": service.get_settings().to_values()})

    @app.route("/api/payroll/settings", methods=["PUT"], endpoint="payroll_settings_put")
    @admin_required
    def payroll_settings_put():
        settings = service.update_settings(current_role=current_role(), values=json_body())
        return jsonify({"success": True, "settings": settings.to_values()})
