from __future__ import annotations

from datetime import timedelta

from flask import Flask, request, session

from ..common.datetime_utils import now_local
from ..container import Container
from ..core.constants import DEFAULT_REPORT_DAYS
from ..core.enums import AttendanceStatus
from ..core.exceptions import DomainError
from ..core.result import OperationResult
from ..web import current_role, current_user_id, date_arg, enum_arg, int_field, respond, staff_required, to_response
from .export import export_filename, rows_to_csv, rows_to_json


def register(app: Flask, container: Container) -> None:
    svc = container.report_service

    def _build_report():
        args = request.args
        today = now_local().date()
        start = date_arg(args.get("start"), "start") or today - timedelta(days=DEFAULT_REPORT_DAYS)
        end = date_arg(args.get("end"), "end") or today
        # Teachers default to their own course.
        course_id = int_field(args, "course_id", required=False) or session.get("course_id")
        data = svc.build_attendance_report(
            current_role=current_role(),
            current_user_id=current_user_id(),
            start=start,
            end=end,
            course_id=course_id,
            class_id=int_field(args, "class_id", required=False),
            session_id=int_field(args, "session_id", required=False),
            status=enum_arg(AttendanceStatus, args.get("status"), "status"),
        )
        return start, end, data

    @app.route("/api/reports/attendance", methods=["GET"], endpoint="report_attendance")
    @staff_required
    def report_attendance():
        def _report():
            start, end, data = _build_report()
            return {"start": start, "end": end, "rows": data.rows, "summary": data.summary}

        return respond(_report)

    @app.route("/api/reports/attendance.<fmt>", methods=["GET"], endpoint="report_attendance_export")
    @staff_required
    def report_attendance_export(fmt: str):
        if fmt not in {"csv", "json"}:
            return to_response(OperationResult.fail(DomainError("Export format must be csv or json")))
        try:
            start, end, data = _build_report()
        except DomainError as exc:
            return to_response(OperationResult.fail(exc))

        if fmt == "csv":
            body, mimetype = rows_to_csv(data.rows), "text/csv"
        else:
            body, mimetype = rows_to_json(data.rows), "application/json"
        filename = export_filename("attendance_report", start, end, fmt)
        return app.response_class(
            body,
            mimetype=mimetype,
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
