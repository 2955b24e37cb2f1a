from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import now_local
from ..container import Container
from ..core.enums import AttendanceStatus
from ..web import current_role, current_user_id, date_arg, enum_arg, int_field, json_body, respond, staff_required
from .service import ScanOutcome


def scan_view(outcome: ScanOutcome) -> dict:
    return {
        "status": outcome.status.value,
        "message": outcome.message,
        "record": outcome.record,
        "student": {
            "student_id": outcome.student.student_id,
            "student_number": outcome.student.student_number,
            "full_name": outcome.student.full_name,
        },
    }


def register(app: Flask, container: Container) -> None:
    svc = container.attendance_service

    def _day(value, name: str = "date"):
        return date_arg(value, name) or now_local().date()

    @app.route("/api/attendance/scan", methods=["POST"], endpoint="attendance_scan")
    @staff_required
    def attendance_scan():
        """Mark attendance from a decoded QR payload."""
        data = json_body()
        return respond(
            lambda: scan_view(
                svc.mark_from_scan(
                    data.get("qr_data"),
                    int_field(data, "session_id"),
                    current_user_id(),
                    current_role=current_role(),
                )
            )
        )

    @app.route("/api/attendance/manual", methods=["POST"], endpoint="attendance_manual")
    @staff_required
    def attendance_manual():
        data = json_body()
        return respond(
            lambda: svc.mark_manual(
                current_role=current_role(),
                current_user_id=current_user_id(),
                student_id=int_field(data, "student_id"),
                session_id=int_field(data, "session_id"),
                status=enum_arg(AttendanceStatus, data.get("status"), "status") or AttendanceStatus.PRESENT,
                attend_date=date_arg(data.get("date"), "date"),
            )
        )

    @app.route("/api/sessions/<int:session_id>/sweep", methods=["POST"], endpoint="attendance_sweep_session")
    @staff_required
    def attendance_sweep_session(session_id: int):
        data = json_body()
        return respond(
            lambda: {
                "marked_absent": svc.sweep_absences(
                    session_id,
                    _day(data.get("date")),
                    current_role=current_role(),
                    current_user_id=current_user_id(),
                )
            }
        )

    @app.route("/api/classes/<int:class_id>/sweep", methods=["POST"], endpoint="attendance_sweep_class")
    @staff_required
    def attendance_sweep_class(class_id: int):
        data = json_body()
        return respond(
            lambda: {
                "marked_absent": svc.sweep_class_absences(
                    class_id,
                    _day(data.get("date")),
                    current_role=current_role(),
                    current_user_id=current_user_id(),
                )
            }
        )

    @app.route("/api/sessions/<int:session_id>/attendance", methods=["GET"], endpoint="attendance_for_session")
    @staff_required
    def attendance_for_session(session_id: int):
        return respond(
            lambda: svc.list_for_session(
                current_role=current_role(),
                current_user_id=current_user_id(),
                session_id=session_id,
                attend_date=_day(request.args.get("date")),
            )
        )

    @app.route("/api/sessions/<int:session_id>/stats", methods=["GET"], endpoint="attendance_stats")
    @staff_required
    def attendance_stats(session_id: int):
        return respond(
            lambda: svc.session_stats(
                current_role=current_role(),
                current_user_id=current_user_id(),
                session_id=session_id,
                attend_date=_day(request.args.get("date")),
            )
        )

    @app.route("/api/students/<int:student_id>/attendance", methods=["GET"], endpoint="attendance_history")
    @staff_required
    def attendance_history(student_id: int):
        return respond(svc.history_for_student, student_id)
