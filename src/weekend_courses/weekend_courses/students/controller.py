from __future__ import annotations

import io

from flask import Flask, request, send_file

from ..container import Container
from ..core.exceptions import DomainError, FieldValidationError
from ..core.result import OperationResult
from ..web import current_role, current_user_id, int_field, json_body, respond, staff_required, student_required, to_response


def register(app: Flask, container: Container) -> None:
    svc = container.student_service

    def _png(fn, *args):
        try:
            png = fn(*args)
        except DomainError as exc:
            return to_response(OperationResult.fail(exc))
        return send_file(io.BytesIO(png), mimetype="image/png")

    @app.route("/api/classes/<int:class_id>/students", methods=["GET"], endpoint="students_list")
    @staff_required
    def students_list(class_id: int):
        return respond(svc.list_for_class, current_role=current_role(), current_user_id=current_user_id(), class_id=class_id)

    @app.route("/api/classes/<int:class_id>/students/import", methods=["POST"], endpoint="students_import")
    @staff_required
    def students_import(class_id: int):
        def _import():
            upload = request.files.get("file")
            if upload is None or not upload.filename:
                raise FieldValidationError({"file": "Please choose a file to upload"})
            return svc.import_file(
                current_role=current_role(),
                current_user_id=current_user_id(),
                class_id=class_id,
                stream=io.BytesIO(upload.read()),
                filename=upload.filename,
            )

        return respond(_import)

    @app.route("/api/classes/<int:class_id>/auto-assign", methods=["POST"], endpoint="students_auto_assign")
    @staff_required
    def students_auto_assign(class_id: int):
        return respond(svc.auto_assign, current_role=current_role(), current_user_id=current_user_id(), class_id=class_id)

    @app.route("/api/students/<int:student_id>", methods=["GET"], endpoint="students_get")
    @staff_required
    def students_get(student_id: int):
        return respond(svc.get_student, student_id)

    @app.route("/api/students/<int:student_id>", methods=["DELETE"], endpoint="students_delete")
    @staff_required
    def students_delete(student_id: int):
        return respond(svc.soft_delete, current_role=current_role(), current_user_id=current_user_id(), student_id=student_id)

    @app.route("/api/students/<int:student_id>/schedule", methods=["GET"], endpoint="students_schedule")
    @staff_required
    def students_schedule(student_id: int):
        return respond(svc.schedule, student_id)

    @app.route("/api/students/<int:student_id>/sessions", methods=["PUT"], endpoint="students_assign_sessions")
    @staff_required
    def students_assign_sessions(student_id: int):
        data = json_body()
        return respond(
            lambda: svc.assign_sessions(
                current_role=current_role(),
                current_user_id=current_user_id(),
                student_id=student_id,
                saturday_session_id=int_field(data, "saturday_session_id"),
                sunday_session_id=int_field(data, "sunday_session_id"),
            )
        )

    @app.route("/api/students/<int:student_id>/qr.png", methods=["GET"], endpoint="students_qr")
    @staff_required
    def students_qr(student_id: int):
        return _png(svc.qr_png, student_id)

    # ===== STUDENT PORTAL (student session from /auth/student-login) =====

    @app.route("/portal", methods=["GET"], endpoint="portal_home")
    @student_required
    def portal_home():
        def _home():
            student = svc.get_student(current_user_id())
            return {"student": student, "sessions": svc.schedule(student.student_id)}

        return respond(_home)

    @app.route("/portal/qr.png", methods=["GET"], endpoint="portal_qr")
    @student_required
    def portal_qr():
        return _png(svc.qr_png, current_user_id())

    @app.route("/portal/attendance", methods=["GET"], endpoint="portal_attendance")
    @student_required
    def portal_attendance():
        return respond(container.attendance_service.history_for_student, current_user_id())
