from __future__ import annotations

from flask import Flask, request

from ..container import Container
from ..core.enums import RequestStatus
from ..web import current_role, current_user_id, enum_arg, int_field, json_body, respond, staff_required, student_required


def register(app: Flask, container: Container) -> None:
    svc = container.reassignment_service

    # ===== STUDENT PORTAL =====

    @app.route("/portal/reassignments", methods=["GET"], endpoint="portal_reassignments")
    @student_required
    def portal_reassignments():
        return respond(svc.list_for_student, current_user_id())

    @app.route("/portal/reassignments/options", methods=["GET"], endpoint="portal_reassignment_options")
    @student_required
    def portal_reassignment_options():
        return respond(svc.reassignment_options, current_user_id())

    @app.route("/portal/reassignments", methods=["POST"], endpoint="portal_request_reassignment")
    @student_required
    def portal_request_reassignment():
        data = json_body()
        return respond(
            lambda: svc.request_reassignment(
                student_id=current_user_id(),
                from_session_id=int_field(data, "from_session_id"),
                to_session_id=int_field(data, "to_session_id"),
                reason=data.get("reason"),
            ),
            success_status=201,
        )

    @app.route("/portal/reassignments/<int:request_id>", methods=["DELETE"], endpoint="portal_cancel_reassignment")
    @student_required
    def portal_cancel_reassignment(request_id: int):
        return respond(svc.cancel_request, student_id=current_user_id(), request_id=request_id)

    # ===== STAFF =====

    @app.route("/api/courses/<int:course_id>/reassignments", methods=["GET"], endpoint="reassignments_for_course")
    @staff_required
    def reassignments_for_course(course_id: int):
        return respond(
            lambda: svc.list_for_course(
                current_role=current_role(),
                current_user_id=current_user_id(),
                course_id=course_id,
                status=enum_arg(RequestStatus, request.args.get("status"), "status"),
            )
        )

    @app.route("/api/reassignments/<int:request_id>/decision", methods=["POST"], endpoint="reassignments_decide")
    @staff_required
    def reassignments_decide(request_id: int):
        data = json_body()
        return respond(
            lambda: svc.process_request(
                current_role=current_role(),
                current_user_id=current_user_id(),
                request_id=request_id,
                decision=enum_arg(RequestStatus, data.get("decision"), "decision"),
            )
        )
