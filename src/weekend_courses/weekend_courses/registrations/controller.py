from __future__ import annotations

from flask import Flask, request

from ..container import Container
from ..core.enums import CourseStatus, RegistrationStatus
from ..core.exceptions import FieldValidationError
from ..web import current_role, current_user_id, enum_arg, json_body, respond, staff_required


def register(app: Flask, container: Container) -> None:
    svc = container.registration_service

    # ===== PUBLIC SIGN-UP =====

    @app.route("/register/courses", methods=["GET"], endpoint="register_courses")
    def register_courses():
        return respond(lambda: container.course_service.list_courses(status=CourseStatus.ACTIVE))

    @app.route("/register/courses/<int:course_id>/classes", methods=["GET"], endpoint="register_classes")
    def register_classes(course_id: int):
        return respond(container.class_service.list_for_course, course_id)

    @app.route(
        "/register/courses/<int:course_id>/classes/<int:class_id>/sessions",
        methods=["GET"],
        endpoint="register_sessions",
    )
    def register_sessions(course_id: int, class_id: int):
        return respond(svc.available_sessions, course_id=course_id, class_id=class_id)

    @app.route("/register", methods=["POST"], endpoint="register_submit")
    def register_submit():
        return respond(svc.submit_registration, json_body(), success_status=201)

    # ===== STAFF REVIEW =====

    @app.route("/api/courses/<int:course_id>/registrations", methods=["GET"], endpoint="registrations_list")
    @staff_required
    def registrations_list(course_id: int):
        return respond(
            lambda: svc.list_for_course(
                current_role=current_role(),
                current_user_id=current_user_id(),
                course_id=course_id,
                status=enum_arg(RegistrationStatus, request.args.get("status"), "status"),
            )
        )

    @app.route("/api/registrations/<int:registration_id>/approve", methods=["POST"], endpoint="registrations_approve")
    @staff_required
    def registrations_approve(registration_id: int):
        return respond(
            svc.approve, current_role=current_role(), current_user_id=current_user_id(), registration_id=registration_id
        )

    @app.route("/api/registrations/<int:registration_id>/reject", methods=["POST"], endpoint="registrations_reject")
    @staff_required
    def registrations_reject(registration_id: int):
        data = json_body()
        return respond(
            svc.reject,
            current_role=current_role(),
            current_user_id=current_user_id(),
            registration_id=registration_id,
            reason=data.get("reason"),
        )

    @app.route("/api/registrations/bulk-approve", methods=["POST"], endpoint="registrations_bulk_approve")
    @staff_required
    def registrations_bulk_approve():
        data = json_body()

        def _bulk():
            ids = data.get("registration_ids")
            if not isinstance(ids, list):
                raise FieldValidationError({"registration_ids": "Must be a list of ids"})
            try:
                ids = [int(i) for i in ids]
            except (TypeError, ValueError):
                raise FieldValidationError({"registration_ids": "Must be a list of ids"})
            return svc.bulk_approve(current_role=current_role(), current_user_id=current_user_id(), registration_ids=ids)

        return respond(_bulk)
