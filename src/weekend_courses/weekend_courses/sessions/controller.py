from __future__ import annotations

from flask import Flask, request

from ..container import Container
from ..core.enums import WeekDay
from ..web import current_role, current_user_id, enum_arg, int_field, json_body, respond, staff_required
from .service import parse_weekday


def register(app: Flask, container: Container) -> None:
    svc = container.session_service

    @app.route("/api/classes/<int:class_id>/sessions", methods=["GET"], endpoint="sessions_list")
    @staff_required
    def sessions_list(class_id: int):
        return respond(lambda: svc.list_for_class(class_id, day=enum_arg(WeekDay, request.args.get("day"), "day")))

    @app.route("/api/classes/<int:class_id>/sessions", methods=["POST"], endpoint="sessions_create")
    @staff_required
    def sessions_create(class_id: int):
        data = json_body()
        return respond(
            svc.create_session,
            current_role=current_role(),
            current_user_id=current_user_id(),
            class_id=class_id,
            day=data.get("day"),
            start_time=data.get("start_time", ""),
            end_time=data.get("end_time", ""),
            capacity=data.get("capacity"),
            success_status=201,
        )

    @app.route("/api/classes/<int:class_id>/sessions/check", methods=["POST"], endpoint="sessions_check")
    @staff_required
    def sessions_check(class_id: int):
        """Dry-run the time rules and overlap check for a proposed slot."""
        data = json_body()
        return respond(
            lambda: svc.check_time(
                class_id=class_id,
                day=parse_weekday(data.get("day")),
                start_time=data.get("start_time", ""),
                end_time=data.get("end_time", ""),
                exclude_session_id=int_field(data, "exclude_session_id", required=False),
            )
        )

    @app.route("/api/sessions/<int:session_id>", methods=["GET"], endpoint="sessions_get")
    @staff_required
    def sessions_get(session_id: int):
        return respond(svc.capacity_info, session_id)

    @app.route("/api/sessions/<int:session_id>", methods=["PUT"], endpoint="sessions_update")
    @staff_required
    def sessions_update(session_id: int):
        data = json_body()
        return respond(
            svc.update_session,
            current_role=current_role(),
            current_user_id=current_user_id(),
            session_id=session_id,
            day=data.get("day"),
            start_time=data.get("start_time", ""),
            end_time=data.get("end_time", ""),
            capacity=data.get("capacity"),
        )

    @app.route("/api/sessions/<int:session_id>", methods=["DELETE"], endpoint="sessions_delete")
    @staff_required
    def sessions_delete(session_id: int):
        return respond(
            svc.delete_session, current_role=current_role(), current_user_id=current_user_id(), session_id=session_id
        )
