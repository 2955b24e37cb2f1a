from __future__ import annotations

from flask import Flask

from ..container import Container
from ..core.constants import DEFAULT_CLASS_CAPACITY
from ..web import current_role, current_user_id, json_body, respond, staff_required


def register(app: Flask, container: Container) -> None:
    svc = container.class_service

    @app.route("/api/courses/<int:course_id>/classes", methods=["GET"], endpoint="classes_list")
    @staff_required
    def classes_list(course_id: int):
        return respond(svc.list_for_course, course_id)

    @app.route("/api/courses/<int:course_id>/classes", methods=["POST"], endpoint="classes_create")
    @staff_required
    def classes_create(course_id: int):
        data = json_body()
        return respond(
            svc.create_class,
            current_role=current_role(),
            current_user_id=current_user_id(),
            course_id=course_id,
            name=data.get("name", ""),
            capacity=data.get("capacity", DEFAULT_CLASS_CAPACITY),
            success_status=201,
        )

    @app.route("/api/classes/<int:class_id>", methods=["GET"], endpoint="classes_get")
    @staff_required
    def classes_get(class_id: int):
        return respond(svc.get_class, class_id)

    @app.route("/api/classes/<int:class_id>", methods=["PUT"], endpoint="classes_update")
    @staff_required
    def classes_update(class_id: int):
        data = json_body()
        return respond(
            svc.update_class,
            current_role=current_role(),
            current_user_id=current_user_id(),
            class_id=class_id,
            name=data.get("name", ""),
            capacity=data.get("capacity"),
        )

    @app.route("/api/classes/<int:class_id>", methods=["DELETE"], endpoint="classes_delete")
    @staff_required
    def classes_delete(class_id: int):
        return respond(svc.delete_class, current_role=current_role(), current_user_id=current_user_id(), class_id=class_id)
