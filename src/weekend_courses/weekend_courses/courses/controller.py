from __future__ import annotations

from flask import Flask, request

from ..container import Container
from ..core.enums import CourseStatus
from ..users.model import Teacher
from ..web import (
    admin_required,
    current_role,
    current_user_id,
    date_arg,
    enum_arg,
    int_field,
    json_body,
    respond,
    staff_required,
)


def teacher_view(t: Teacher) -> dict:
    return {
        "teacher_id": t.teacher_id,
        "email": t.email,
        "full_name": t.full_name,
        "course_id": t.course_id,
        "role": t.role.value,
        "is_active": t.is_active,
    }


def register(app: Flask, container: Container) -> None:
    svc = container.course_service

    @app.route("/api/courses", methods=["GET"], endpoint="courses_list")
    @staff_required
    def courses_list():
        return respond(lambda: svc.list_courses(status=enum_arg(CourseStatus, request.args.get("status"), "status")))

    @app.route("/api/courses", methods=["POST"], endpoint="courses_create")
    @admin_required
    def courses_create():
        data = json_body()
        return respond(
            lambda: svc.create_course_with_head_teacher(
                current_role=current_role(),
                name=data.get("name", ""),
                head_email=data.get("head_email", ""),
                head_full_name=data.get("head_full_name", ""),
                head_password=data.get("head_password", ""),
                end_date=date_arg(data.get("end_date"), "end_date"),
            ),
            success_status=201,
        )

    @app.route("/api/courses/<int:course_id>", methods=["GET"], endpoint="courses_get")
    @staff_required
    def courses_get(course_id: int):
        return respond(svc.get_course, course_id)

    @app.route("/api/courses/<int:course_id>", methods=["PUT"], endpoint="courses_update")
    @staff_required
    def courses_update(course_id: int):
        data = json_body()
        return respond(
            lambda: svc.update_course(
                current_role=current_role(),
                current_user_id=current_user_id(),
                course_id=course_id,
                name=data.get("name", ""),
                end_date=date_arg(data.get("end_date"), "end_date"),
            )
        )

    @app.route("/api/courses/<int:course_id>/head-teacher", methods=["POST"], endpoint="courses_replace_head")
    @admin_required
    def courses_replace_head(course_id: int):
        data = json_body()
        return respond(
            lambda: svc.replace_head_teacher(
                current_role=current_role(),
                course_id=course_id,
                new_teacher_id=int_field(data, "teacher_id"),
                remove_old=bool(data.get("remove_old", False)),
            )
        )

    @app.route("/api/courses/<int:course_id>/deactivate", methods=["POST"], endpoint="courses_deactivate")
    @admin_required
    def courses_deactivate(course_id: int):
        return respond(svc.deactivate_course, current_role=current_role(), course_id=course_id)

    @app.route("/api/courses/<int:course_id>/complete", methods=["POST"], endpoint="courses_complete")
    @admin_required
    def courses_complete(course_id: int):
        return respond(svc.complete_course, current_role=current_role(), course_id=course_id)

    @app.route("/api/courses/<int:course_id>/teachers", methods=["GET"], endpoint="courses_teachers")
    @staff_required
    def courses_teachers(course_id: int):
        return respond(lambda: [teacher_view(t) for t in svc.list_teachers(course_id)])

    @app.route("/api/courses/<int:course_id>/teachers", methods=["POST"], endpoint="courses_add_teacher")
    @staff_required
    def courses_add_teacher(course_id: int):
        data = json_body()
        return respond(
            lambda: teacher_view(
                svc.add_teacher(
                    current_role=current_role(),
                    current_user_id=current_user_id(),
                    course_id=course_id,
                    email=data.get("email", ""),
                    full_name=data.get("full_name", ""),
                    password=data.get("password", ""),
                )
            ),
            success_status=201,
        )

    @app.route(
        "/api/courses/<int:course_id>/teachers/<int:teacher_id>", methods=["DELETE"], endpoint="courses_remove_teacher"
    )
    @staff_required
    def courses_remove_teacher(course_id: int, teacher_id: int):
        return respond(
            svc.remove_teacher,
            current_role=current_role(),
            current_user_id=current_user_id(),
            course_id=course_id,
            teacher_id=teacher_id,
        )
