from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify, session

from ..container import Container
from ..web import admin_required, current_role, current_user_id, json_body, login_required, respond


def register(app: Flask, container: Container) -> None:
    @app.route("/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()

        def _login():
            s_user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))

            session.clear()
            session.permanent = bool(data.get("remember_me"))
            app.permanent_session_lifetime = timedelta(days=7)

            session["user_id"] = s_user.user_id
            session["name"] = s_user.full_name
            session["role"] = s_user.role.value
            session["course_id"] = s_user.course_id
            return s_user

        return respond(_login)

    @app.route("/auth/student-login", methods=["POST"], endpoint="student_login")
    def student_login():
        data = json_body()

        def _login():
            s_user = container.auth_service.authenticate_student(
                data.get("student_number", ""),
                phone_number=data.get("phone_number"),
                email=data.get("email"),
            )

            session.clear()
            session["user_id"] = s_user.user_id
            session["name"] = s_user.full_name
            session["role"] = s_user.role.value
            session["class_id"] = s_user.class_id
            return s_user

        return respond(_login)

    @app.route("/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"success": True, "data": None})

    @app.route("/auth/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        return jsonify(
            {
                "success": True,
                "data": {
                    "user_id": session["user_id"],
                    "full_name": session.get("name"),
                    "role": session.get("role"),
                    "course_id": session.get("course_id"),
                },
            }
        )

    @app.route("/auth/change-password", methods=["POST"], endpoint="change_password")
    @login_required
    def change_password():
        data = json_body()
        return respond(
            container.account_service.change_password,
            current_role=current_role(),
            current_user_id=current_user_id(),
            current_password=data.get("current_password", ""),
            new_password=data.get("new_password", ""),
        )

    @app.route("/api/teachers/<int:teacher_id>/reset-password", methods=["POST"], endpoint="reset_teacher_password")
    @admin_required
    def reset_teacher_password(teacher_id: int):
        return respond(container.account_service.reset_teacher_password, current_role=current_role(), teacher_id=teacher_id)
