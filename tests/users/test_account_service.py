from __future__ import annotations

import pytest
from werkzeug.security import check_password_hash, generate_password_hash

from src.weekend_courses.weekend_courses.core.enums import Role
from src.weekend_courses.weekend_courses.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    FieldValidationError,
    ValidationError,
)
from src.weekend_courses.weekend_courses.students.model import NewStudent


@pytest.fixture
def teacher(world):
    course = world.add_course()
    return world.add_teacher(course, email="ada@example.com", password_hash=generate_password_hash("Weekend2026"))


def test_login_teacher(container, teacher):
    user = container.auth_service.authenticate("ADA@example.com", "Weekend2026")

    assert user.role == Role.TEACHER
    assert user.user_id == teacher.teacher_id
    assert user.course_id == teacher.course_id


def test_login_wrong_password(container, teacher):
    with pytest.raises(AuthenticationError):
        container.auth_service.authenticate("ada@example.com", "wrong")


def test_login_placeholder_hash_never_matches(world, container):
    world.add_admin(email="root@example.com", password_hash="CHANGE_ME")

    with pytest.raises(AuthenticationError):
        container.auth_service.authenticate("root@example.com", "CHANGE_ME")


def test_change_password(world, container, teacher):
    container.account_service.change_password(
        current_role=Role.TEACHER,
        current_user_id=teacher.teacher_id,
        current_password="Weekend2026",
        new_password="Saturday2027",
    )

    assert check_password_hash(world.teachers.get_by_id(teacher.teacher_id).password_hash, "Saturday2027")


def test_change_password_checks_current_and_strength(container, teacher):
    with pytest.raises(ValidationError):
        container.account_service.change_password(
            current_role=Role.TEACHER,
            current_user_id=teacher.teacher_id,
            current_password="nope",
            new_password="Saturday2027",
        )
    with pytest.raises(FieldValidationError):
        container.account_service.change_password(
            current_role=Role.TEACHER,
            current_user_id=teacher.teacher_id,
            current_password="Weekend2026",
            new_password="weak",
        )


def test_reset_mails_temporary_password(world, container, teacher):
    container.account_service.reset_teacher_password(current_role=Role.ADMIN, teacher_id=teacher.teacher_id)

    kind, sent = world.notifier.sent[-1]
    assert kind == "password_reset"
    assert sent["to"] == "ada@example.com"
    stored = world.teachers.get_by_id(teacher.teacher_id).password_hash
    assert check_password_hash(stored, sent["temporary_password"])


def test_only_admin_resets(container, teacher):
    with pytest.raises(AuthorizationError):
        container.account_service.reset_teacher_password(current_role=Role.TEACHER, teacher_id=teacher.teacher_id)


@pytest.fixture
def student(world):
    klass = world.add_class(world.add_course())
    student_id = world.students.create(
        uuid="0b7f3c7e-8d1a-4f57-9c1e-2a6d4b8e9f01",
        class_id=klass.class_id,
        data=NewStudent(
            student_number="STU00042",
            surname="Bello",
            first_name="Amina",
            last_name=None,
            email="amina@example.com",
            phone_number="+2348012345678",
        ),
    )
    return world.students.get_by_id(student_id)


def test_student_login_with_phone(container, student):
    user = container.auth_service.authenticate_student("stu00042", phone_number="+234 801 234 5678")

    assert user.role == Role.STUDENT
    assert user.user_id == student.student_id
    assert user.class_id == student.class_id


def test_student_login_with_email(container, student):
    user = container.auth_service.authenticate_student("STU00042", email=" Amina@Example.com ")

    assert user.user_id == student.student_id


def test_student_login_needs_matching_contact(container, student):
    with pytest.raises(AuthenticationError):
        container.auth_service.authenticate_student("STU00042", phone_number="+2348000000000")
    with pytest.raises(AuthenticationError):
        container.auth_service.authenticate_student("STU00099", email="amina@example.com")


def test_student_login_needs_some_contact(container, student):
    with pytest.raises(ValidationError):
        container.auth_service.authenticate_student("STU00042")


def test_soft_deleted_student_cannot_log_in(world, container, student):
    world.students.soft_delete(student.student_id)

    with pytest.raises(AuthenticationError):
        container.auth_service.authenticate_student("STU00042", email="amina@example.com")
